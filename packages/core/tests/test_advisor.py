"""Tests for the deduction advisor.

Covers each heuristic rule's gating, ranking (including tie order), the
aggregate analysis and the proposed-deduction strategy.
"""

from decimal import Decimal

import pytest

from taxapp_core import (
    AdvisorSettings,
    BusinessCategory,
    BusinessDeductionCategory,
    ConfigurationMissingError,
    DeductionAdvisor,
    DeductionData,
    DeductionRecommendation,
    FilingStatus,
    IncomeData,
    ItemizedCategory,
    ItemizedDeduction,
    ItemizedDeductionCategory,
    ProposedDeduction,
    SelfEmploymentIncome,
    StrategyRecommendation,
    TaxCalculator,
    TaxLawRegistry,
    TaxReturn,
    WageIncome,
)
from taxapp_core.advisor import estimate_tax_savings, rank_recommendations


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def registry() -> TaxLawRegistry:
    registry = TaxLawRegistry()
    registry.initialize_default_configurations()
    return registry


@pytest.fixture
def calculator(registry: TaxLawRegistry) -> TaxCalculator:
    return TaxCalculator(registry)


@pytest.fixture
def advisor(calculator: TaxCalculator, registry: TaxLawRegistry) -> DeductionAdvisor:
    """Advisor with default heuristics."""
    return DeductionAdvisor(calculator, registry, settings=AdvisorSettings())


def make_return(
    wages: str = "60000",
    itemized: dict[ItemizedDeductionCategory, str] | None = None,
    self_employment: str | None = None,
    total_itemized: str | None = None,
) -> TaxReturn:
    """Single 2024 return with optional itemized entries and a business."""
    entries = [
        ItemizedDeduction(category=category, description=category.value, amount=Decimal(amount))
        for category, amount in (itemized or {}).items()
    ]
    businesses = []
    if self_employment is not None:
        businesses.append(
            SelfEmploymentIncome(business_name="Studio", net_profit=Decimal(self_employment))
        )
    return TaxReturn(
        id="return-advice",
        tax_year=2024,
        filing_status=FilingStatus.SINGLE,
        income=IncomeData(
            wages=[
                WageIncome(
                    employer_name="Acme Corp",
                    wages=Decimal(wages),
                    federal_tax_withheld=Decimal("5000"),
                )
            ],
            self_employment=businesses,
        ),
        deductions=DeductionData(
            itemized_deductions=entries,
            total_itemized_deductions=Decimal(total_itemized) if total_itemized else None,
        ),
    )


def categories(recommendations: list[DeductionRecommendation]) -> list:
    return [r.category.category for r in recommendations]


def descriptions_containing(recommendations: list[DeductionRecommendation], text: str) -> list:
    return [r for r in recommendations if text in r.description]


# =============================================================================
# RANKING
# =============================================================================

class TestRanking:
    """Recommendations are ordered by potential savings."""

    def test_baseline_recommendations(self, advisor: DeductionAdvisor):
        """60k single wage earner gets nine suggestions, best first."""
        recommendations = advisor.generate_recommendations(make_return())

        savings = [r.potential_savings for r in recommendations]
        assert savings == [
            Decimal("1760.00"),  # mortgage
            Decimal("1430.00"),  # IRA
            Decimal("1320.00"),  # health premiums
            Decimal("990.22"),   # medical floor gap
            Decimal("913.00"),   # HSA
            Decimal("880.00"),   # tuition
            Decimal("660.00"),   # SALT
            Decimal("330.00"),   # student loan
            Decimal("264.00"),   # charitable
        ]

    def test_sorted_descending(self, advisor: DeductionAdvisor):
        """Non-increasing savings throughout."""
        recommendations = advisor.generate_recommendations(
            make_return(wages="120000", self_employment="30000")
        )
        savings = [r.potential_savings for r in recommendations]
        assert savings == sorted(savings, reverse=True)

    def test_ties_keep_rule_order(self, calculator: TaxCalculator, registry: TaxLawRegistry):
        """Equal savings appear in rule evaluation order."""
        settings = AdvisorSettings(
            home_office_amount=Decimal("1000"),
            vehicle_amount=Decimal("1000"),
            professional_services_amount=Decimal("1000"),
            ira_contribution_limit=Decimal("1000"),
        )
        advisor = DeductionAdvisor(calculator, registry, settings=settings)

        recommendations = advisor.generate_recommendations(
            make_return(wages="50000", self_employment="10000")
        )
        tied = [r for r in recommendations if r.potential_savings == Decimal("220.00")]

        assert categories(tied) == [
            BusinessDeductionCategory.OFFICE_EXPENSES,
            BusinessDeductionCategory.VEHICLE,
            BusinessDeductionCategory.PROFESSIONAL_SERVICES,
            ItemizedDeductionCategory.MISCELLANEOUS,
        ]
        assert "IRA" in tied[-1].description

    def test_rank_recommendations_is_stable(self):
        """Direct check on the ranking helper."""
        def rec(name: str, savings: str) -> DeductionRecommendation:
            return DeductionRecommendation(
                category=ItemizedCategory(category=ItemizedDeductionCategory.MISCELLANEOUS),
                description=name,
                estimated_amount=Decimal("0"),
                confidence=0.5,
                potential_savings=Decimal(savings),
            )

        ranked = rank_recommendations([rec("a", "10"), rec("b", "20"), rec("c", "10"), rec("d", "20")])
        assert [r.description for r in ranked] == ["b", "d", "a", "c"]

    def test_estimate_tax_savings_rounds_to_cents(self):
        """Savings is amount times rate, half-up to cents."""
        assert estimate_tax_savings(Decimal("4501"), Decimal("0.22")) == Decimal("990.22")
        assert estimate_tax_savings(Decimal("0.5"), Decimal("0.25")) == Decimal("0.13")


# =============================================================================
# RULES
# =============================================================================

class TestMedicalRule:
    """Medical expenses versus the AGI floor."""

    def test_gap_to_floor(self, advisor: DeductionAdvisor):
        """Recommend one dollar past 7.5% of AGI."""
        recommendations = advisor.generate_recommendations(make_return())
        gap = descriptions_containing(recommendations, "more in medical expenses")

        assert len(gap) == 1
        assert gap[0].estimated_amount == Decimal("4501.00")
        assert gap[0].confidence == 0.8

    def test_no_gap_when_over_floor(self, advisor: DeductionAdvisor):
        """Expenses at or above the floor need no top-up."""
        recommendations = advisor.generate_recommendations(
            make_return(itemized={ItemizedDeductionCategory.MEDICAL_DENTAL: "5000"})
        )
        assert descriptions_containing(recommendations, "more in medical expenses") == []

    def test_premiums_require_agi_over_floor(self, advisor: DeductionAdvisor):
        """Premium suggestion only above 50k AGI."""
        low = advisor.generate_recommendations(make_return(wages="50000"))
        high = advisor.generate_recommendations(make_return(wages="50001"))

        assert descriptions_containing(low, "health insurance premiums") == []
        assert len(descriptions_containing(high, "health insurance premiums")) == 1


class TestStateLocalTaxRule:
    """SALT recommendations respect the cap."""

    def _salt(self, recommendations):
        return [
            r for r in recommendations
            if r.category.category == ItemizedDeductionCategory.STATE_LOCAL_TAXES
        ]

    def test_suggestion_capped(self, advisor: DeductionAdvisor):
        """Never suggests more than the suggestion cap."""
        salt = self._salt(advisor.generate_recommendations(make_return()))
        assert salt[0].estimated_amount == Decimal("3000.00")

    def test_remaining_room_below_suggestion_cap(self, advisor: DeductionAdvisor):
        """With 8500 claimed, only 1500 of room is left."""
        salt = self._salt(advisor.generate_recommendations(
            make_return(itemized={ItemizedDeductionCategory.STATE_LOCAL_TAXES: "8500"})
        ))
        assert salt[0].estimated_amount == Decimal("1500.00")

    def test_none_at_cap(self, advisor: DeductionAdvisor):
        """No recommendation once the cap is reached."""
        salt = self._salt(advisor.generate_recommendations(
            make_return(itemized={ItemizedDeductionCategory.STATE_LOCAL_TAXES: "10000"})
        ))
        assert salt == []


class TestMortgageRule:
    """Mortgage interest suggestion gating."""

    def _mortgage(self, recommendations):
        return [
            r for r in recommendations
            if r.category.category == ItemizedDeductionCategory.MORTGAGE_INTEREST
        ]

    def test_suggested_without_mortgage(self, advisor: DeductionAdvisor):
        mortgage = self._mortgage(advisor.generate_recommendations(make_return()))
        assert mortgage[0].estimated_amount == Decimal("8000.00")
        assert mortgage[0].confidence == 0.5

    def test_skipped_when_already_claimed(self, advisor: DeductionAdvisor):
        recommendations = advisor.generate_recommendations(
            make_return(itemized={ItemizedDeductionCategory.MORTGAGE_INTEREST: "9000"})
        )
        assert self._mortgage(recommendations) == []

    def test_skipped_at_agi_floor(self, advisor: DeductionAdvisor):
        """AGI must exceed 40k, not merely equal it."""
        recommendations = advisor.generate_recommendations(make_return(wages="40000"))
        assert self._mortgage(recommendations) == []


class TestCharitableRule:
    """Charitable giving up to the lesser of 2% of AGI and the cap."""

    def _charitable(self, recommendations):
        return [
            r for r in recommendations
            if r.category.category == ItemizedDeductionCategory.CHARITABLE_CONTRIBUTIONS
        ]

    def test_two_percent_of_agi(self, advisor: DeductionAdvisor):
        charitable = self._charitable(advisor.generate_recommendations(make_return()))
        assert charitable[0].estimated_amount == Decimal("1200.00")

    def test_capped_for_high_agi(self, advisor: DeductionAdvisor):
        charitable = self._charitable(advisor.generate_recommendations(make_return(wages="200000")))
        assert charitable[0].estimated_amount == Decimal("2000.00")

    def test_gap_after_existing_gifts(self, advisor: DeductionAdvisor):
        charitable = self._charitable(advisor.generate_recommendations(
            make_return(itemized={ItemizedDeductionCategory.CHARITABLE_CONTRIBUTIONS: "700"})
        ))
        assert charitable[0].estimated_amount == Decimal("500.00")

    def test_none_when_target_met(self, advisor: DeductionAdvisor):
        charitable = self._charitable(advisor.generate_recommendations(
            make_return(itemized={ItemizedDeductionCategory.CHARITABLE_CONTRIBUTIONS: "1200"})
        ))
        assert charitable == []


class TestBusinessRule:
    """Schedule C suggestions only for the self-employed."""

    def test_no_business_no_suggestions(self, advisor: DeductionAdvisor):
        recommendations = advisor.generate_recommendations(make_return())
        assert not any(isinstance(r.category, BusinessCategory) for r in recommendations)

    def test_three_business_suggestions(self, advisor: DeductionAdvisor):
        recommendations = advisor.generate_recommendations(
            make_return(wages="40000", self_employment="20000")
        )
        business = [r for r in recommendations if isinstance(r.category, BusinessCategory)]

        amounts = {r.category.category: r.estimated_amount for r in business}
        assert amounts == {
            BusinessDeductionCategory.VEHICLE: Decimal("2000.00"),
            BusinessDeductionCategory.OFFICE_EXPENSES: Decimal("1200.00"),
            BusinessDeductionCategory.PROFESSIONAL_SERVICES: Decimal("800.00"),
        }


class TestEducationAndRetirementRules:
    """AGI ceilings on education and HSA suggestions."""

    def test_student_loan_only_between_ceilings(self, advisor: DeductionAdvisor):
        """At 82k AGI student loan interest applies, tuition does not."""
        recommendations = advisor.generate_recommendations(make_return(wages="82000"))
        assert len(descriptions_containing(recommendations, "Student loan")) == 1
        assert descriptions_containing(recommendations, "Tuition") == []

    def test_no_education_above_ceilings(self, advisor: DeductionAdvisor):
        recommendations = advisor.generate_recommendations(make_return(wages="90000"))
        assert descriptions_containing(recommendations, "Student loan") == []
        assert descriptions_containing(recommendations, "Tuition") == []

    def test_ira_always_suggested(self, advisor: DeductionAdvisor):
        recommendations = advisor.generate_recommendations(make_return(wages="500000"))
        ira = descriptions_containing(recommendations, "Traditional IRA")
        assert len(ira) == 1
        assert ira[0].estimated_amount == Decimal("6500.00")

    def test_hsa_requires_agi_below_ceiling(self, advisor: DeductionAdvisor):
        below = advisor.generate_recommendations(make_return(wages="99999"))
        at = advisor.generate_recommendations(make_return(wages="100000"))
        assert len(descriptions_containing(below, "HSA")) == 1
        assert descriptions_containing(at, "HSA") == []

    def test_settings_override_limits(self, calculator: TaxCalculator, registry: TaxLawRegistry):
        """Limits come from AdvisorSettings."""
        advisor = DeductionAdvisor(
            calculator, registry, settings=AdvisorSettings(ira_contribution_limit=Decimal("7000"))
        )
        ira = descriptions_containing(advisor.generate_recommendations(make_return()), "Traditional IRA")
        assert ira[0].estimated_amount == Decimal("7000.00")


# =============================================================================
# ANALYSIS
# =============================================================================

class TestAnalyze:
    """Aggregate analysis of a return."""

    def test_potential_savings_is_sum(self, advisor: DeductionAdvisor):
        analysis = advisor.analyze(make_return())

        assert analysis.recommendation_count == 9
        assert analysis.potential_savings == Decimal("8547.22")
        assert analysis.potential_savings == sum(
            (r.potential_savings for r in analysis.recommendations), Decimal("0")
        )

    def test_standard_vs_itemized_standard(self, advisor: DeductionAdvisor):
        verdict = advisor.analyze(make_return()).standard_vs_itemized

        assert verdict.use_itemized is False
        assert verdict.standard_amount == Decimal("14600")
        assert verdict.itemized_amount == Decimal("0")
        assert verdict.deduction_amount == Decimal("14600")
        assert verdict.savings == Decimal("0")

    def test_standard_vs_itemized_itemized(self, advisor: DeductionAdvisor):
        verdict = advisor.analyze(make_return(total_itemized="18000")).standard_vs_itemized

        assert verdict.use_itemized is True
        assert verdict.deduction_amount == Decimal("18000")
        assert verdict.savings == Decimal("3400")

    def test_serialized_category_carries_kind(self, advisor: DeductionAdvisor):
        """The category union is tagged in JSON output."""
        data = advisor.analyze(make_return(self_employment="5000")).model_dump(mode="json")
        kinds = {r["category"]["kind"] for r in data["recommendations"]}
        assert kinds == {"itemized", "business"}
        assert data["recommendation_count"] == len(data["recommendations"])

    def test_unknown_year_propagates(self, advisor: DeductionAdvisor):
        tax_return = make_return().model_copy(update={"tax_year": 2019})
        with pytest.raises(ConfigurationMissingError):
            advisor.analyze(tax_return)


class TestDeductionStrategy:
    """What-if analysis of proposed itemized deductions."""

    def test_proposal_that_beats_standard(self, advisor: DeductionAdvisor):
        """12k + 5k itemized beats 14.6k standard."""
        tax_return = make_return(total_itemized="12000")
        strategy = advisor.analyze_deduction_strategy(
            tax_return,
            [ProposedDeduction(category="charitable_contributions", amount=Decimal("5000"))],
        )

        assert strategy.current_tax == Decimal("5295.50")
        # taxable 43000: 1100 + 32000 * 0.12
        assert strategy.new_tax == Decimal("4940.00")
        assert strategy.savings == Decimal("355.50")
        assert strategy.recommendation == StrategyRecommendation.ITEMIZE

    def test_proposal_below_standard(self, advisor: DeductionAdvisor):
        tax_return = make_return(total_itemized="12000")
        strategy = advisor.analyze_deduction_strategy(
            tax_return,
            [ProposedDeduction(category="charitable_contributions", amount=Decimal("1000"))],
        )

        assert strategy.savings == Decimal("0.00")
        assert strategy.recommendation == StrategyRecommendation.STANDARD

    def test_callers_return_not_mutated(self, advisor: DeductionAdvisor):
        tax_return = make_return(total_itemized="12000")
        advisor.analyze_deduction_strategy(
            tax_return,
            [
                ProposedDeduction(category="mortgage_interest", amount=Decimal("6000")),
                ProposedDeduction(category="charitable_contributions", amount=Decimal("2000")),
            ],
        )
        assert tax_return.deductions.total_itemized_deductions == Decimal("12000")
