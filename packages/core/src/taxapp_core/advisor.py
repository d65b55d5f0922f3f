"""Deduction recommendations for an individual return.

The advisor recomputes the return to learn its AGI and marginal rate, then
runs a fixed sequence of independent heuristic rules. Each rule looks at
one deduction area and emits zero or more recommendations.

Ranking contract: recommendations are ordered by ``potential_savings``,
highest first. Recommendations with equal savings keep the order in which
their rules ran (medical, SALT, mortgage, charitable, business, education,
retirement), and within a rule the order the rule emitted them.
"""

from decimal import Decimal
from operator import attrgetter
from typing import Callable, Optional, Sequence

import structlog

from .calculator import TaxCalculator
from .config import AdvisorSettings
from .models import (
    BusinessDeductionCategory,
    DeductionAnalysis,
    DeductionRecommendation,
    DeductionStrategy,
    ItemizedDeductionCategory,
    ProposedDeduction,
    RecommendationCategory,
    StandardVsItemized,
    StrategyRecommendation,
    TaxCalculation,
    TaxReturn,
    business,
    itemized,
)
from .money import format_currency, round_money, total
from .registry import TaxLawRegistry

logger = structlog.get_logger()


def estimate_tax_savings(deduction_amount: Decimal, marginal_tax_rate: Decimal) -> Decimal:
    """Tax saved by a deduction at the marginal rate, rounded to cents."""
    return round_money(deduction_amount * marginal_tax_rate)


def rank_recommendations(
    recommendations: Sequence[DeductionRecommendation],
) -> list[DeductionRecommendation]:
    """Order by potential savings, highest first; ties keep input order.

    ``sorted`` is stable and stays stable with ``reverse=True``, which is
    what preserves rule-evaluation order among equal savings.
    """
    return sorted(recommendations, key=attrgetter("potential_savings"), reverse=True)


class DeductionAdvisor:
    """
    Recommend deductions that could lower a return's tax.

    Args:
        calculator: Calculator used to obtain AGI and the marginal rate
        registry: Tax law registry (for the standard deduction)
        settings: Heuristic thresholds; defaults come from the environment
    """

    def __init__(
        self,
        calculator: TaxCalculator,
        registry: TaxLawRegistry,
        settings: Optional[AdvisorSettings] = None,
    ):
        self.calculator = calculator
        self.registry = registry
        self.settings = settings or AdvisorSettings()

    @property
    def _rules(self) -> list[Callable[[TaxReturn, TaxCalculation], list[DeductionRecommendation]]]:
        """Rules in evaluation order."""
        return [
            self._analyze_medical,
            self._analyze_state_local_taxes,
            self._analyze_mortgage_interest,
            self._analyze_charitable,
            self._analyze_business,
            self._analyze_education,
            self._analyze_retirement,
        ]

    def _recommend(
        self,
        calculation: TaxCalculation,
        category: RecommendationCategory,
        description: str,
        estimated_amount: Decimal,
        confidence: float,
        required_documents: list[str],
    ) -> DeductionRecommendation:
        estimated_amount = round_money(estimated_amount)
        return DeductionRecommendation(
            category=category,
            description=description,
            estimated_amount=estimated_amount,
            confidence=confidence,
            required_documents=required_documents,
            potential_savings=estimate_tax_savings(estimated_amount, calculation.marginal_tax_rate),
        )

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _analyze_medical(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        s = self.settings
        agi = calculation.adjusted_gross_income
        threshold = agi * s.medical_agi_floor_rate
        current = tax_return.deductions.itemized_total_for(ItemizedDeductionCategory.MEDICAL_DENTAL)
        recommendations = []

        if current < threshold:
            # One dollar past the floor is the first deductible dollar
            needed = threshold - current + 1
            recommendations.append(self._recommend(
                calculation,
                itemized(ItemizedDeductionCategory.MEDICAL_DENTAL),
                f"You need {format_currency(needed)} more in medical expenses to exceed "
                f"the {s.medical_agi_floor_rate:.1%} AGI threshold ({format_currency(threshold)})",
                needed,
                0.8,
                ["Medical bills", "Insurance statements", "Prescription receipts"],
            ))

        if agi > s.medical_premium_agi_floor:
            recommendations.append(self._recommend(
                calculation,
                itemized(ItemizedDeductionCategory.MEDICAL_DENTAL),
                "Consider deducting health insurance premiums if self-employed "
                "or not covered by employer",
                s.medical_premium_amount,
                0.6,
                ["Health insurance premium statements"],
            ))

        return recommendations

    def _analyze_state_local_taxes(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        s = self.settings
        current = tax_return.deductions.itemized_total_for(
            ItemizedDeductionCategory.STATE_LOCAL_TAXES
        )
        if current >= s.salt_cap:
            return []

        remaining = s.salt_cap - current
        return [self._recommend(
            calculation,
            itemized(ItemizedDeductionCategory.STATE_LOCAL_TAXES),
            f"You can deduct up to {format_currency(remaining)} more in state and local taxes "
            "(property taxes, state income taxes)",
            min(remaining, s.salt_suggestion_cap),
            0.7,
            ["Property tax statements", "State tax returns", "Vehicle registration fees"],
        )]

    def _analyze_mortgage_interest(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        s = self.settings
        has_mortgage = tax_return.deductions.has_itemized(ItemizedDeductionCategory.MORTGAGE_INTEREST)
        if has_mortgage or calculation.adjusted_gross_income <= s.mortgage_agi_floor:
            return []

        return [self._recommend(
            calculation,
            itemized(ItemizedDeductionCategory.MORTGAGE_INTEREST),
            "If you have a mortgage, you may be able to deduct mortgage interest payments",
            s.mortgage_interest_amount,
            0.5,
            ["Form 1098 from mortgage lender", "Mortgage statements"],
        )]

    def _analyze_charitable(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        s = self.settings
        current = tax_return.deductions.itemized_total_for(
            ItemizedDeductionCategory.CHARITABLE_CONTRIBUTIONS
        )
        suggested = min(calculation.adjusted_gross_income * s.charitable_agi_rate, s.charitable_cap)
        if current >= suggested:
            return []

        additional = suggested - current
        return [self._recommend(
            calculation,
            itemized(ItemizedDeductionCategory.CHARITABLE_CONTRIBUTIONS),
            "Consider charitable contributions. You could potentially deduct up to "
            f"{format_currency(additional)} more",
            additional,
            0.4,
            ["Donation receipts", "Acknowledgment letters from charities"],
        )]

    def _analyze_business(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        if not tax_return.income.has_self_employment:
            return []

        s = self.settings
        return [
            self._recommend(
                calculation,
                business(BusinessDeductionCategory.OFFICE_EXPENSES),
                "Home office expenses if you use part of your home exclusively for business",
                s.home_office_amount,
                0.6,
                ["Home office measurements", "Utility bills", "Rent/mortgage statements"],
            ),
            self._recommend(
                calculation,
                business(BusinessDeductionCategory.VEHICLE),
                "Business use of vehicle - mileage or actual expenses",
                s.vehicle_amount,
                0.7,
                ["Mileage log", "Vehicle expense receipts"],
            ),
            self._recommend(
                calculation,
                business(BusinessDeductionCategory.PROFESSIONAL_SERVICES),
                "Professional development, training, and business-related education",
                s.professional_services_amount,
                0.5,
                ["Training receipts", "Professional membership fees"],
            ),
        ]

    def _analyze_education(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        s = self.settings
        agi = calculation.adjusted_gross_income
        recommendations = []

        if agi < s.student_loan_agi_ceiling:
            recommendations.append(self._recommend(
                calculation,
                itemized(ItemizedDeductionCategory.MISCELLANEOUS),
                "Student loan interest payments (up to $2,500 per year)",
                s.student_loan_interest_amount,
                0.4,
                ["Form 1098-E from loan servicer"],
            ))

        if agi < s.tuition_agi_ceiling:
            recommendations.append(self._recommend(
                calculation,
                itemized(ItemizedDeductionCategory.MISCELLANEOUS),
                "Tuition and fees for higher education",
                s.tuition_amount,
                0.3,
                ["Form 1098-T from educational institution", "Tuition receipts"],
            ))

        return recommendations

    def _analyze_retirement(
        self, tax_return: TaxReturn, calculation: TaxCalculation
    ) -> list[DeductionRecommendation]:
        s = self.settings
        recommendations = [self._recommend(
            calculation,
            itemized(ItemizedDeductionCategory.MISCELLANEOUS),
            f"Traditional IRA contribution (up to {format_currency(s.ira_contribution_limit)} "
            f"for {tax_return.tax_year})",
            s.ira_contribution_limit,
            0.8,
            ["IRA contribution statements"],
        )]

        if calculation.adjusted_gross_income < s.hsa_agi_ceiling:
            recommendations.append(self._recommend(
                calculation,
                itemized(ItemizedDeductionCategory.MISCELLANEOUS),
                "Health Savings Account (HSA) contribution if you have a "
                "high-deductible health plan",
                s.hsa_contribution_limit,
                0.5,
                ["HSA contribution statements", "High-deductible health plan documentation"],
            ))

        return recommendations

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def generate_recommendations(
        self,
        tax_return: TaxReturn,
        calculation: Optional[TaxCalculation] = None,
    ) -> list[DeductionRecommendation]:
        """Run every rule and rank the combined output."""
        if calculation is None:
            calculation = self.calculator.compute(tax_return)
        recommendations: list[DeductionRecommendation] = []
        for rule in self._rules:
            recommendations.extend(rule(tax_return, calculation))
        return rank_recommendations(recommendations)

    def analyze(self, tax_return: TaxReturn) -> DeductionAnalysis:
        """
        Ranked deduction recommendations and the standard-vs-itemized verdict.

        Raises:
            ConfigurationMissingError: No configuration for the return's year
        """
        logger.info("deduction_optimization_started", tax_return_id=tax_return.id)

        calculation = self.calculator.compute(tax_return)
        recommendations = self.generate_recommendations(tax_return, calculation)

        itemized_amount = tax_return.itemized_total
        comparison = self.calculator.compare_itemized_vs_standard(
            tax_return.tax_year,
            tax_return.filing_status,
            itemized_amount,
        )
        standard_amount = self.registry.get(tax_return.tax_year).standard_deduction(
            tax_return.filing_status
        )
        potential_savings = total(r.potential_savings for r in recommendations)

        logger.info(
            "deduction_optimization_completed",
            tax_return_id=tax_return.id,
            recommendations_count=len(recommendations),
            potential_savings=str(potential_savings),
        )

        return DeductionAnalysis(
            recommendations=recommendations,
            standard_vs_itemized=StandardVsItemized(
                use_itemized=comparison.use_itemized,
                standard_amount=standard_amount,
                itemized_amount=itemized_amount,
                deduction_amount=comparison.deduction_amount,
                savings=comparison.savings,
            ),
            potential_savings=potential_savings,
        )

    def analyze_deduction_strategy(
        self,
        tax_return: TaxReturn,
        proposed_deductions: Sequence[ProposedDeduction],
    ) -> DeductionStrategy:
        """
        Tax effect of adding proposed itemized deductions.

        The caller's return is left untouched; the proposal is applied to a
        copy.
        """
        current = self.calculator.compute(tax_return)

        additional = total(d.amount for d in proposed_deductions)
        new_itemized_total = tax_return.itemized_total + additional
        modified_return = tax_return.model_copy(update={
            "deductions": tax_return.deductions.model_copy(
                update={"total_itemized_deductions": new_itemized_total}
            ),
        })
        proposed = self.calculator.compute(modified_return)

        standard = self.calculator.standard_deduction_for(
            tax_return.tax_year, tax_return.filing_status
        )
        if new_itemized_total > standard:
            recommendation = StrategyRecommendation.ITEMIZE
        else:
            recommendation = StrategyRecommendation.STANDARD

        logger.info(
            "deduction_strategy_analyzed",
            tax_return_id=tax_return.id,
            proposed_count=len(proposed_deductions),
            additional_itemized=str(additional),
            recommendation=recommendation.value,
        )

        return DeductionStrategy(
            current_tax=current.total_tax_liability,
            new_tax=proposed.total_tax_liability,
            savings=current.total_tax_liability - proposed.total_tax_liability,
            recommendation=recommendation,
        )
