"""Federal income tax calculation for an individual return.

The pipeline runs gross income → AGI → taxable income → bracket tax →
credits → self-employment tax → balance due or refund. All arithmetic is
Decimal; money is rounded half-up to cents and rates to four places only
when the result is assembled.

The calculator holds no per-call state, so one instance can serve any
number of concurrent calculations. Every step is recorded in the result's
audit log and emitted as a structured log event.
"""

from decimal import Decimal
from typing import Optional, Sequence

import structlog

from .exceptions import ConfigurationMissingError
from .models import (
    CalculationStep,
    CreditData,
    DeductionData,
    FilingStatus,
    IncomeData,
    ItemizedComparison,
    TaxBracket,
    TaxCalculation,
    TaxLawConfiguration,
    TaxReturn,
)
from .money import ZERO, ceil_whole, round_money, round_rate, total
from .registry import TaxLawRegistry

logger = structlog.get_logger()


# =============================================================================
# CONSTANTS
# =============================================================================

# Net SE earnings at or below this owe no self-employment tax
SE_TAX_MINIMUM_EARNINGS = Decimal("400")

# Share of net profit subject to SE tax (Schedule SE line 4a)
SE_EARNINGS_FACTOR = Decimal("0.9235")

# Child tax credit phase-out: $50 per $1,000 (or part) of AGI over threshold
CHILD_CREDIT_PHASEOUT_STEP = Decimal("1000")
CHILD_CREDIT_PHASEOUT_AMOUNT = Decimal("50")

# Estimated tax payments are not tracked on the return yet.
ESTIMATED_PAYMENTS = Decimal("0")


# =============================================================================
# PURE CALCULATIONS
# =============================================================================

def calculate_bracket_tax(taxable_income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Progressive tax on taxable income across an ordered bracket schedule.

    The final bracket absorbs all remaining income regardless of its max.

    Args:
        taxable_income: Income after deductions (non-negative)
        brackets: Contiguous brackets in ascending order

    Returns:
        Unrounded tax
    """
    tax = ZERO
    remaining = taxable_income
    last_index = len(brackets) - 1

    for index, bracket in enumerate(brackets):
        if remaining <= 0:
            break
        if index == last_index or bracket.is_unbounded:
            portion = remaining
        else:
            portion = min(remaining, bracket.max - bracket.min)
        tax += portion * bracket.rate
        remaining -= portion

    return tax


def find_marginal_rate(taxable_income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Rate of the bracket whose ``[min, max)`` contains taxable income.

    Income beyond every bound gets the top bracket's rate.
    """
    for bracket in brackets[:-1]:
        if bracket.contains(taxable_income):
            return bracket.rate
    return brackets[-1].rate


def phase_out_child_tax_credit(
    base_credit: Decimal,
    adjusted_gross_income: Decimal,
    threshold: Decimal,
) -> Decimal:
    """Child tax credit after the income phase-out.

    Reduced by $50 for each $1,000, or fraction of $1,000, of AGI above the
    threshold, and never below zero.
    """
    if base_credit == 0:
        return ZERO
    if adjusted_gross_income <= threshold:
        return base_credit

    excess = adjusted_gross_income - threshold
    reduction = ceil_whole(excess / CHILD_CREDIT_PHASEOUT_STEP) * CHILD_CREDIT_PHASEOUT_AMOUNT
    return max(ZERO, base_credit - reduction)


def self_employment_base(net_profit: Decimal) -> Decimal:
    """Net earnings subject to SE tax; zero at or under the $400 floor."""
    if net_profit <= SE_TAX_MINIMUM_EARNINGS:
        return ZERO
    return net_profit * SE_EARNINGS_FACTOR


def calculate_self_employment_tax(
    net_profit: Decimal,
    wage_base: Decimal,
    social_security_rate: Decimal,
    medicare_rate: Decimal,
) -> Decimal:
    """Social security plus Medicare on self-employment earnings.

    Both halves (employee and employer) are owed, hence the doubled rates.
    Social security stops at the wage base; Medicare has no cap.
    """
    base = self_employment_base(net_profit)
    if base == 0:
        return ZERO

    social_security = min(base, wage_base) * social_security_rate * 2
    medicare = base * medicare_rate * 2
    return social_security + medicare


def calculate_additional_medicare_tax(
    se_base: Decimal,
    wages: Decimal,
    threshold: Decimal,
    rate: Decimal,
) -> Decimal:
    """Additional Medicare surtax on SE earnings (Form 8959, Part II).

    Wages use up the threshold first; only SE earnings above what remains
    are taxed.
    """
    remaining_threshold = max(ZERO, threshold - wages)
    return max(ZERO, se_base - remaining_threshold) * rate


# =============================================================================
# CALCULATOR
# =============================================================================

class TaxCalculator:
    """
    Calculate federal tax liability for an individual return.

    Configuration for the return's tax year comes from the registry unless
    one is passed explicitly to ``compute``.

    Args:
        registry: Source of per-year tax law configuration
        apply_additional_medicare_tax: Include the additional Medicare
            surtax in self-employment tax. Off by default.
    """

    def __init__(
        self,
        registry: TaxLawRegistry,
        *,
        apply_additional_medicare_tax: bool = False,
    ):
        self.registry = registry
        self.apply_additional_medicare_tax = apply_additional_medicare_tax

    @staticmethod
    def _log_step(
        audit_log: list[CalculationStep],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        audit_log.append(CalculationStep(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        ))
        logger.debug(
            "tax_calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def _resolve_law(
        self,
        tax_return: TaxReturn,
        law_config: Optional[TaxLawConfiguration],
    ) -> TaxLawConfiguration:
        if law_config is None:
            return self.registry.get(tax_return.tax_year)
        if law_config.tax_year != tax_return.tax_year:
            raise ConfigurationMissingError(
                f"Tax law configuration not found for year {tax_return.tax_year} "
                f"(supplied configuration is for {law_config.tax_year})",
                tax_year=tax_return.tax_year,
                details={"supplied_tax_year": law_config.tax_year},
            )
        return law_config

    def _gross_income(self, income: IncomeData, audit_log: list[CalculationStep]) -> Decimal:
        wages = income.total_wages
        self_employment = income.total_self_employment_profit
        investment = total(inv.taxable_amount for inv in income.investment)
        retirement = total(ret.taxable_amount for ret in income.retirement)
        other = total(o.amount for o in income.other if o.taxable)

        gross = wages + self_employment + investment + retirement + other
        self._log_step(
            audit_log,
            step="gross_income",
            input_value=(
                f"wages={wages}, self_employment={self_employment}, "
                f"investment={investment}, retirement={retirement}, other={other}"
            ),
            output_value=str(gross),
            source="Form 1040 Lines 1-8",
        )
        return gross

    def _adjusted_gross_income(
        self,
        gross_income: Decimal,
        deductions: DeductionData,
        audit_log: list[CalculationStep],
        warnings: list[str],
    ) -> Decimal:
        adjustments = deductions.total_adjustments
        unclamped = gross_income - adjustments
        agi = max(ZERO, unclamped)

        if unclamped < 0:
            warnings.append(
                "Adjustments exceed gross income; adjusted gross income floored at zero."
            )

        self._log_step(
            audit_log,
            step="adjusted_gross_income",
            input_value=f"{gross_income} - {adjustments}",
            output_value=str(agi),
            source="Form 1040 Line 11 (Schedule 1 adjustments)",
        )
        return agi

    def _taxable_income(
        self,
        agi: Decimal,
        tax_return: TaxReturn,
        law: TaxLawConfiguration,
        audit_log: list[CalculationStep],
    ) -> Decimal:
        standard = law.standard_deduction(tax_return.filing_status)
        itemized = tax_return.itemized_total
        deduction = max(standard, itemized)
        # Zero while exemptions are suspended
        exemption = law.personal_exemption
        taxable = max(ZERO, agi - deduction - exemption)

        self._log_step(
            audit_log,
            step="deduction_amount",
            input_value=f"standard={standard}, itemized={itemized}",
            output_value=str(deduction),
            source=f"Standard deduction {law.tax_year} ({tax_return.filing_status.value})",
            notes="itemized" if itemized > standard else "standard",
        )
        self._log_step(
            audit_log,
            step="taxable_income",
            input_value=f"{agi} - {deduction} - exemption {exemption}",
            output_value=str(taxable),
            source="Form 1040 Line 15",
        )
        return taxable

    def _total_credits(
        self,
        credits: CreditData,
        agi: Decimal,
        law: TaxLawConfiguration,
        filing_status: FilingStatus,
        audit_log: list[CalculationStep],
    ) -> Decimal:
        threshold = law.child_credit_threshold(filing_status)
        child_credit = phase_out_child_tax_credit(credits.child_tax_credit, agi, threshold)
        self._log_step(
            audit_log,
            step="child_tax_credit",
            input_value=f"base={credits.child_tax_credit}, agi={agi}, threshold={threshold}",
            output_value=str(child_credit),
            source="Schedule 8812 phase-out",
        )

        other = credits.total_other_credits
        total_credits = (
            child_credit
            + credits.earned_income_credit
            + credits.education_credits
            + credits.retirement_savings_credit
            + other
        )
        self._log_step(
            audit_log,
            step="total_credits",
            input_value=(
                f"child={child_credit}, earned_income={credits.earned_income_credit}, "
                f"education={credits.education_credits}, "
                f"retirement_savings={credits.retirement_savings_credit}, other={other}"
            ),
            output_value=str(total_credits),
            source="Form 1040 Lines 19-21",
        )
        return total_credits

    def _self_employment_tax(
        self,
        tax_return: TaxReturn,
        law: TaxLawConfiguration,
        audit_log: list[CalculationStep],
    ) -> Decimal:
        income = tax_return.income
        net_profit = income.total_self_employment_profit
        se_tax = calculate_self_employment_tax(
            net_profit,
            law.social_security_wage_base,
            law.social_security_rate,
            law.medicare_rate,
        )
        self._log_step(
            audit_log,
            step="self_employment_tax",
            input_value=f"net_profit={net_profit}, base={self_employment_base(net_profit)}",
            output_value=str(se_tax),
            source=f"Schedule SE (wage base {law.social_security_wage_base})",
        )

        if self.apply_additional_medicare_tax and se_tax > 0:
            threshold = law.additional_medicare_threshold_for(tax_return.filing_status)
            if threshold is not None:
                surtax = calculate_additional_medicare_tax(
                    self_employment_base(net_profit),
                    income.total_wages,
                    threshold,
                    law.additional_medicare_rate,
                )
                self._log_step(
                    audit_log,
                    step="additional_medicare_tax",
                    input_value=f"threshold={threshold}, wages={income.total_wages}",
                    output_value=str(surtax),
                    source="Form 8959 Part II",
                )
                se_tax += surtax

        return se_tax

    def _total_withholding(self, income: IncomeData, audit_log: list[CalculationStep]) -> Decimal:
        from_wages = total(w.federal_tax_withheld for w in income.wages)
        from_retirement = total(r.federal_tax_withheld for r in income.retirement)
        withholding = from_wages + from_retirement
        self._log_step(
            audit_log,
            step="total_withholding",
            input_value=f"wages={from_wages}, retirement={from_retirement}",
            output_value=str(withholding),
            source="Form 1040 Line 25",
        )
        return withholding

    def compute(
        self,
        tax_return: TaxReturn,
        law_config: Optional[TaxLawConfiguration] = None,
    ) -> TaxCalculation:
        """
        Calculate federal tax liability, refund or balance due.

        Args:
            tax_return: Return to calculate
            law_config: Configuration for the return's year; looked up in
                the registry when omitted

        Returns:
            TaxCalculation with rounded figures and a full audit trail

        Raises:
            ConfigurationMissingError: No configuration for the return's year
            StoreUnavailableError: Registry lookup failed at the store
        """
        law = self._resolve_law(tax_return, law_config)
        filing_status = tax_return.filing_status
        brackets = law.brackets_for(filing_status)
        audit_log: list[CalculationStep] = []
        warnings: list[str] = []

        logger.info(
            "tax_calculation_started",
            tax_return_id=tax_return.id,
            tax_year=tax_return.tax_year,
            filing_status=filing_status.value,
        )

        # Steps 1-4: income and deductions
        gross_income = self._gross_income(tax_return.income, audit_log)
        agi = self._adjusted_gross_income(gross_income, tax_return.deductions, audit_log, warnings)
        taxable_income = self._taxable_income(agi, tax_return, law, audit_log)

        # Steps 5-6: bracket tax and marginal rate
        tax_before_credits = calculate_bracket_tax(taxable_income, brackets)
        marginal_rate = find_marginal_rate(taxable_income, brackets)
        self._log_step(
            audit_log,
            step="federal_tax_before_credits",
            input_value=f"taxable_income={taxable_income}, brackets={len(brackets)}",
            output_value=str(tax_before_credits),
            source=f"Tax brackets {law.tax_year} ({filing_status.value})",
            notes=f"marginal_rate={marginal_rate}",
        )

        # Steps 7-8: credits
        total_credits = self._total_credits(
            tax_return.credits, agi, law, filing_status, audit_log
        )
        tax_after_credits = max(ZERO, tax_before_credits - total_credits)
        if total_credits > tax_before_credits:
            warnings.append(
                "Credits exceed tax before credits; federal tax after credits floored at zero."
            )

        # Steps 9-10: self-employment tax and total liability
        se_tax = self._self_employment_tax(tax_return, law, audit_log)
        total_liability = tax_after_credits + se_tax
        self._log_step(
            audit_log,
            step="total_tax_liability",
            input_value=f"{tax_after_credits} + {se_tax}",
            output_value=str(total_liability),
            source="Form 1040 Line 24",
        )

        # Steps 11-13: payments and balance
        withholding = self._total_withholding(tax_return.income, audit_log)
        payments = withholding + ESTIMATED_PAYMENTS

        if payments > total_liability:
            refund = payments - total_liability
            owed = ZERO
        else:
            refund = ZERO
            owed = total_liability - payments
            if owed > 0:
                warnings.append(
                    "Estimated tax payments are not tracked; amount owed assumes none were made."
                )

        self._log_step(
            audit_log,
            step="balance",
            input_value=f"payments={payments}, liability={total_liability}",
            output_value=f"refund={refund}, owed={owed}",
            source="Form 1040 Lines 34-37",
        )

        # Step 14: effective rate, guarded for zero AGI
        effective_rate = total_liability / agi if agi > 0 else ZERO

        calculation = TaxCalculation(
            gross_income=round_money(gross_income),
            adjusted_gross_income=round_money(agi),
            taxable_income=round_money(taxable_income),
            federal_tax_before_credits=round_money(tax_before_credits),
            total_credits=round_money(total_credits),
            federal_tax_after_credits=round_money(tax_after_credits),
            self_employment_tax=round_money(se_tax),
            total_tax_liability=round_money(total_liability),
            total_withholding=round_money(withholding),
            estimated_payments=round_money(ESTIMATED_PAYMENTS),
            refund_amount=round_money(refund),
            amount_owed=round_money(owed),
            effective_tax_rate=round_rate(effective_rate),
            marginal_tax_rate=round_rate(marginal_rate),
            audit_log=audit_log,
            warnings=warnings,
        )

        logger.info(
            "tax_calculation_completed",
            tax_return_id=tax_return.id,
            total_tax_liability=str(calculation.total_tax_liability),
            refund_amount=str(calculation.refund_amount),
            amount_owed=str(calculation.amount_owed),
        )
        return calculation

    def standard_deduction_for(self, tax_year: int, filing_status: FilingStatus) -> Decimal:
        """Standard deduction for a year and filing status."""
        return self.registry.get(tax_year).standard_deduction(filing_status)

    def compare_itemized_vs_standard(
        self,
        tax_year: int,
        filing_status: FilingStatus,
        itemized_total: Decimal,
    ) -> ItemizedComparison:
        """Whether itemizing beats the standard deduction, and by how much."""
        standard = self.standard_deduction_for(tax_year, filing_status)
        use_itemized = itemized_total > standard
        return ItemizedComparison(
            use_itemized=use_itemized,
            deduction_amount=itemized_total if use_itemized else standard,
            savings=itemized_total - standard if use_itemized else ZERO,
        )
