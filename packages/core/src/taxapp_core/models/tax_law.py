"""Per-year federal tax law configuration models."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .tax_return import FilingStatus

# Legacy tables mark the top bracket with this placeholder maximum.
UNBOUNDED_SENTINEL = Decimal("999999999")


class TaxBracket(BaseModel):
    """A marginal-rate income range ``[min, max)``.

    ``max`` of None means unbounded. The last bracket of a schedule is
    always treated as unbounded, whatever its ``max`` says.
    """

    model_config = {"frozen": True}

    min: Decimal = Field(ge=0)
    max: Optional[Decimal] = None
    rate: Decimal = Field(ge=0, le=1)

    @property
    def is_unbounded(self) -> bool:
        """True for an open-ended bracket."""
        return self.max is None or self.max >= UNBOUNDED_SENTINEL

    def contains(self, income: Decimal) -> bool:
        """Whether income falls in ``[min, max)``."""
        if income < self.min:
            return False
        return self.is_unbounded or income < self.max


class TaxLawConfiguration(BaseModel):
    """Federal tax law parameters for one tax year.

    Configurations are read-only once built; the registry swaps whole
    instances instead of editing them.
    """

    model_config = {"frozen": True}

    tax_year: int
    standard_deductions: dict[FilingStatus, Decimal]
    tax_brackets: dict[FilingStatus, tuple[TaxBracket, ...]]

    # Self-employment / FICA
    social_security_wage_base: Decimal = Field(ge=0)
    social_security_rate: Decimal = Field(ge=0, le=1)
    medicare_rate: Decimal = Field(ge=0, le=1)
    additional_medicare_rate: Decimal = Field(default=Decimal("0"), ge=0, le=1)
    additional_medicare_threshold: dict[FilingStatus, Decimal] = Field(default_factory=dict)

    personal_exemption: Decimal = Decimal("0")  # Suspended for 2018-2025

    # Child tax credit
    child_tax_credit_amount: Decimal = Decimal("0")
    child_tax_credit_phaseout_threshold: dict[FilingStatus, Decimal]

    @model_validator(mode="after")
    def validate_schedules(self) -> "TaxLawConfiguration":
        """Every filing status must have contiguous, ascending brackets."""
        for status in FilingStatus:
            if status not in self.standard_deductions:
                raise ValueError(f"Missing standard deduction for {status.value}")
            if status not in self.child_tax_credit_phaseout_threshold:
                raise ValueError(f"Missing child tax credit threshold for {status.value}")

            brackets = self.tax_brackets.get(status)
            if not brackets:
                raise ValueError(f"Missing tax brackets for {status.value}")
            if brackets[0].min != 0:
                raise ValueError(f"First bracket for {status.value} must start at 0")

            for lower, upper in zip(brackets, brackets[1:]):
                if lower.max is None:
                    raise ValueError(
                        f"Only the final bracket for {status.value} may be unbounded"
                    )
                if lower.max != upper.min:
                    raise ValueError(
                        f"Brackets for {status.value} are not contiguous at {lower.max}"
                    )
                if upper.min <= lower.min:
                    raise ValueError(f"Brackets for {status.value} must ascend")
                if upper.rate < lower.rate:
                    raise ValueError(f"Bracket rates for {status.value} must not decrease")
        return self

    def standard_deduction(self, filing_status: FilingStatus) -> Decimal:
        """Standard deduction for a filing status."""
        return self.standard_deductions[filing_status]

    def brackets_for(self, filing_status: FilingStatus) -> tuple[TaxBracket, ...]:
        """Ordered bracket schedule for a filing status."""
        return self.tax_brackets[filing_status]

    def child_credit_threshold(self, filing_status: FilingStatus) -> Decimal:
        """AGI above which the child tax credit phases out."""
        return self.child_tax_credit_phaseout_threshold[filing_status]

    def additional_medicare_threshold_for(self, filing_status: FilingStatus) -> Optional[Decimal]:
        """Additional Medicare surtax threshold, if configured."""
        return self.additional_medicare_threshold.get(filing_status)
