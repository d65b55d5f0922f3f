"""Calculation and advisory result models.

Everything here is a transient value object, recomputed on every call.
Monetary fields are Decimal quantized to cents; pydantic serializes them
as strings in JSON mode so no binary floating point crosses the boundary.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field

from .tax_return import BusinessDeductionCategory, ItemizedDeductionCategory


# =============================================================================
# TAX CALCULATION
# =============================================================================

class CalculationStep(BaseModel):
    """Audit log entry for calculation transparency."""

    model_config = {"frozen": True}

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class TaxCalculation(BaseModel):
    """Federal tax computed for one return.

    Exactly one of ``refund_amount`` and ``amount_owed`` can be positive;
    both are non-negative.
    """

    model_config = {"frozen": True}

    gross_income: Decimal
    adjusted_gross_income: Decimal
    taxable_income: Decimal
    federal_tax_before_credits: Decimal
    total_credits: Decimal
    federal_tax_after_credits: Decimal
    self_employment_tax: Decimal
    total_tax_liability: Decimal
    total_withholding: Decimal
    estimated_payments: Decimal
    refund_amount: Decimal = Field(ge=0)
    amount_owed: Decimal = Field(ge=0)
    effective_tax_rate: Decimal
    marginal_tax_rate: Decimal

    audit_log: list[CalculationStep] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ItemizedComparison(BaseModel):
    """Outcome of comparing an itemized total with the standard deduction."""

    model_config = {"frozen": True}

    use_itemized: bool
    deduction_amount: Decimal
    savings: Decimal


# =============================================================================
# RECOMMENDATION CATEGORY
# =============================================================================

class ItemizedCategory(BaseModel):
    """Recommendation against a Schedule A category."""

    model_config = {"frozen": True}

    kind: Literal["itemized"] = "itemized"
    category: ItemizedDeductionCategory


class BusinessCategory(BaseModel):
    """Recommendation against a Schedule C business category."""

    model_config = {"frozen": True}

    kind: Literal["business"] = "business"
    category: BusinessDeductionCategory


RecommendationCategory = Annotated[
    Union[ItemizedCategory, BusinessCategory],
    Field(discriminator="kind"),
]


def itemized(category: ItemizedDeductionCategory) -> ItemizedCategory:
    """Tag an itemized deduction category."""
    return ItemizedCategory(category=category)


def business(category: BusinessDeductionCategory) -> BusinessCategory:
    """Tag a business deduction category."""
    return BusinessCategory(category=category)


# =============================================================================
# DEDUCTION ADVISORY
# =============================================================================

class DeductionRecommendation(BaseModel):
    """A suggested deduction with its estimated tax effect.

    ``potential_savings`` is ``estimated_amount × marginal_tax_rate``,
    rounded to cents.
    """

    model_config = {"frozen": True}

    category: RecommendationCategory
    description: str
    estimated_amount: Decimal
    confidence: float = Field(ge=0.0, le=1.0)
    required_documents: list[str] = Field(default_factory=list)
    potential_savings: Decimal


class StandardVsItemized(BaseModel):
    """Standard-versus-itemized verdict for a return."""

    use_itemized: bool
    standard_amount: Decimal
    itemized_amount: Decimal
    deduction_amount: Decimal
    savings: Decimal


class DeductionAnalysis(BaseModel):
    """Ranked recommendations for a return."""

    recommendations: list[DeductionRecommendation] = Field(default_factory=list)
    standard_vs_itemized: StandardVsItemized
    potential_savings: Decimal

    @computed_field
    @property
    def recommendation_count(self) -> int:
        """Number of recommendations produced."""
        return len(self.recommendations)


class ProposedDeduction(BaseModel):
    """A hypothetical additional itemized deduction."""
    category: str
    amount: Decimal


class StrategyRecommendation(str, Enum):
    """Deduction method to use after applying proposed deductions."""
    ITEMIZE = "itemize"
    STANDARD = "standard"


class DeductionStrategy(BaseModel):
    """Tax effect of a set of proposed deductions."""
    current_tax: Decimal
    new_tax: Decimal
    savings: Decimal
    recommendation: StrategyRecommendation
