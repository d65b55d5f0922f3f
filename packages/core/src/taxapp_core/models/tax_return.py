"""Tax return data models.

This module implements the in-memory individual return consumed by the
calculator and advisor: filing status, income sources, deductions,
adjustments and credits. Returns are sourced and owned by the caller;
nothing here is persisted.

Monetary fields are not range-checked. Negative amounts are clamped by the
calculation pipeline rather than rejected at the boundary.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..money import total


# =============================================================================
# ENUMERATIONS
# =============================================================================

class FilingStatus(str, Enum):
    """IRS filing status options."""
    SINGLE = "single"
    MARRIED_FILING_JOINTLY = "married_filing_jointly"
    MARRIED_FILING_SEPARATELY = "married_filing_separately"
    HEAD_OF_HOUSEHOLD = "head_of_household"
    QUALIFYING_WIDOW = "qualifying_widow"


class BusinessType(str, Enum):
    """Legal form of a self-employment business."""
    SOLE_PROPRIETORSHIP = "sole_proprietorship"
    PARTNERSHIP = "partnership"
    S_CORP = "s_corp"
    C_CORP = "c_corp"
    LLC = "llc"


class InvestmentType(str, Enum):
    """Kinds of investment income."""
    DIVIDENDS = "dividends"
    INTEREST = "interest"
    CAPITAL_GAINS = "capital_gains"
    CAPITAL_LOSSES = "capital_losses"


class RetirementType(str, Enum):
    """Kinds of retirement distributions."""
    TRADITIONAL_IRA = "traditional_ira"
    ROTH_IRA = "roth_ira"
    PENSION = "pension"
    ANNUITY = "annuity"
    FOUR_OH_ONE_K = "401k"


class OtherIncomeType(str, Enum):
    """Other income reported on Schedule 1."""
    UNEMPLOYMENT = "unemployment"
    GAMBLING = "gambling"
    JURY_DUTY = "jury_duty"
    PRIZES = "prizes"
    RENTAL = "rental"
    ROYALTIES = "royalties"


class DeductionMethod(str, Enum):
    """How the taxpayer takes deductions."""
    STANDARD = "standard"
    ITEMIZED = "itemized"


class ItemizedDeductionCategory(str, Enum):
    """Schedule A deduction categories."""
    MEDICAL_DENTAL = "medical_dental"
    STATE_LOCAL_TAXES = "state_local_taxes"
    MORTGAGE_INTEREST = "mortgage_interest"
    CHARITABLE_CONTRIBUTIONS = "charitable_contributions"
    MISCELLANEOUS = "miscellaneous"


class BusinessDeductionCategory(str, Enum):
    """Schedule C expense categories used for recommendations."""
    OFFICE_EXPENSES = "office_expenses"
    TRAVEL = "travel"
    MEALS = "meals"
    VEHICLE = "vehicle"
    EQUIPMENT = "equipment"
    PROFESSIONAL_SERVICES = "professional_services"
    INSURANCE = "insurance"
    UTILITIES = "utilities"
    RENT = "rent"
    SUPPLIES = "supplies"


class AdjustmentType(str, Enum):
    """Above-the-line adjustments to income."""
    IRA_CONTRIBUTION = "ira_contribution"
    STUDENT_LOAN_INTEREST = "student_loan_interest"
    TUITION_FEES = "tuition_fees"
    MOVING_EXPENSES = "moving_expenses"
    HEALTH_SAVINGS_ACCOUNT = "health_savings_account"
    SELF_EMPLOYMENT_TAX = "self_employment_tax"


class CreditType(str, Enum):
    """Credits reported outside the dedicated credit fields."""
    CHILD_TAX_CREDIT = "child_tax_credit"
    EARNED_INCOME_CREDIT = "earned_income_credit"
    AMERICAN_OPPORTUNITY_CREDIT = "american_opportunity_credit"
    LIFETIME_LEARNING_CREDIT = "lifetime_learning_credit"
    RETIREMENT_SAVINGS_CREDIT = "retirement_savings_credit"
    CHILD_CARE_CREDIT = "child_care_credit"


# =============================================================================
# INCOME MODELS
# =============================================================================

class WageIncome(BaseModel):
    """W-2 wage income."""
    employer_name: str
    employer_ein: Optional[str] = None
    wages: Decimal = Decimal("0")
    federal_tax_withheld: Decimal = Decimal("0")
    social_security_wages: Decimal = Decimal("0")
    social_security_tax_withheld: Decimal = Decimal("0")
    medicare_wages: Decimal = Decimal("0")
    medicare_tax_withheld: Decimal = Decimal("0")
    state_wages: Optional[Decimal] = None
    state_tax_withheld: Optional[Decimal] = None


class SelfEmploymentIncome(BaseModel):
    """Schedule C business income."""
    business_name: str
    business_type: BusinessType = BusinessType.SOLE_PROPRIETORSHIP
    gross_receipts: Decimal = Decimal("0")
    business_expenses: Decimal = Decimal("0")
    net_profit: Decimal  # May be negative for a loss


class InvestmentIncome(BaseModel):
    """1099-INT/DIV/B investment income."""
    type: InvestmentType
    description: str
    amount: Decimal
    taxable_amount: Decimal


class RetirementIncome(BaseModel):
    """1099-R retirement distribution."""
    type: RetirementType
    payer_name: str
    gross_distribution: Decimal = Decimal("0")
    taxable_amount: Decimal
    federal_tax_withheld: Decimal = Decimal("0")


class OtherIncome(BaseModel):
    """Miscellaneous income; only counted when flagged taxable."""
    type: OtherIncomeType
    description: str
    amount: Decimal
    taxable: bool = True


class IncomeData(BaseModel):
    """All income sources on a return."""
    wages: list[WageIncome] = Field(default_factory=list)
    self_employment: list[SelfEmploymentIncome] = Field(default_factory=list)
    investment: list[InvestmentIncome] = Field(default_factory=list)
    retirement: list[RetirementIncome] = Field(default_factory=list)
    other: list[OtherIncome] = Field(default_factory=list)

    @property
    def total_wages(self) -> Decimal:
        """Sum of W-2 wages."""
        return total(w.wages for w in self.wages)

    @property
    def total_self_employment_profit(self) -> Decimal:
        """Combined net profit across all businesses."""
        return total(se.net_profit for se in self.self_employment)

    @property
    def has_self_employment(self) -> bool:
        """True when any self-employment entry is present."""
        return len(self.self_employment) > 0


# =============================================================================
# DEDUCTION MODELS
# =============================================================================

class ItemizedDeduction(BaseModel):
    """A single Schedule A deduction."""
    category: ItemizedDeductionCategory
    description: str
    amount: Decimal
    limitation: Optional[Decimal] = None
    supporting_documents: list[str] = Field(default_factory=list)


class IncomeAdjustment(BaseModel):
    """An above-the-line adjustment reducing gross income."""
    type: AdjustmentType
    description: str
    amount: Decimal


class DeductionData(BaseModel):
    """Deductions and adjustments claimed on a return.

    ``total_itemized_deductions`` is carried as its own figure because the
    caller may apply Schedule A limitations before reporting it. When it is
    None, ``itemized_total`` sums the entries at the time it is read, so
    entries appended later are counted.
    """
    deduction_method: DeductionMethod = DeductionMethod.STANDARD
    itemized_deductions: list[ItemizedDeduction] = Field(default_factory=list)
    adjustments: list[IncomeAdjustment] = Field(default_factory=list)
    total_itemized_deductions: Optional[Decimal] = None

    @property
    def itemized_total(self) -> Decimal:
        """Reported itemized total, or the sum of the entries when unreported."""
        if self.total_itemized_deductions is not None:
            return self.total_itemized_deductions
        return total(d.amount for d in self.itemized_deductions)

    @property
    def total_adjustments(self) -> Decimal:
        """Sum of above-the-line adjustments."""
        return total(adj.amount for adj in self.adjustments)

    def itemized_total_for(self, category: ItemizedDeductionCategory) -> Decimal:
        """Sum of itemized entries in one category."""
        return total(d.amount for d in self.itemized_deductions if d.category == category)

    def has_itemized(self, category: ItemizedDeductionCategory) -> bool:
        """True when at least one entry exists in the category."""
        return any(d.category == category for d in self.itemized_deductions)


# =============================================================================
# CREDIT MODELS
# =============================================================================

class OtherCredit(BaseModel):
    """A credit outside the dedicated credit fields."""
    type: CreditType
    description: str
    amount: Decimal


class CreditData(BaseModel):
    """Credits claimed on a return.

    ``child_tax_credit`` is the base amount before the income phase-out.
    """
    child_tax_credit: Decimal = Decimal("0")
    earned_income_credit: Decimal = Decimal("0")
    education_credits: Decimal = Decimal("0")
    retirement_savings_credit: Decimal = Decimal("0")
    other_credits: list[OtherCredit] = Field(default_factory=list)

    @property
    def total_other_credits(self) -> Decimal:
        """Sum of the other-credit entries."""
        return total(c.amount for c in self.other_credits)


# =============================================================================
# TAX RETURN
# =============================================================================

class TaxReturn(BaseModel):
    """An individual federal return as supplied by the caller."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "tax_year": 2024,
                    "filing_status": "single",
                    "income": {
                        "wages": [
                            {
                                "employer_name": "Acme Corp",
                                "wages": "60000.00",
                                "federal_tax_withheld": "5000.00",
                            }
                        ]
                    },
                }
            ]
        }
    }

    id: Optional[str] = None
    tax_year: int
    filing_status: FilingStatus = FilingStatus.SINGLE
    income: IncomeData = Field(default_factory=IncomeData)
    deductions: DeductionData = Field(default_factory=DeductionData)
    credits: CreditData = Field(default_factory=CreditData)

    @property
    def itemized_total(self) -> Decimal:
        """Itemized deduction total used by the calculator."""
        return self.deductions.itemized_total
