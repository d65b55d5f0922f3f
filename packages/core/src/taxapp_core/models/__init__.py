"""Data models for taxapp-core.

This package provides:
- Tax return inputs: income, deductions, adjustments, credits (tax_return.py)
- Per-year tax law configuration and bracket schedules (tax_law.py)
- Calculation and advisory results (results.py)
"""

from taxapp_core.models.tax_return import (
    # Enumerations
    FilingStatus,
    BusinessType,
    InvestmentType,
    RetirementType,
    OtherIncomeType,
    DeductionMethod,
    ItemizedDeductionCategory,
    BusinessDeductionCategory,
    AdjustmentType,
    CreditType,
    # Income
    WageIncome,
    SelfEmploymentIncome,
    InvestmentIncome,
    RetirementIncome,
    OtherIncome,
    IncomeData,
    # Deductions
    ItemizedDeduction,
    IncomeAdjustment,
    DeductionData,
    # Credits
    OtherCredit,
    CreditData,
    # Return
    TaxReturn,
)

from taxapp_core.models.tax_law import (
    UNBOUNDED_SENTINEL,
    TaxBracket,
    TaxLawConfiguration,
)

from taxapp_core.models.results import (
    CalculationStep,
    TaxCalculation,
    ItemizedComparison,
    ItemizedCategory,
    BusinessCategory,
    RecommendationCategory,
    itemized,
    business,
    DeductionRecommendation,
    StandardVsItemized,
    DeductionAnalysis,
    ProposedDeduction,
    StrategyRecommendation,
    DeductionStrategy,
)

__all__ = [
    # Enumerations
    "FilingStatus",
    "BusinessType",
    "InvestmentType",
    "RetirementType",
    "OtherIncomeType",
    "DeductionMethod",
    "ItemizedDeductionCategory",
    "BusinessDeductionCategory",
    "AdjustmentType",
    "CreditType",
    # Income
    "WageIncome",
    "SelfEmploymentIncome",
    "InvestmentIncome",
    "RetirementIncome",
    "OtherIncome",
    "IncomeData",
    # Deductions
    "ItemizedDeduction",
    "IncomeAdjustment",
    "DeductionData",
    # Credits
    "OtherCredit",
    "CreditData",
    # Return
    "TaxReturn",
    # Tax law
    "UNBOUNDED_SENTINEL",
    "TaxBracket",
    "TaxLawConfiguration",
    # Results
    "CalculationStep",
    "TaxCalculation",
    "ItemizedComparison",
    "ItemizedCategory",
    "BusinessCategory",
    "RecommendationCategory",
    "itemized",
    "business",
    "DeductionRecommendation",
    "StandardVsItemized",
    "DeductionAnalysis",
    "ProposedDeduction",
    "StrategyRecommendation",
    "DeductionStrategy",
]
