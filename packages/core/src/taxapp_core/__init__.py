"""TaxApp Core - Federal tax calculation and deduction advisory."""

__version__ = "0.1.0"

from .exceptions import (
    TaxCoreError,
    ConfigurationMissingError,
    StoreUnavailableError,
    InvalidConfigurationError,
)
from .models import (
    # Enums
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
    # Return models
    WageIncome,
    SelfEmploymentIncome,
    InvestmentIncome,
    RetirementIncome,
    OtherIncome,
    IncomeData,
    ItemizedDeduction,
    IncomeAdjustment,
    DeductionData,
    OtherCredit,
    CreditData,
    TaxReturn,
    # Tax law
    TaxBracket,
    TaxLawConfiguration,
    # Results
    CalculationStep,
    TaxCalculation,
    ItemizedComparison,
    ItemizedCategory,
    BusinessCategory,
    DeductionRecommendation,
    StandardVsItemized,
    DeductionAnalysis,
    ProposedDeduction,
    StrategyRecommendation,
    DeductionStrategy,
)
from .config import AdvisorSettings, TaxCoreConfig, configure_logging
from .registry import (
    ConfigurationStore,
    InMemoryConfigurationStore,
    JsonDirectoryStore,
    TaxLawCache,
    TaxLawRegistry,
)
from .calculator import TaxCalculator
from .advisor import DeductionAdvisor
from .engine import TaxEngine, create_tax_engine
from .tax_law_data import (
    SUPPORTED_TAX_YEARS,
    get_default_configurations,
    get_tax_year_2023_configuration,
    get_tax_year_2024_configuration,
)

__all__ = [
    # Errors
    "TaxCoreError",
    "ConfigurationMissingError",
    "StoreUnavailableError",
    "InvalidConfigurationError",
    # Enums
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
    # Return models
    "WageIncome",
    "SelfEmploymentIncome",
    "InvestmentIncome",
    "RetirementIncome",
    "OtherIncome",
    "IncomeData",
    "ItemizedDeduction",
    "IncomeAdjustment",
    "DeductionData",
    "OtherCredit",
    "CreditData",
    "TaxReturn",
    # Tax law
    "TaxBracket",
    "TaxLawConfiguration",
    "SUPPORTED_TAX_YEARS",
    "get_default_configurations",
    "get_tax_year_2023_configuration",
    "get_tax_year_2024_configuration",
    # Results
    "CalculationStep",
    "TaxCalculation",
    "ItemizedComparison",
    "ItemizedCategory",
    "BusinessCategory",
    "DeductionRecommendation",
    "StandardVsItemized",
    "DeductionAnalysis",
    "ProposedDeduction",
    "StrategyRecommendation",
    "DeductionStrategy",
    # Configuration
    "AdvisorSettings",
    "TaxCoreConfig",
    "configure_logging",
    # Components
    "ConfigurationStore",
    "InMemoryConfigurationStore",
    "JsonDirectoryStore",
    "TaxLawCache",
    "TaxLawRegistry",
    "TaxCalculator",
    "DeductionAdvisor",
    "TaxEngine",
    "create_tax_engine",
]
