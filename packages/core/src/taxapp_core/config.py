"""Configuration system for the tax calculation core.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the registry, calculator and
deduction advisor.

Usage:
    from taxapp_core.config import TaxCoreConfig

    # Load from environment variables and .env file
    config = TaxCoreConfig()

    # Access advisor heuristics
    print(config.advisor.salt_cap)

    # Opt in to the additional Medicare surtax on self-employment income
    if config.apply_additional_medicare_tax:
        print("Additional Medicare tax enabled")
"""

import logging
from decimal import Decimal
from typing import Literal, Optional

import structlog
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "staging", "production", "test"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AdvisorSettings(BaseSettings):
    """Heuristic thresholds for the deduction advisor.

    Amounts are annual dollars; rates are fractions of AGI. Supports
    environment variables with the prefix TAXAPP_ADVISOR_.

    Environment Variables:
        TAXAPP_ADVISOR_MEDICAL_AGI_FLOOR_RATE: Medical expense AGI floor (0.075)
        TAXAPP_ADVISOR_SALT_CAP: State and local tax deduction cap
        TAXAPP_ADVISOR_IRA_CONTRIBUTION_LIMIT: Traditional IRA limit
        TAXAPP_ADVISOR_HSA_CONTRIBUTION_LIMIT: HSA self-only limit
        (and one variable per remaining field)
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXAPP_ADVISOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Medical
    medical_agi_floor_rate: Decimal = Field(default=Decimal("0.075"), ge=0, le=1)
    medical_premium_agi_floor: Decimal = Field(default=Decimal("50000"), ge=0)
    medical_premium_amount: Decimal = Field(default=Decimal("6000"), ge=0)

    # State and local taxes
    salt_cap: Decimal = Field(default=Decimal("10000"), ge=0)
    salt_suggestion_cap: Decimal = Field(default=Decimal("3000"), ge=0)

    # Mortgage interest
    mortgage_agi_floor: Decimal = Field(default=Decimal("40000"), ge=0)
    mortgage_interest_amount: Decimal = Field(default=Decimal("8000"), ge=0)

    # Charitable
    charitable_agi_rate: Decimal = Field(default=Decimal("0.02"), ge=0, le=1)
    charitable_cap: Decimal = Field(default=Decimal("2000"), ge=0)

    # Business (self-employed only)
    home_office_amount: Decimal = Field(default=Decimal("1200"), ge=0)
    vehicle_amount: Decimal = Field(default=Decimal("2000"), ge=0)
    professional_services_amount: Decimal = Field(default=Decimal("800"), ge=0)

    # Education
    student_loan_agi_ceiling: Decimal = Field(default=Decimal("85000"), ge=0)
    student_loan_interest_amount: Decimal = Field(default=Decimal("1500"), ge=0)
    tuition_agi_ceiling: Decimal = Field(default=Decimal("80000"), ge=0)
    tuition_amount: Decimal = Field(default=Decimal("4000"), ge=0)

    # Retirement and health savings
    ira_contribution_limit: Decimal = Field(default=Decimal("6500"), ge=0)
    hsa_agi_ceiling: Decimal = Field(default=Decimal("100000"), ge=0)
    hsa_contribution_limit: Decimal = Field(default=Decimal("4150"), ge=0)


class TaxCoreConfig(BaseSettings):
    """Root configuration for the tax calculation core.

    Environment Variables:
        TAXAPP_ENV: Environment name (development, staging, production, test)
        TAXAPP_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        TAXAPP_JSON_LOGS: Render logs as JSON lines
        TAXAPP_CONFIG_STORE_DIR: Directory of tax_law_<year>.json files
        TAXAPP_SEED_DEFAULT_YEARS: Seed built-in tax years at startup
        TAXAPP_APPLY_ADDITIONAL_MEDICARE_TAX: Include the 0.9% surtax in SE tax

    Example:
        config = TaxCoreConfig(
            log_level="DEBUG",
            advisor=AdvisorSettings(salt_cap=Decimal("40000")),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment settings
    env: Environment = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Minimum level emitted by structlog",
    )
    json_logs: bool = Field(
        default=False,
        description="Render structured logs as JSON instead of console output",
    )

    # Registry
    config_store_dir: Optional[str] = Field(
        default=None,
        description="Directory holding tax_law_<year>.json configuration files",
    )
    seed_default_years: bool = Field(
        default=True,
        description="Upsert the built-in tax years when the engine is created",
    )

    # Calculator
    apply_additional_medicare_tax: bool = Field(
        default=False,
        description="Add the additional Medicare surtax to self-employment tax",
    )

    # Nested configuration
    advisor: AdvisorSettings = Field(default_factory=AdvisorSettings)

    @field_validator("env", "log_level", mode="before")
    @classmethod
    def normalize_case(cls, v: object, info: ValidationInfo) -> object:
        """Accept ``Production`` or ``debug`` from the environment."""
        if not isinstance(v, str):
            return v
        v = v.strip()
        return v.upper() if info.field_name == "log_level" else v.lower()

    @property
    def is_production(self) -> bool:
        """Production always renders JSON logs."""
        return self.env == "production"


def configure_logging(config: Optional[TaxCoreConfig] = None) -> None:
    """Configure structlog processors and level filtering from config."""
    config = config or TaxCoreConfig()
    level = logging.getLevelName(config.log_level)

    if config.json_logs or config.is_production:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
