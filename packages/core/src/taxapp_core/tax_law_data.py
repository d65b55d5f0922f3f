"""Built-in federal tax law tables for the supported tax years.

These are the configurations seeded into the registry at startup. Later
years are added by an administrative upsert, not by editing this module.

Note: the 2024 bracket boundaries reuse the 2023 schedule for most filing
statuses (the platform's published tables); 2024 standard deductions and
the 2024 social security wage base are current. Corrections go through
``TaxLawRegistry.upsert`` so cached years stay consistent.
"""

from decimal import Decimal

from .models import FilingStatus, TaxBracket, TaxLawConfiguration


# =============================================================================
# VERSION TRACKING
# =============================================================================

SUPPORTED_TAX_YEARS = (2023, 2024)


def _brackets(*rows: tuple[str, str, str]) -> tuple[TaxBracket, ...]:
    """Build a bracket schedule from (min, max, rate) string triples."""
    return tuple(
        TaxBracket(min=Decimal(lo), max=Decimal(hi), rate=Decimal(rate))
        for lo, hi, rate in rows
    )


# =============================================================================
# SHARED PARAMETERS (2023-2024)
# =============================================================================

SOCIAL_SECURITY_RATE = Decimal("0.062")
MEDICARE_RATE = Decimal("0.0145")
ADDITIONAL_MEDICARE_RATE = Decimal("0.009")

ADDITIONAL_MEDICARE_THRESHOLD = {
    FilingStatus.SINGLE: Decimal("200000"),
    FilingStatus.MARRIED_FILING_JOINTLY: Decimal("250000"),
    FilingStatus.MARRIED_FILING_SEPARATELY: Decimal("125000"),
    FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("200000"),
    FilingStatus.QUALIFYING_WIDOW: Decimal("250000"),
}

CHILD_TAX_CREDIT_AMOUNT = Decimal("2000")

CHILD_TAX_CREDIT_PHASEOUT_THRESHOLD = {
    FilingStatus.SINGLE: Decimal("200000"),
    FilingStatus.MARRIED_FILING_JOINTLY: Decimal("400000"),
    FilingStatus.MARRIED_FILING_SEPARATELY: Decimal("200000"),
    FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("200000"),
    FilingStatus.QUALIFYING_WIDOW: Decimal("400000"),
}

# Joint schedule is shared by married-filing-jointly and qualifying widow(er)
_JOINT_BRACKETS = _brackets(
    ("0", "22000", "0.10"),
    ("22000", "89450", "0.12"),
    ("89450", "190750", "0.22"),
    ("190750", "364200", "0.24"),
    ("364200", "462500", "0.32"),
    ("462500", "693750", "0.35"),
    ("693750", "999999999", "0.37"),
)


# =============================================================================
# TAX YEAR 2024
# =============================================================================

STANDARD_DEDUCTION_2024 = {
    FilingStatus.SINGLE: Decimal("14600"),
    FilingStatus.MARRIED_FILING_JOINTLY: Decimal("29200"),
    FilingStatus.MARRIED_FILING_SEPARATELY: Decimal("14600"),
    FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("21900"),
    FilingStatus.QUALIFYING_WIDOW: Decimal("29200"),
}

TAX_BRACKETS_2024 = {
    FilingStatus.SINGLE: _brackets(
        ("0", "11000", "0.10"),
        ("11000", "44725", "0.12"),
        ("44725", "95375", "0.22"),
        ("95375", "197050", "0.24"),
        ("197050", "250525", "0.32"),
        ("250525", "626350", "0.35"),
        ("626350", "999999999", "0.37"),
    ),
    FilingStatus.MARRIED_FILING_JOINTLY: _JOINT_BRACKETS,
    FilingStatus.MARRIED_FILING_SEPARATELY: _brackets(
        ("0", "11000", "0.10"),
        ("11000", "44725", "0.12"),
        ("44725", "95375", "0.22"),
        ("95375", "182050", "0.24"),
        ("182050", "231250", "0.32"),
        ("231250", "346875", "0.35"),
        ("346875", "999999999", "0.37"),
    ),
    FilingStatus.HEAD_OF_HOUSEHOLD: _brackets(
        ("0", "15700", "0.10"),
        ("15700", "59850", "0.12"),
        ("59850", "95350", "0.22"),
        ("95350", "182050", "0.24"),
        ("182050", "231250", "0.32"),
        ("231250", "609350", "0.35"),
        ("609350", "999999999", "0.37"),
    ),
    FilingStatus.QUALIFYING_WIDOW: _JOINT_BRACKETS,
}

SOCIAL_SECURITY_WAGE_BASE_2024 = Decimal("168600")


def get_tax_year_2024_configuration() -> TaxLawConfiguration:
    """Tax law configuration for tax year 2024."""
    return TaxLawConfiguration(
        tax_year=2024,
        standard_deductions=STANDARD_DEDUCTION_2024,
        tax_brackets=TAX_BRACKETS_2024,
        social_security_wage_base=SOCIAL_SECURITY_WAGE_BASE_2024,
        social_security_rate=SOCIAL_SECURITY_RATE,
        medicare_rate=MEDICARE_RATE,
        additional_medicare_rate=ADDITIONAL_MEDICARE_RATE,
        additional_medicare_threshold=ADDITIONAL_MEDICARE_THRESHOLD,
        personal_exemption=Decimal("0"),
        child_tax_credit_amount=CHILD_TAX_CREDIT_AMOUNT,
        child_tax_credit_phaseout_threshold=CHILD_TAX_CREDIT_PHASEOUT_THRESHOLD,
    )


# =============================================================================
# TAX YEAR 2023
# =============================================================================

STANDARD_DEDUCTION_2023 = {
    FilingStatus.SINGLE: Decimal("13850"),
    FilingStatus.MARRIED_FILING_JOINTLY: Decimal("27700"),
    FilingStatus.MARRIED_FILING_SEPARATELY: Decimal("13850"),
    FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("20800"),
    FilingStatus.QUALIFYING_WIDOW: Decimal("27700"),
}

TAX_BRACKETS_2023 = {
    FilingStatus.SINGLE: _brackets(
        ("0", "11000", "0.10"),
        ("11000", "44725", "0.12"),
        ("44725", "95375", "0.22"),
        ("95375", "182050", "0.24"),
        ("182050", "231250", "0.32"),
        ("231250", "578125", "0.35"),
        ("578125", "999999999", "0.37"),
    ),
    FilingStatus.MARRIED_FILING_JOINTLY: _JOINT_BRACKETS,
    FilingStatus.MARRIED_FILING_SEPARATELY: _brackets(
        ("0", "11000", "0.10"),
        ("11000", "44725", "0.12"),
        ("44725", "95375", "0.22"),
        ("95375", "182100", "0.24"),
        ("182100", "231250", "0.32"),
        ("231250", "346875", "0.35"),
        ("346875", "999999999", "0.37"),
    ),
    FilingStatus.HEAD_OF_HOUSEHOLD: _brackets(
        ("0", "15700", "0.10"),
        ("15700", "59850", "0.12"),
        ("59850", "95350", "0.22"),
        ("95350", "182050", "0.24"),
        ("182050", "231250", "0.32"),
        ("231250", "578100", "0.35"),
        ("578100", "999999999", "0.37"),
    ),
    FilingStatus.QUALIFYING_WIDOW: _JOINT_BRACKETS,
}

SOCIAL_SECURITY_WAGE_BASE_2023 = Decimal("160200")


def get_tax_year_2023_configuration() -> TaxLawConfiguration:
    """Tax law configuration for tax year 2023."""
    return TaxLawConfiguration(
        tax_year=2023,
        standard_deductions=STANDARD_DEDUCTION_2023,
        tax_brackets=TAX_BRACKETS_2023,
        social_security_wage_base=SOCIAL_SECURITY_WAGE_BASE_2023,
        social_security_rate=SOCIAL_SECURITY_RATE,
        medicare_rate=MEDICARE_RATE,
        additional_medicare_rate=ADDITIONAL_MEDICARE_RATE,
        additional_medicare_threshold=ADDITIONAL_MEDICARE_THRESHOLD,
        personal_exemption=Decimal("0"),
        child_tax_credit_amount=CHILD_TAX_CREDIT_AMOUNT,
        child_tax_credit_phaseout_threshold=CHILD_TAX_CREDIT_PHASEOUT_THRESHOLD,
    )


_BUILDERS = {
    2023: get_tax_year_2023_configuration,
    2024: get_tax_year_2024_configuration,
}


def get_default_configurations() -> list[TaxLawConfiguration]:
    """All built-in configurations, newest first."""
    return [_BUILDERS[year]() for year in sorted(SUPPORTED_TAX_YEARS, reverse=True)]
