"""Tests for the tax core exception hierarchy."""

from taxapp_core import (
    ConfigurationMissingError,
    InvalidConfigurationError,
    StoreUnavailableError,
    TaxCoreError,
)


class TestTaxCoreError:
    """Base error behaviour."""

    def test_str_is_message(self):
        error = TaxCoreError("Something went wrong", details={"tax_year": 2024})
        assert str(error) == "Something went wrong"

    def test_repr_lists_details(self):
        error = TaxCoreError("Something went wrong", details={"tax_year": 2024})
        assert repr(error) == "TaxCoreError('Something went wrong', tax_year=2024)"

    def test_details_are_copied(self):
        """Mirroring subclass attributes never mutates the caller's dict."""
        shared = {"supplied_tax_year": 2023}
        ConfigurationMissingError("missing", tax_year=2024, details=shared)
        assert shared == {"supplied_tax_year": 2023}

    def test_log_context(self):
        error = StoreUnavailableError(
            "store down", tax_year=2024, store_error="connection refused"
        )
        assert error.log_context() == {
            "error_type": "StoreUnavailableError",
            "recoverable": True,
            "tax_year": 2024,
            "store_error": "connection refused",
        }


class TestSubclasses:
    """Subclass attributes and recoverability."""

    def test_missing_configuration_never_recoverable(self):
        error = ConfigurationMissingError("missing", tax_year=2019)
        assert error.recoverable is False
        assert error.details == {"tax_year": 2019}

    def test_malformed_store_document_not_recoverable(self):
        error = StoreUnavailableError("bad file", tax_year=2024, recoverable=False)
        assert error.recoverable is False

    def test_invalid_configuration_details(self):
        error = InvalidConfigurationError(
            "Tax year must be set before upsert",
            config_key="tax_year",
            expected="positive integer year",
            actual=0,
        )
        assert error.details == {
            "config_key": "tax_year",
            "expected": "positive integer year",
            "actual": 0,
        }
        assert isinstance(error, TaxCoreError)
