"""Tax law registry: year-keyed configuration lookups with a shared cache.

The registry is the only component holding long-lived mutable state. That
state lives in an explicit ``TaxLawCache`` which callers may share between
registries or replace in tests.

Cache reads take the current immutable snapshot without locking. Writes
build a new mapping under a lock and swap the reference, so a reader
never observes a half-applied update. Each write bumps a generation
counter; a store read is only cached if no write happened while it was in
flight.
"""

import threading
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Union, runtime_checkable

import structlog
from pydantic import ValidationError

from .exceptions import (
    ConfigurationMissingError,
    InvalidConfigurationError,
    StoreUnavailableError,
)
from .models import FilingStatus, TaxBracket, TaxLawConfiguration
from .tax_law_data import get_default_configurations

logger = structlog.get_logger()


# =============================================================================
# CACHE
# =============================================================================

class TaxLawCache:
    """Year-keyed cache of tax law configurations (snapshot swap)."""

    def __init__(self) -> None:
        self._snapshot: Mapping[int, TaxLawConfiguration] = MappingProxyType({})
        self._write_lock = threading.Lock()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Counter bumped by every ``put`` and ``clear``."""
        return self._generation

    def get(self, tax_year: int) -> Optional[TaxLawConfiguration]:
        return self._snapshot.get(tax_year)

    def put(self, config: TaxLawConfiguration) -> None:
        with self._write_lock:
            self._swap(config)

    def fill(self, config: TaxLawConfiguration, generation: int) -> bool:
        """Cache a store read taken at ``generation``.

        The read is discarded when any write happened since, so a slow
        fetch never overwrites a newer upsert or resurrects a cleared year.
        Returns True when the config was cached.
        """
        with self._write_lock:
            if self._generation != generation:
                return False
            self._swap(config)
            return True

    def _swap(self, config: TaxLawConfiguration) -> None:
        updated = dict(self._snapshot)
        updated[config.tax_year] = config
        self._snapshot = MappingProxyType(updated)
        self._generation += 1

    def clear(self) -> None:
        with self._write_lock:
            self._snapshot = MappingProxyType({})
            self._generation += 1

    def snapshot(self) -> Mapping[int, TaxLawConfiguration]:
        """Read-only view of the cache at this instant."""
        return self._snapshot

    def years(self) -> list[int]:
        return sorted(self._snapshot)

    def __contains__(self, tax_year: object) -> bool:
        return tax_year in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)


# =============================================================================
# EXTERNAL STORES
# =============================================================================

@runtime_checkable
class ConfigurationStore(Protocol):
    """Backing store for tax law configurations.

    ``fetch`` returns None when the year is unknown and raises on any
    transport or I/O failure. Implementations may block.
    """

    def fetch(self, tax_year: int) -> Optional[TaxLawConfiguration]:
        ...

    def save(self, config: TaxLawConfiguration) -> None:
        ...


class InMemoryConfigurationStore:
    """Process-local store, mainly for tests and single-process deployments."""

    def __init__(self, configs: Optional[list[TaxLawConfiguration]] = None) -> None:
        self._configs: dict[int, TaxLawConfiguration] = {}
        self._lock = threading.Lock()
        for config in configs or []:
            self._configs[config.tax_year] = config

    def fetch(self, tax_year: int) -> Optional[TaxLawConfiguration]:
        with self._lock:
            return self._configs.get(tax_year)

    def save(self, config: TaxLawConfiguration) -> None:
        with self._lock:
            self._configs[config.tax_year] = config


class JsonDirectoryStore:
    """Store backed by one ``tax_law_<year>.json`` file per tax year.

    A missing file means the year is not configured. Unreadable files and
    malformed documents are reported as store failures.
    """

    FILENAME_TEMPLATE = "tax_law_{year}.json"

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def path_for(self, tax_year: int) -> Path:
        return self.directory / self.FILENAME_TEMPLATE.format(year=tax_year)

    def fetch(self, tax_year: int) -> Optional[TaxLawConfiguration]:
        path = self.path_for(tax_year)
        if not path.exists():
            return None
        try:
            return TaxLawConfiguration.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StoreUnavailableError(
                f"Could not read tax law configuration file {path.name}",
                tax_year=tax_year,
                store_error=str(e),
            ) from e
        except ValidationError as e:
            raise StoreUnavailableError(
                f"Tax law configuration file {path.name} is malformed",
                tax_year=tax_year,
                store_error=str(e),
                recoverable=False,
            ) from e

    def save(self, config: TaxLawConfiguration) -> None:
        path = self.path_for(config.tax_year)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreUnavailableError(
                f"Could not write tax law configuration file {path.name}",
                tax_year=config.tax_year,
                store_error=str(e),
            ) from e


# =============================================================================
# REGISTRY
# =============================================================================

class TaxLawRegistry:
    """Lookup, upsert and invalidation of per-year tax law configuration.

    Args:
        cache: Shared cache instance. A private one is created when omitted.
        store: Optional external store consulted on cache misses and
            written through on upsert.
    """

    def __init__(
        self,
        cache: Optional[TaxLawCache] = None,
        store: Optional[ConfigurationStore] = None,
    ) -> None:
        self.cache = cache if cache is not None else TaxLawCache()
        self.store = store

    def get(self, tax_year: int) -> TaxLawConfiguration:
        """Configuration for a tax year, fetched from the store on a miss.

        Raises:
            ConfigurationMissingError: No configuration exists for the year.
            StoreUnavailableError: The external store failed.
        """
        generation = self.cache.generation
        config = self.cache.get(tax_year)
        if config is not None:
            return config

        if self.store is None:
            logger.warning("tax_law_configuration_not_found", tax_year=tax_year, source="cache")
            raise ConfigurationMissingError(
                f"Tax law configuration not found for year {tax_year}",
                tax_year=tax_year,
            )

        config = self._fetch(tax_year)
        if config is None:
            logger.warning("tax_law_configuration_not_found", tax_year=tax_year, source="store")
            raise ConfigurationMissingError(
                f"Tax law configuration not found for year {tax_year}",
                tax_year=tax_year,
            )

        if self.cache.fill(config, generation):
            logger.info("tax_law_configuration_cached", tax_year=tax_year)
            return config

        # The cache changed while the store was being read; prefer what it holds now
        logger.info("tax_law_configuration_fetch_superseded", tax_year=tax_year)
        current = self.cache.get(tax_year)
        return current if current is not None else config

    def _fetch(self, tax_year: int) -> Optional[TaxLawConfiguration]:
        try:
            return self.store.fetch(tax_year)
        except StoreUnavailableError as e:
            logger.error("tax_law_store_unavailable", **e.log_context())
            raise
        except Exception as e:
            error = StoreUnavailableError(
                f"Configuration store unavailable while fetching year {tax_year}",
                tax_year=tax_year,
                store_error=str(e),
            )
            logger.error("tax_law_store_unavailable", **error.log_context())
            raise error from e

    def upsert(self, config: TaxLawConfiguration) -> None:
        """Insert or replace the configuration for ``config.tax_year``.

        Writes through to the store first, so a store failure leaves the
        cache untouched.
        """
        if not config.tax_year or config.tax_year <= 0:
            raise InvalidConfigurationError(
                "Tax year must be set before upsert",
                config_key="tax_year",
                expected="positive integer year",
                actual=config.tax_year,
            )

        if self.store is not None:
            try:
                self.store.save(config)
            except StoreUnavailableError:
                raise
            except Exception as e:
                error = StoreUnavailableError(
                    f"Configuration store unavailable while saving year {config.tax_year}",
                    tax_year=config.tax_year,
                    store_error=str(e),
                )
                logger.error("tax_law_configuration_update_failed", **error.log_context())
                raise error from e

        self.cache.put(config)
        logger.info("tax_law_configuration_updated", tax_year=config.tax_year)

    def clear_cache(self) -> None:
        """Drop every cached year; later lookups go back to the store."""
        self.cache.clear()
        logger.info("tax_law_configuration_cache_cleared")

    def initialize_default_configurations(self) -> list[int]:
        """Seed the built-in tax years. Returns the years seeded."""
        seeded = []
        for config in get_default_configurations():
            self.upsert(config)
            seeded.append(config.tax_year)
        logger.info("tax_law_defaults_seeded", tax_years=seeded)
        return seeded

    def cached_years(self) -> list[int]:
        return self.cache.years()

    def standard_deduction(self, tax_year: int, filing_status: FilingStatus):
        """Standard deduction for a year and filing status."""
        return self.get(tax_year).standard_deduction(filing_status)

    def tax_brackets(self, tax_year: int, filing_status: FilingStatus) -> tuple[TaxBracket, ...]:
        """Bracket schedule for a year and filing status."""
        return self.get(tax_year).brackets_for(filing_status)
