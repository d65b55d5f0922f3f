"""Wiring of registry, calculator and advisor from configuration."""

from dataclasses import dataclass
from typing import Optional

import structlog

from .advisor import DeductionAdvisor
from .calculator import TaxCalculator
from .config import TaxCoreConfig
from .registry import ConfigurationStore, JsonDirectoryStore, TaxLawCache, TaxLawRegistry

logger = structlog.get_logger()


@dataclass
class TaxEngine:
    """The three collaborating components, sharing one registry."""
    registry: TaxLawRegistry
    calculator: TaxCalculator
    advisor: DeductionAdvisor


def create_tax_engine(
    config: Optional[TaxCoreConfig] = None,
    *,
    cache: Optional[TaxLawCache] = None,
    store: Optional[ConfigurationStore] = None,
) -> TaxEngine:
    """Build a ready-to-use engine.

    Args:
        config: Settings; loaded from the environment when omitted
        cache: Cache to share with other registries
        store: Explicit configuration store. When omitted and
            ``config.config_store_dir`` is set, a JsonDirectoryStore over
            that directory is used.

    Returns:
        TaxEngine with defaults seeded when ``config.seed_default_years``
    """
    config = config or TaxCoreConfig()

    if store is None and config.config_store_dir:
        store = JsonDirectoryStore(config.config_store_dir)

    registry = TaxLawRegistry(cache=cache, store=store)
    if config.seed_default_years:
        registry.initialize_default_configurations()

    calculator = TaxCalculator(
        registry,
        apply_additional_medicare_tax=config.apply_additional_medicare_tax,
    )
    advisor = DeductionAdvisor(calculator, registry, settings=config.advisor)

    logger.info(
        "tax_engine_created",
        env=config.env,
        cached_years=registry.cached_years(),
        store=type(store).__name__ if store is not None else None,
    )
    return TaxEngine(registry=registry, calculator=calculator, advisor=advisor)
