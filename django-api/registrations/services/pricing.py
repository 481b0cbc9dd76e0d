"""Pricing service: builds the fee schedule from settings and admin overrides.

The override rows are cached under PRICE_TABLE_CACHE_KEY and the cache is
cleared by signals whenever a PriceTier changes.
"""

from collections.abc import Mapping

import structlog
from django.core.cache import cache

from registrations.domain import EventKind, FeeSchedule
from registrations.stores.interfaces import PriceStore

logger = structlog.get_logger(__name__)

PRICE_TABLE_CACHE_KEY = "registrations:price_table"


def invalidate_price_cache() -> None:
    cache.delete(PRICE_TABLE_CACHE_KEY)


class PricingService:
    """Service for quoting registration fees."""

    def __init__(
        self,
        store: PriceStore,
        defaults: Mapping[str, Mapping[str, int]],
        currency: str = "USD",
        cache_timeout: int | None = 300,
    ) -> None:
        self._store = store
        self._defaults = defaults
        self._currency = currency
        self._cache_timeout = cache_timeout

    def _override_rows(self) -> list[tuple[str, str, int]]:
        rows = cache.get(PRICE_TABLE_CACHE_KEY)
        if rows is None:
            rows = [(kind.value, tier, amount) for kind, tier, amount in self._store.list_prices()]
            cache.set(PRICE_TABLE_CACHE_KEY, rows, self._cache_timeout)
            logger.debug("price_table_loaded", overrides=len(rows))
        return rows

    def fee_schedule(self) -> FeeSchedule:
        """Return the current schedule: defaults overlaid by admin prices."""
        base = FeeSchedule.from_config(self._defaults, currency=self._currency)
        return base.overlay(
            (EventKind(kind), tier, amount) for kind, tier, amount in self._override_rows()
        )
