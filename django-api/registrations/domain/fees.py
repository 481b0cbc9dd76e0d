"""Fee schedule: (event kind, tier, entity count) -> amount in minor units."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Self

from registrations.domain.errors import ValidationFailedError
from registrations.domain.value_objects import EventKey, EventKind


@dataclass(frozen=True)
class FeeSchedule:
    """Immutable per-entity price table.

    Prices are keyed by (event kind, tier). Tiers keep their insertion
    order; the first tier of a kind is its default.
    """

    prices: Mapping[tuple[EventKind, str], int]
    currency: str = "USD"
    _tiers: Mapping[EventKind, tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        tiers: dict[EventKind, list[str]] = {}
        for (kind, tier), amount in self.prices.items():
            if amount < 0:
                raise ValidationFailedError(f"Negative price for {kind.value}/{tier}")
            tiers.setdefault(kind, []).append(tier)
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))
        object.__setattr__(
            self, "_tiers", MappingProxyType({k: tuple(v) for k, v in tiers.items()})
        )

    @classmethod
    def from_config(cls, table: Mapping[str, Mapping[str, int]], currency: str = "USD") -> Self:
        """Build from a {"season": {"2x/week": 45000}, ...} mapping."""
        prices: dict[tuple[EventKind, str], int] = {}
        for kind_name, tiers in table.items():
            kind = EventKind.parse(kind_name)
            for tier, amount in tiers.items():
                prices[(kind, tier)] = int(amount)
        return cls(prices=prices, currency=currency)

    def overlay(self, entries: Iterable[tuple[EventKind, str, int]]) -> Self:
        """Return a schedule with the given entries replacing or adding prices."""
        prices = dict(self.prices)
        for kind, tier, amount in entries:
            prices[(kind, tier)] = amount
        return type(self)(prices=prices, currency=self.currency)

    def tiers(self, kind: EventKind) -> tuple[str, ...]:
        return self._tiers.get(kind, ())

    def default_tier(self, kind: EventKind) -> str:
        tiers = self.tiers(kind)
        if not tiers:
            raise ValidationFailedError(f"No pricing configured for {kind.value}")
        return tiers[0]

    def per_entity(self, kind: EventKind, tier: str) -> int:
        try:
            return self.prices[(kind, tier)]
        except KeyError:
            raise ValidationFailedError(f"Unknown tier {tier!r} for {kind.value}") from None

    def quote(self, event_key: EventKey, tier: str, entity_count: int) -> int:
        """Total due for entity_count entities. Zero entities cost nothing."""
        if entity_count < 0:
            raise ValidationFailedError("Entity count cannot be negative")
        return self.per_entity(event_key.kind, tier) * entity_count
