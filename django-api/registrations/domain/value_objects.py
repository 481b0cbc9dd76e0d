"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from enum import Enum
from typing import Self
from uuid import UUID

from registrations.domain.errors import ValidationFailedError


class EventKind(Enum):
    """Kinds of registrable, time-scoped events."""

    SEASON = "season"
    TRYOUT = "tryout"
    TOURNAMENT = "tournament"

    @classmethod
    def parse(cls, value: str) -> Self:
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValidationFailedError(f"Unknown event kind: {value!r}") from None


class EntityKind(Enum):
    """Kinds of participants that can be registered."""

    PLAYER = "player"
    TEAM = "team"

    @classmethod
    def parse(cls, value: str) -> Self:
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValidationFailedError(f"Unknown entity kind: {value!r}") from None


@dataclass(frozen=True)
class EntityId:
    """Unique identifier for a player or team."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        try:
            return cls(value=UUID(str(value)))
        except ValueError:
            raise ValidationFailedError("Invalid entity ID format") from None

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventKey:
    """Identifies one season, tryout or tournament occurrence.

    A missing sub_id is stored as "" so that an absent sub_id and an empty
    one compare equal.
    """

    kind: EventKind
    name: str
    year: int
    sub_id: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EventKind):
            raise ValidationFailedError("Event kind must be an EventKind")
        if not self.name or not self.name.strip():
            raise ValidationFailedError("Event name cannot be empty")
        if isinstance(self.year, bool) or not isinstance(self.year, int) or self.year <= 0:
            raise ValidationFailedError("Event year must be a positive integer")
        if self.sub_id is None:
            object.__setattr__(self, "sub_id", "")

    def __str__(self) -> str:
        base = f"{self.kind.value}:{self.name}:{self.year}"
        return f"{base}:{self.sub_id}" if self.sub_id else base


@dataclass(frozen=True)
class Entity:
    """A persisted participant.

    Only id and kind matter for reconciliation; name and owner are carried
    for the calling context.
    """

    id: EntityId
    kind: EntityKind
    name: str = ""
    owner: str = ""


@dataclass(frozen=True)
class NewEntity:
    """A participant collected during checkout that is not persisted yet."""

    kind: EntityKind
    name: str
    owner: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationFailedError("New entity needs a name")


@dataclass(frozen=True)
class CapturedPayment:
    """Result of charging a tokenized card through the payment gateway."""

    token: str
    amount_minor_units: int
    currency: str
    payer_email: str
    card_last4: str = ""
    card_brand: str = ""

    def __post_init__(self) -> None:
        if not self.token:
            raise ValidationFailedError("Captured payment has no token")
        if self.amount_minor_units < 0:
            raise ValidationFailedError("Captured amount cannot be negative")
