"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from registrations.domain import (
    Entity,
    EntityId,
    EventKey,
    EventKind,
    NewEntity,
    RegistrationRecord,
)


class RegistrationStore(ABC):
    """Interface for ledger persistence.

    Implementations must serialise writes per (entity_id, event_key) so that
    concurrent callers never see two records for a pair or a Paid record
    going back to Pending.
    """

    @abstractmethod
    def get(self, entity_id: EntityId, event_key: EventKey) -> RegistrationRecord | None:
        """Return the record for a pair, or None if unregistered."""
        ...

    @abstractmethod
    def get_or_create_pending(
        self, entity_id: EntityId, event_key: EventKey, created_at: datetime
    ) -> tuple[RegistrationRecord, bool]:
        """Return the existing record, or insert a Pending one.

        The boolean is True when this call created the record.
        """
        ...

    @abstractmethod
    def mark_paid_if_pending(
        self,
        entity_id: EntityId,
        event_key: EventKey,
        paid_at: datetime,
        amount_minor_units: int,
        payment_ref: str,
    ) -> bool:
        """Atomically move a Pending record to Paid.

        Returns False when the record is missing or not Pending.
        """
        ...

    @abstractmethod
    def list_for_event(self, event_key: EventKey) -> list[RegistrationRecord]:
        """Return all records for an event, oldest first."""
        ...

    @abstractmethod
    def list_by_payment_ref(self, payment_ref: str) -> list[RegistrationRecord]:
        """Return all records paid by a payment reference."""
        ...


class EntityStore(ABC):
    """Interface for player and team persistence."""

    @abstractmethod
    def create(self, entity: NewEntity) -> EntityId:
        """Persist a new entity and return its id."""
        ...

    @abstractmethod
    def get(self, entity_id: EntityId) -> Entity | None:
        """Return an entity by ID, or None if not found."""
        ...

    @abstractmethod
    def list_for_owner(self, owner: str) -> list[Entity]:
        """Return the entities owned by a guardian or coach account."""
        ...


class PriceStore(ABC):
    """Interface for admin-managed price overrides."""

    @abstractmethod
    def list_prices(self) -> list[tuple[EventKind, str, int]]:
        """Return (kind, tier, per-entity amount) rows in display order."""
        ...
