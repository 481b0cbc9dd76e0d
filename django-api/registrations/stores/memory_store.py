"""In-memory stores for local wiring and tests."""

import threading
import uuid
from datetime import datetime

from registrations.domain import (
    Entity,
    EntityId,
    EventKey,
    EventKind,
    NewEntity,
    RegistrationRecord,
    RegistrationStatus,
)
from registrations.stores.interfaces import EntityStore, PriceStore, RegistrationStore


class InMemoryRegistrationStore(RegistrationStore):
    """Dict-backed ledger store. One lock serialises every read and write."""

    def __init__(self) -> None:
        self._records: dict[tuple[EntityId, EventKey], RegistrationRecord] = {}
        self._lock = threading.Lock()

    def get(self, entity_id: EntityId, event_key: EventKey) -> RegistrationRecord | None:
        with self._lock:
            return self._records.get((entity_id, event_key))

    def get_or_create_pending(
        self, entity_id: EntityId, event_key: EventKey, created_at: datetime
    ) -> tuple[RegistrationRecord, bool]:
        with self._lock:
            existing = self._records.get((entity_id, event_key))
            if existing is not None:
                return existing, False
            record = RegistrationRecord(
                entity_id=entity_id,
                event_key=event_key,
                status=RegistrationStatus.PENDING,
                created_at=created_at,
            )
            self._records[(entity_id, event_key)] = record
            return record, True

    def mark_paid_if_pending(
        self,
        entity_id: EntityId,
        event_key: EventKey,
        paid_at: datetime,
        amount_minor_units: int,
        payment_ref: str,
    ) -> bool:
        with self._lock:
            current = self._records.get((entity_id, event_key))
            if current is None or current.status is not RegistrationStatus.PENDING:
                return False
            self._records[(entity_id, event_key)] = current.mark_paid(
                paid_at, amount_minor_units, payment_ref
            )
            return True

    def list_for_event(self, event_key: EventKey) -> list[RegistrationRecord]:
        with self._lock:
            records = [r for (_, key), r in self._records.items() if key == event_key]
        return sorted(records, key=lambda r: r.created_at)

    def list_by_payment_ref(self, payment_ref: str) -> list[RegistrationRecord]:
        with self._lock:
            return [r for r in self._records.values() if r.payment_ref == payment_ref]


class InMemoryEntityStore(EntityStore):
    """Dict-backed player and team store."""

    def __init__(self) -> None:
        self._entities: dict[EntityId, Entity] = {}

    def create(self, entity: NewEntity) -> EntityId:
        entity_id = EntityId(uuid.uuid4())
        self._entities[entity_id] = Entity(
            id=entity_id, kind=entity.kind, name=entity.name.strip(), owner=entity.owner
        )
        return entity_id

    def get(self, entity_id: EntityId) -> Entity | None:
        return self._entities.get(entity_id)

    def list_for_owner(self, owner: str) -> list[Entity]:
        return [e for e in self._entities.values() if e.owner == owner]


class InMemoryPriceStore(PriceStore):
    """Fixed list of price overrides."""

    def __init__(self, prices: list[tuple[EventKind, str, int]] | None = None) -> None:
        self._prices = list(prices or [])

    def list_prices(self) -> list[tuple[EventKind, str, int]]:
        return list(self._prices)
