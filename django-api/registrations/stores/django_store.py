"""Django ORM implementations of the registration stores."""

from datetime import datetime
from functools import wraps

from django.db import DatabaseError, IntegrityError, transaction

from registrations import models
from registrations.domain import (
    Entity,
    EntityId,
    EntityKind,
    EventKey,
    EventKind,
    NewEntity,
    RegistrationRecord,
    RegistrationStatus,
)
from registrations.domain.errors import StorageUnavailableError
from registrations.stores.interfaces import EntityStore, PriceStore, RegistrationStore


def _storage_errors(method):
    """Map database failures to StorageUnavailableError."""

    @wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except DatabaseError as exc:
            raise StorageUnavailableError(type(exc).__name__) from exc

    return wrapper


def _event_filter(event_key: EventKey) -> dict:
    return {
        "event_kind": event_key.kind.value,
        "event_name": event_key.name,
        "event_year": event_key.year,
        "event_sub_id": event_key.sub_id,
    }


def _to_record(row: models.Registration) -> RegistrationRecord:
    return RegistrationRecord(
        entity_id=EntityId(row.entity_id),
        event_key=EventKey(
            kind=EventKind(row.event_kind),
            name=row.event_name,
            year=row.event_year,
            sub_id=row.event_sub_id,
        ),
        status=RegistrationStatus(row.status),
        created_at=row.created_at,
        paid_at=row.paid_at,
        amount_paid_minor_units=row.amount_paid_minor_units,
        payment_ref=row.payment_ref,
    )


class DjangoRegistrationStore(RegistrationStore):
    """Ledger store backed by the Registration table.

    The unique constraint on the pair serialises inserts; the Pending to
    Paid move is a conditional UPDATE.
    """

    @_storage_errors
    def get(self, entity_id: EntityId, event_key: EventKey) -> RegistrationRecord | None:
        row = models.Registration.objects.filter(
            entity_id=entity_id.value, **_event_filter(event_key)
        ).first()
        return _to_record(row) if row else None

    @_storage_errors
    def get_or_create_pending(
        self, entity_id: EntityId, event_key: EventKey, created_at: datetime
    ) -> tuple[RegistrationRecord, bool]:
        lookup = {"entity_id": entity_id.value, **_event_filter(event_key)}
        try:
            with transaction.atomic():
                row, created = models.Registration.objects.get_or_create(
                    **lookup,
                    defaults={"status": models.StatusChoices.PENDING, "created_at": created_at},
                )
        except IntegrityError:
            # Lost the insert race; the winner's row is authoritative.
            row, created = models.Registration.objects.get(**lookup), False
        return _to_record(row), created

    @_storage_errors
    def mark_paid_if_pending(
        self,
        entity_id: EntityId,
        event_key: EventKey,
        paid_at: datetime,
        amount_minor_units: int,
        payment_ref: str,
    ) -> bool:
        updated = models.Registration.objects.filter(
            entity_id=entity_id.value,
            status=models.StatusChoices.PENDING,
            **_event_filter(event_key),
        ).update(
            status=models.StatusChoices.PAID,
            paid_at=paid_at,
            amount_paid_minor_units=amount_minor_units,
            payment_ref=payment_ref,
        )
        return updated == 1

    @_storage_errors
    def list_for_event(self, event_key: EventKey) -> list[RegistrationRecord]:
        rows = models.Registration.objects.filter(**_event_filter(event_key))
        return [_to_record(row) for row in rows]

    @_storage_errors
    def list_by_payment_ref(self, payment_ref: str) -> list[RegistrationRecord]:
        rows = models.Registration.objects.filter(payment_ref=payment_ref)
        return [_to_record(row) for row in rows]


class DjangoEntityStore(EntityStore):
    """Player and team store backed by the Participant table."""

    @_storage_errors
    def create(self, entity: NewEntity) -> EntityId:
        row = models.Participant.objects.create(
            kind=entity.kind.value, name=entity.name.strip(), owner=entity.owner
        )
        return EntityId(row.id)

    @_storage_errors
    def get(self, entity_id: EntityId) -> Entity | None:
        row = models.Participant.objects.filter(id=entity_id.value).first()
        if row is None:
            return None
        return Entity(id=EntityId(row.id), kind=EntityKind(row.kind), name=row.name, owner=row.owner)

    @_storage_errors
    def list_for_owner(self, owner: str) -> list[Entity]:
        rows = models.Participant.objects.filter(owner=owner)
        return [
            Entity(id=EntityId(row.id), kind=EntityKind(row.kind), name=row.name, owner=row.owner)
            for row in rows
        ]


class DjangoPriceStore(PriceStore):
    """Price overrides managed in the admin."""

    @_storage_errors
    def list_prices(self) -> list[tuple[EventKind, str, int]]:
        return [
            (EventKind(row.event_kind), row.tier, row.amount_minor_units)
            for row in models.PriceTier.objects.all()
        ]
