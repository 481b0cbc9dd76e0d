"""Domain models representing persisted state and checkout results.

These are pure domain objects with no API input rules.
Django ORM models are in registrations/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from registrations.domain.value_objects import CapturedPayment, EntityId, EventKey


class RegistrationStatus(Enum):
    """Ledger states. Unregistered is implicit (no record)."""

    PENDING = "pending"
    PAID = "paid"


@dataclass(frozen=True)
class RegistrationRecord:
    """One registration of an entity for an event."""

    entity_id: EntityId
    event_key: EventKey
    status: RegistrationStatus
    created_at: datetime
    paid_at: datetime | None = None
    amount_paid_minor_units: int | None = None
    payment_ref: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status is RegistrationStatus.PAID

    def mark_paid(self, paid_at: datetime, amount: int, payment_ref: str) -> "RegistrationRecord":
        """Return the Paid version of a Pending record."""
        return replace(
            self,
            status=RegistrationStatus.PAID,
            paid_at=paid_at,
            amount_paid_minor_units=amount,
            payment_ref=payment_ref,
        )


@dataclass(frozen=True)
class ReconcileReport:
    """What reconcile_capture did for each entity in a batch."""

    now_paid: tuple[RegistrationRecord, ...] = ()
    already_paid: tuple[RegistrationRecord, ...] = ()
    missing: tuple[EntityId, ...] = ()

    @property
    def records(self) -> tuple[RegistrationRecord, ...]:
        return self.now_paid + self.already_paid


class CheckoutState(Enum):
    """States of one checkout."""

    COLLECTING = "collecting"
    REGISTERING = "registering"
    AWAITING_PAYMENT = "awaiting_payment"
    CAPTURING = "capturing"
    RECONCILED = "reconciled"
    ERROR = "error"
    FAILED = "failed"


class OutcomeStatus(Enum):
    """What the caller is told about each entity it cared about."""

    ALREADY_PAID = "already_paid"
    NOW_PAID = "now_paid"
    PENDING = "pending"
    REGISTRATION_FAILED = "registration_failed"


@dataclass(frozen=True)
class EntityOutcome:
    """Per-entity outcome. New entities that failed creation have no id."""

    status: OutcomeStatus
    entity_id: EntityId | None = None
    name: str = ""
    reason: str = ""


@dataclass(frozen=True)
class RegistrationResult:
    """Authoritative result of a checkout step."""

    state: CheckoutState
    event_key: EventKey
    tier: str
    amount_due: int
    currency: str
    pending_entity_ids: tuple[EntityId, ...] = ()
    records: tuple[RegistrationRecord, ...] = ()
    outcomes: tuple[EntityOutcome, ...] = ()
    warnings: tuple[str, ...] = ()
    payment: CapturedPayment | None = None
    created_entity_ids: tuple[EntityId, ...] = ()

    @property
    def paid_entity_ids(self) -> tuple[EntityId, ...]:
        return tuple(r.entity_id for r in self.records if r.is_paid)
