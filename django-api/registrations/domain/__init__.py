from registrations.domain.fees import FeeSchedule
from registrations.domain.models import (
    CheckoutState,
    EntityOutcome,
    OutcomeStatus,
    ReconcileReport,
    RegistrationRecord,
    RegistrationResult,
    RegistrationStatus,
)
from registrations.domain.selection import SelectionSet
from registrations.domain.value_objects import (
    CapturedPayment,
    Entity,
    EntityId,
    EntityKind,
    EventKey,
    EventKind,
    NewEntity,
)

__all__ = [
    "FeeSchedule",
    "SelectionSet",
    "CheckoutState",
    "EntityOutcome",
    "OutcomeStatus",
    "ReconcileReport",
    "RegistrationRecord",
    "RegistrationResult",
    "RegistrationStatus",
    "CapturedPayment",
    "Entity",
    "EntityId",
    "EntityKind",
    "EventKey",
    "EventKind",
    "NewEntity",
]
