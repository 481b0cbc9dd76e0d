"""Registration ledger - the single source of truth for paid status.

The ledger owns the per-(entity, event) state machine:
Unregistered (no record) -> Pending -> Paid. Paid is terminal and no
operation here moves a record backwards.
"""

from collections.abc import Callable, Iterable
from datetime import datetime

import structlog
from django.utils import timezone

from registrations.domain import (
    CapturedPayment,
    EntityId,
    EventKey,
    ReconcileReport,
    RegistrationRecord,
)
from registrations.domain.errors import ConsistencyError
from registrations.stores.interfaces import RegistrationStore

logger = structlog.get_logger(__name__)


def split_amount(total: int, parts: int) -> list[int]:
    """Split total into even shares; the first shares absorb the remainder."""
    if parts <= 0:
        return []
    share, remainder = divmod(total, parts)
    return [share + 1 if i < remainder else share for i in range(parts)]


def unique_ids(entity_ids: Iterable[EntityId]) -> list[EntityId]:
    return list(dict.fromkeys(entity_ids))


class RegistrationLedger:
    """Service over a RegistrationStore."""

    def __init__(
        self, store: RegistrationStore, clock: Callable[[], datetime] = timezone.now
    ) -> None:
        self._store = store
        self._clock = clock

    def ensure_registered(self, entity_id: EntityId, event_key: EventKey) -> RegistrationRecord:
        """Return the record for the pair, creating a Pending one if needed.

        Safe to call any number of times: an existing record, Pending or
        Paid, is returned unchanged.

        Raises:
            StorageUnavailableError: If the store cannot be reached.
        """
        record, created = self._store.get_or_create_pending(entity_id, event_key, self._clock())
        if created:
            logger.info("registration_created", entity_id=str(entity_id), event_key=str(event_key))
        return record

    def find_by_event(self, event_key: EventKey) -> list[RegistrationRecord]:
        return self._store.list_for_event(event_key)

    def find_by_payment_ref(self, payment_ref: str) -> list[RegistrationRecord]:
        return self._store.list_by_payment_ref(payment_ref)

    def get(self, entity_id: EntityId, event_key: EventKey) -> RegistrationRecord | None:
        return self._store.get(entity_id, event_key)

    def is_paid(self, entity_id: EntityId, event_key: EventKey) -> bool:
        record = self._store.get(entity_id, event_key)
        return record is not None and record.is_paid

    def reconcile_capture(
        self,
        entity_ids: Iterable[EntityId],
        event_key: EventKey,
        payment: CapturedPayment,
    ) -> ReconcileReport:
        """Mark each entity Paid by the captured payment.

        Each entity is handled on its own: an already Paid record is left
        as is, and a missing record is logged as a consistency error without
        stopping the rest of the batch.

        Raises:
            StorageUnavailableError: If the store cannot be reached.
        """
        ids = unique_ids(entity_ids)
        shares = split_amount(payment.amount_minor_units, len(ids))
        paid_at = self._clock()
        now_paid: list[RegistrationRecord] = []
        already_paid: list[RegistrationRecord] = []
        missing: list[EntityId] = []

        for entity_id, share in zip(ids, shares):
            moved = self._store.mark_paid_if_pending(
                entity_id, event_key, paid_at, share, payment.token
            )
            record = self._store.get(entity_id, event_key)
            if record is None:
                error = ConsistencyError(str(entity_id))
                logger.error(
                    "reconcile_missing_record",
                    entity_id=str(entity_id),
                    event_key=str(event_key),
                    payment_ref=payment.token,
                    error=str(error),
                )
                missing.append(entity_id)
            elif moved:
                now_paid.append(record)
            else:
                logger.warning(
                    "reconcile_already_paid",
                    entity_id=str(entity_id),
                    event_key=str(event_key),
                    payment_ref=payment.token,
                    existing_ref=record.payment_ref,
                )
                already_paid.append(record)

        logger.info(
            "capture_reconciled",
            event_key=str(event_key),
            payment_ref=payment.token,
            now_paid=len(now_paid),
            already_paid=len(already_paid),
            missing=len(missing),
        )
        return ReconcileReport(
            now_paid=tuple(now_paid), already_paid=tuple(already_paid), missing=tuple(missing)
        )
