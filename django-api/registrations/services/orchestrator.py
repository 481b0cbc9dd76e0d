"""Checkout orchestration - register, quote, capture, reconcile.

One RegistrationOrchestrator drives one checkout:

    COLLECTING -> REGISTERING -> AWAITING_PAYMENT -> CAPTURING -> RECONCILED

Any failing step moves to ERROR, from which the caller may retry (back to
COLLECTING) or abandon (FAILED). Abandoning leaves Pending ledger rows
behind, which is the correct state for a later checkout to resume from.
"""

from collections.abc import Iterable
from dataclasses import replace

import structlog

from registrations.domain import (
    CapturedPayment,
    CheckoutState,
    EntityId,
    EntityOutcome,
    FeeSchedule,
    OutcomeStatus,
    ReconcileReport,
    RegistrationRecord,
    RegistrationResult,
    SelectionSet,
)
from registrations.domain.errors import (
    AmountMismatchError,
    ConsistencyError,
    DomainError,
    GatewayError,
    StorageUnavailableError,
    ValidationFailedError,
)
from registrations.gateways.interfaces import PaymentGateway
from registrations.services.ledger import RegistrationLedger, unique_ids
from registrations.stores.interfaces import EntityStore

logger = structlog.get_logger(__name__)

ALREADY_PAID_WARNING = "already paid"

_TRANSITIONS: dict[CheckoutState, set[CheckoutState]] = {
    CheckoutState.COLLECTING: {
        CheckoutState.REGISTERING,
        CheckoutState.CAPTURING,
        CheckoutState.ERROR,
        CheckoutState.FAILED,
    },
    CheckoutState.REGISTERING: {
        CheckoutState.AWAITING_PAYMENT,
        CheckoutState.RECONCILED,
        CheckoutState.ERROR,
    },
    CheckoutState.AWAITING_PAYMENT: {
        CheckoutState.CAPTURING,
        CheckoutState.ERROR,
        CheckoutState.FAILED,
    },
    CheckoutState.CAPTURING: {
        CheckoutState.CAPTURING,
        CheckoutState.RECONCILED,
        CheckoutState.ERROR,
    },
    # A reconciled checkout only accepts a replayed capture.
    CheckoutState.RECONCILED: {CheckoutState.CAPTURING},
    CheckoutState.ERROR: {CheckoutState.COLLECTING, CheckoutState.FAILED},
    CheckoutState.FAILED: set(),
}


class RegistrationOrchestrator:
    """Coordinates a SelectionSet, the ledger and the payment gateway."""

    def __init__(
        self,
        selection: SelectionSet,
        ledger: RegistrationLedger,
        fees: FeeSchedule,
        entities: EntityStore,
        gateway: PaymentGateway | None = None,
    ) -> None:
        self._selection = selection
        self._ledger = ledger
        self._fees = fees
        self._entities = entities
        self._gateway = gateway
        self._state = CheckoutState.COLLECTING
        self._pending: tuple[EntityId, ...] = ()
        self._log = logger.bind(event_key=str(selection.event_key), tier=selection.tier)

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def selection(self) -> SelectionSet:
        return self._selection

    @property
    def pending_entity_ids(self) -> tuple[EntityId, ...]:
        return self._pending

    def _transition(self, target: CheckoutState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise ValidationFailedError(
                f"Checkout cannot move from {self._state.value} to {target.value}"
            )
        self._log.debug("checkout_transition", source=self._state.value, target=target.value)
        self._state = target

    def _fail(self, exc: DomainError) -> None:
        self._log.warning("checkout_error", state=self._state.value, error=str(exc))
        self._state = CheckoutState.ERROR

    def retry(self) -> None:
        """Return an errored checkout to COLLECTING so the user can try again."""
        self._transition(CheckoutState.COLLECTING)

    def abandon(self) -> None:
        """End the checkout. Pending ledger rows are kept for a later session."""
        self._transition(CheckoutState.FAILED)

    def _result(self, state: CheckoutState, amount_due: int = 0, **kwargs) -> RegistrationResult:
        return RegistrationResult(
            state=state,
            event_key=self._selection.event_key,
            tier=self._selection.tier,
            amount_due=amount_due,
            currency=self._fees.currency,
            **kwargs,
        )

    def begin_registration(self) -> RegistrationResult:
        """Persist new entities, register everyone and quote what is still owed.

        Entities that fail creation or registration are reported in the
        outcomes and excluded from the amount. Entities already Paid for the
        event cost nothing.

        Raises:
            ValidationFailedError: If nothing is selected or the tier is unknown.
        """
        self._transition(CheckoutState.REGISTERING)
        selection = self._selection
        event_key = selection.event_key
        try:
            if selection.is_empty():
                raise ValidationFailedError("Select at least one player or team")
            self._fees.per_entity(event_key.kind, selection.tier)
        except ValidationFailedError as exc:
            self._fail(exc)
            raise

        outcomes: list[EntityOutcome] = []
        created: list[EntityId] = []
        for new_entity in list(selection.new_entities):
            try:
                entity_id = self._entities.create(new_entity)
            except DomainError as exc:
                self._log.warning("entity_create_failed", name=new_entity.name, error=str(exc))
                outcomes.append(
                    EntityOutcome(
                        status=OutcomeStatus.REGISTRATION_FAILED,
                        name=new_entity.name,
                        reason=exc.message,
                    )
                )
                continue
            selection.fold_created(new_entity, entity_id)
            created.append(entity_id)

        pending: list[EntityId] = []
        paid: list[RegistrationRecord] = []
        for entity_id in list(selection.selected_entity_ids):
            try:
                record = self._ledger.ensure_registered(entity_id, event_key)
            except StorageUnavailableError as exc:
                self._log.warning("registration_failed", entity_id=str(entity_id), error=str(exc))
                outcomes.append(
                    EntityOutcome(
                        status=OutcomeStatus.REGISTRATION_FAILED,
                        entity_id=entity_id,
                        reason=exc.message,
                    )
                )
                continue
            if record.is_paid:
                paid.append(record)
                outcomes.append(
                    EntityOutcome(
                        status=OutcomeStatus.ALREADY_PAID,
                        entity_id=entity_id,
                        reason=ALREADY_PAID_WARNING,
                    )
                )
            else:
                pending.append(entity_id)
                outcomes.append(EntityOutcome(status=OutcomeStatus.PENDING, entity_id=entity_id))

        warnings = tuple(f"{r.entity_id}: {ALREADY_PAID_WARNING}" for r in paid)
        if not pending and not paid:
            self._state = CheckoutState.ERROR
            self._log.warning("checkout_nothing_registered", failures=len(outcomes))
            return self._result(
                CheckoutState.ERROR,
                outcomes=tuple(outcomes),
                created_entity_ids=tuple(created),
            )

        self._pending = tuple(pending)
        if not pending:
            self._transition(CheckoutState.RECONCILED)
            self._log.info("checkout_nothing_due", already_paid=len(paid))
            return self._result(
                CheckoutState.RECONCILED,
                records=tuple(paid),
                outcomes=tuple(outcomes),
                warnings=warnings,
                created_entity_ids=tuple(created),
            )

        amount_due = self._fees.quote(event_key, selection.tier, len(pending))
        self._transition(CheckoutState.AWAITING_PAYMENT)
        self._log.info("checkout_awaiting_payment", amount_due=amount_due, pending=len(pending))
        return self._result(
            CheckoutState.AWAITING_PAYMENT,
            amount_due=amount_due,
            pending_entity_ids=self._pending,
            records=tuple(paid),
            outcomes=tuple(outcomes),
            warnings=warnings,
            created_entity_ids=tuple(created),
        )

    def _resolve_pending(
        self,
        pending_entity_ids: Iterable[EntityId] | None,
        owned_entity_ids: Iterable[EntityId] | None,
    ) -> tuple[EntityId, ...]:
        """Return the pending set, recovering it from the ledger when it was lost."""
        if pending_entity_ids:
            return tuple(unique_ids(pending_entity_ids))
        owned = set(owned_entity_ids or ()) or set(self._selection.selected_entity_ids)
        owned.update(self._pending)
        recovered = tuple(
            record.entity_id
            for record in self._ledger.find_by_event(self._selection.event_key)
            if record.entity_id in owned and not record.is_paid
        )
        self._log.info("pending_set_recovered", owned=len(owned), recovered=len(recovered))
        return recovered

    def _settled_result(
        self, records: Iterable[RegistrationRecord], warning: str = ALREADY_PAID_WARNING
    ) -> RegistrationResult:
        records = tuple(records)
        self._pending = ()
        self._state = CheckoutState.RECONCILED
        return self._result(
            CheckoutState.RECONCILED,
            records=records,
            outcomes=tuple(
                EntityOutcome(
                    status=OutcomeStatus.ALREADY_PAID, entity_id=r.entity_id, reason=warning
                )
                for r in records
            ),
            warnings=tuple(f"{r.entity_id}: {warning}" for r in records),
        )

    def _report_result(
        self, report: ReconcileReport, payment: CapturedPayment
    ) -> RegistrationResult:
        outcomes = [
            EntityOutcome(status=OutcomeStatus.NOW_PAID, entity_id=r.entity_id)
            for r in report.now_paid
        ]
        outcomes += [
            EntityOutcome(
                status=OutcomeStatus.ALREADY_PAID,
                entity_id=r.entity_id,
                reason=ALREADY_PAID_WARNING,
            )
            for r in report.already_paid
        ]
        outcomes += [
            EntityOutcome(
                status=OutcomeStatus.REGISTRATION_FAILED,
                entity_id=entity_id,
                reason="no registration record",
            )
            for entity_id in report.missing
        ]
        warnings = [f"{r.entity_id}: {ALREADY_PAID_WARNING}" for r in report.already_paid]
        warnings += [f"{entity_id}: no registration record" for entity_id in report.missing]
        self._pending = ()
        self._transition(CheckoutState.RECONCILED)
        return self._result(
            CheckoutState.RECONCILED,
            records=report.records,
            outcomes=tuple(outcomes),
            warnings=tuple(warnings),
            payment=payment,
        )

    def complete_capture(
        self,
        pending_entity_ids: Iterable[EntityId] | None,
        payment: CapturedPayment,
        owned_entity_ids: Iterable[EntityId] | None = None,
    ) -> RegistrationResult:
        """Verify a captured payment against the quote and mark entities Paid.

        When pending_entity_ids is empty (the caller lost its state), the
        pending set is recovered from the ledger, limited to entities the
        caller owns. A replay of an already reconciled payment returns the
        existing Paid records.

        Raises:
            AmountMismatchError: If the amount differs from the recomputed quote.
            ConsistencyError: If nothing could be reconciled for the payment.
            StorageUnavailableError: If the ledger cannot be reached.
        """
        self._transition(CheckoutState.CAPTURING)
        event_key = self._selection.event_key
        try:
            pending = self._resolve_pending(pending_entity_ids, owned_entity_ids)
            if not pending:
                replayed = [
                    r for r in self._ledger.find_by_payment_ref(payment.token)
                    if r.event_key == event_key
                ]
                if replayed:
                    self._log.info("capture_replayed", payment_ref=payment.token)
                    return self._settled_result(replayed)
                raise ConsistencyError("", "Nothing pending to reconcile for this payment")

            expected = self._fees.quote(event_key, self._selection.tier, len(pending))
            if (
                payment.amount_minor_units != expected
                or payment.currency != self._fees.currency
            ):
                self._log.error(
                    "amount_mismatch",
                    expected=expected,
                    actual=payment.amount_minor_units,
                    currency=payment.currency,
                    payment_ref=payment.token,
                )
                raise AmountMismatchError(expected, payment.amount_minor_units)

            report = self._ledger.reconcile_capture(pending, event_key, payment)
            if not report.records:
                raise ConsistencyError(
                    ",".join(str(e) for e in report.missing),
                    "Captured payment matched no registration records",
                )
        except DomainError as exc:
            self._fail(exc)
            raise
        return self._report_result(report, payment)

    def capture_payment(
        self,
        pending_entity_ids: Iterable[EntityId] | None,
        token: str,
        payer_email: str,
        owned_entity_ids: Iterable[EntityId] | None = None,
    ) -> RegistrationResult:
        """Charge a payment token for the entities still Pending and reconcile it.

        The ledger is read before charging: entities already Paid are left
        out of the amount, and if none remain the card is not charged at all.
        The charge is never retried here. A timed out capture is checked
        against the ledger: if every charged entity is already Paid the
        checkout is reconciled, otherwise the GatewayError propagates and the
        Pending rows stay for the user to retry.

        Raises:
            GatewayError: If the gateway rejected or failed the charge.
            AmountMismatchError: If the gateway captured a different amount.
        """
        if self._gateway is None:
            raise ValidationFailedError("No payment gateway configured")
        self._transition(CheckoutState.CAPTURING)
        event_key = self._selection.event_key
        try:
            requested = self._resolve_pending(pending_entity_ids, owned_entity_ids)
            current = [(entity_id, self._ledger.get(entity_id, event_key)) for entity_id in requested]
            paid = [record for _, record in current if record is not None and record.is_paid]
            pending = tuple(
                entity_id for entity_id, record in current if record is not None and not record.is_paid
            )
            if not pending:
                if paid:
                    self._log.info("capture_skipped_already_paid", paid=len(paid), payment_ref=token)
                    return self._settled_result(paid)
                raise ValidationFailedError("Nothing pending to pay for")
            amount = self._fees.quote(event_key, self._selection.tier, len(pending))
            self._log.info("capture_started", amount=amount, pending=len(pending), skipped=len(paid))
            try:
                payment = self._gateway.capture(token, amount, self._fees.currency, payer_email)
            except TimeoutError as exc:
                raise GatewayError("Payment gateway timed out", timed_out=True) from exc
        except GatewayError as exc:
            if exc.timed_out:
                try:
                    records = [self._ledger.get(entity_id, event_key) for entity_id in pending]
                except StorageUnavailableError as storage_exc:
                    self._fail(storage_exc)
                    raise exc from storage_exc
                if all(r is not None and r.is_paid for r in records):
                    self._log.warning("capture_timeout_already_settled", payment_ref=token)
                    return self._settled_result(records, warning="paid before timeout")
            self._fail(exc)
            raise
        except DomainError as exc:
            self._fail(exc)
            raise

        result = self.complete_capture(pending, payment)
        if not paid:
            return result
        return replace(
            result,
            records=result.records + tuple(paid),
            outcomes=result.outcomes
            + tuple(
                EntityOutcome(
                    status=OutcomeStatus.ALREADY_PAID,
                    entity_id=r.entity_id,
                    reason=ALREADY_PAID_WARNING,
                )
                for r in paid
            ),
            warnings=result.warnings + tuple(f"{r.entity_id}: {ALREADY_PAID_WARNING}" for r in paid),
        )
