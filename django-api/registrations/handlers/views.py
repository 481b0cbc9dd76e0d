"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import structlog
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from registrations.domain import CheckoutState, EntityOutcome, OutcomeStatus, SelectionSet
from registrations.domain.errors import AlreadyPaidError, DomainError, ErrorCode
from registrations.handlers.serializers import (
    CaptureRequestSerializer,
    CheckoutRequestSerializer,
    EntityOutcomeSerializer,
    EventKeySerializer,
    NewEntitySerializer,
    QuoteQuerySerializer,
    RegistrationRecordSerializer,
    RegistrationResultSerializer,
    to_entity_ids,
)
from registrations.services.factory import build_ledger, build_orchestrator, build_pricing
from registrations.stores.django_store import DjangoEntityStore

logger = structlog.get_logger(__name__)

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_PAID: status.HTTP_409_CONFLICT,
    ErrorCode.AMOUNT_MISMATCH: status.HTTP_409_CONFLICT,
    ErrorCode.CONSISTENCY_ERROR: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.GATEWAY_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def error_response(exc: DomainError) -> Response:
    logger.info("request_failed", code=exc.code.value)
    return Response(
        {"error": {"code": exc.code.value, "message": exc.message}},
        status=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
    )


def invalid_input(errors: dict) -> Response:
    return Response(
        {
            "error": {
                "code": ErrorCode.VALIDATION_FAILED.value,
                "message": "Invalid request",
                "fields": errors,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class FeeQuoteView(APIView):
    """Handler for GET /api/fees/quote"""

    def get(self, request: Request) -> Response:
        serializer = QuoteQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return invalid_input(serializer.errors)
        data = serializer.validated_data
        try:
            event_key = EventKeySerializer.to_event_key(data)
            fees = build_pricing().fee_schedule()
            tier = data["tier"] or fees.default_tier(event_key.kind)
            amount = fees.quote(event_key, tier, data["count"])
            per_entity = fees.per_entity(event_key.kind, tier)
        except DomainError as exc:
            return error_response(exc)
        return Response(
            {
                "tier": tier,
                "count": data["count"],
                "per_entity_minor_units": per_entity,
                "amount_minor_units": amount,
                "currency": fees.currency,
                "tiers": list(fees.tiers(event_key.kind)),
            }
        )


class RegistrationListView(APIView):
    """Handler for GET /api/registrations"""

    def get(self, request: Request) -> Response:
        serializer = EventKeySerializer(data=request.query_params)
        if not serializer.is_valid():
            return invalid_input(serializer.errors)
        try:
            event_key = EventKeySerializer.to_event_key(serializer.validated_data)
            records = build_ledger().find_by_event(event_key)
        except DomainError as exc:
            return error_response(exc)
        return Response({"results": RegistrationRecordSerializer(records, many=True).data})


class CheckoutView(APIView):
    """Handler for POST /api/checkouts"""

    def post(self, request: Request) -> Response:
        serializer = CheckoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer.errors)
        data = serializer.validated_data
        try:
            event_key = EventKeySerializer.to_event_key(data["event"])
            ledger = build_ledger()
            fees = build_pricing().fee_schedule()
            selection = SelectionSet(
                event_key=event_key,
                tier=data["tier"] or fees.default_tier(event_key.kind),
                paid_check=lambda entity_id: ledger.is_paid(entity_id, event_key),
            )
            rejected = []
            for entity_id in to_entity_ids(data["entity_ids"]):
                try:
                    selection.select(entity_id)
                except AlreadyPaidError:
                    rejected.append(
                        EntityOutcome(
                            status=OutcomeStatus.ALREADY_PAID,
                            entity_id=entity_id,
                            reason="already paid",
                        )
                    )
            for new_entity in data["new_entities"]:
                selection.add_new(NewEntitySerializer.to_domain(new_entity))

            if selection.is_empty() and rejected:
                body = {
                    "state": CheckoutState.RECONCILED.value,
                    "amount_due": 0,
                    "currency": fees.currency,
                    "pending_entity_ids": [],
                    "outcomes": EntityOutcomeSerializer(rejected, many=True).data,
                    "warnings": [f"{o.entity_id}: {o.reason}" for o in rejected],
                }
                return Response(body)

            orchestrator = build_orchestrator(selection, ledger=ledger, fees=fees)
            result = orchestrator.begin_registration()
        except DomainError as exc:
            return error_response(exc)

        body = RegistrationResultSerializer(result).data
        body["outcomes"] = EntityOutcomeSerializer(rejected, many=True).data + body["outcomes"]
        body["warnings"] = [f"{o.entity_id}: {o.reason}" for o in rejected] + body["warnings"]
        code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if result.state is CheckoutState.ERROR
            else status.HTTP_200_OK
        )
        return Response(body, status=code)


class CaptureView(APIView):
    """Handler for POST /api/checkouts/capture"""

    def post(self, request: Request) -> Response:
        serializer = CaptureRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input(serializer.errors)
        data = serializer.validated_data
        try:
            event_key = EventKeySerializer.to_event_key(data["event"])
            fees = build_pricing().fee_schedule()
            selection = SelectionSet(
                event_key=event_key, tier=data["tier"] or fees.default_tier(event_key.kind)
            )
            owned = to_entity_ids(data["owned_entity_ids"])
            if not owned and data["owner"]:
                owned = [e.id for e in DjangoEntityStore().list_for_owner(data["owner"])]
            orchestrator = build_orchestrator(selection, fees=fees)
            result = orchestrator.capture_payment(
                to_entity_ids(data["pending_entity_ids"]),
                token=data["token"],
                payer_email=data["payer_email"],
                owned_entity_ids=owned,
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(RegistrationResultSerializer(result).data)
