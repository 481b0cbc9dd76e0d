"""Integration tests for the registration and checkout endpoints.

Run with: pytest tests/test_registration_api.py -v
"""

import uuid
from unittest import mock

import pytest
from rest_framework.test import APIClient

from registrations.domain.errors import GatewayError
from registrations.models import Participant, Registration
from registrations.services.factory import get_gateway

SEASON = {"kind": "season", "name": "Basketball", "year": 2025}


def checkout(api_client: APIClient, **body):
    return api_client.post("/api/checkouts", {"event": SEASON, **body}, format="json")


def capture(api_client: APIClient, pending, token, **body):
    return api_client.post(
        "/api/checkouts/capture",
        {
            "event": SEASON,
            "pending_entity_ids": pending,
            "token": token,
            "payer_email": "parent@example.com",
            **body,
        },
        format="json",
    )


def card_token() -> str:
    return get_gateway().tokenize({"number": "4111111111111111"})


@pytest.mark.django_db
class TestFeeQuote:
    """Tests for GET /api/fees/quote"""

    def test_quote_for_tier_and_count(self, api_client: APIClient):
        response = api_client.get(
            "/api/fees/quote",
            {"kind": "season", "name": "Basketball", "year": 2025, "tier": "3x/week", "count": 2},
        )
        assert response.status_code == 200
        assert response.json()["amount_minor_units"] == 120000
        assert response.json()["per_entity_minor_units"] == 60000
        assert response.json()["currency"] == "USD"

    def test_quote_uses_default_tier(self, api_client: APIClient):
        response = api_client.get(
            "/api/fees/quote", {"kind": "tryout", "name": "Spring", "year": 2025}
        )
        assert response.status_code == 200
        assert response.json()["tier"] == "standard"
        assert response.json()["amount_minor_units"] == 5000

    def test_unknown_tier_returns_400(self, api_client: APIClient):
        response = api_client.get(
            "/api/fees/quote",
            {"kind": "season", "name": "Basketball", "year": 2025, "tier": "9x/week"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"

    def test_invalid_kind_returns_400(self, api_client: APIClient):
        response = api_client.get("/api/fees/quote", {"kind": "camp", "name": "x", "year": 2025})
        assert response.status_code == 400
        assert "kind" in response.json()["error"]["fields"]


@pytest.mark.django_db
class TestCheckout:
    """Tests for POST /api/checkouts"""

    def test_new_players_are_created_and_quoted(self, api_client: APIClient):
        response = checkout(
            api_client,
            tier="2x/week",
            new_entities=[
                {"kind": "player", "name": "Jordan", "owner": "parent-1"},
                {"kind": "player", "name": "Riley", "owner": "parent-1"},
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "awaiting_payment"
        assert body["amount_due"] == 90000
        assert len(body["pending_entity_ids"]) == 2
        assert Participant.objects.filter(owner="parent-1").count() == 2
        assert Registration.objects.filter(status="pending").count() == 2

    def test_paid_entity_is_reported_not_charged(self, api_client: APIClient):
        first = checkout(api_client, new_entities=[{"kind": "player", "name": "Jordan"}]).json()
        paid_id = first["pending_entity_ids"][0]
        capture(api_client, [paid_id], card_token())

        response = checkout(
            api_client,
            entity_ids=[paid_id],
            new_entities=[{"kind": "player", "name": "Riley"}],
        )

        body = response.json()
        assert body["amount_due"] == 45000
        assert paid_id not in body["pending_entity_ids"]
        assert {
            "entity_id": paid_id,
            "name": "",
            "status": "already_paid",
            "reason": "already paid",
        } in body["outcomes"]

    def test_only_paid_entities_short_circuit(self, api_client: APIClient):
        first = checkout(api_client, new_entities=[{"kind": "player", "name": "Jordan"}]).json()
        paid_id = first["pending_entity_ids"][0]
        capture(api_client, [paid_id], card_token())

        response = checkout(api_client, entity_ids=[paid_id])

        assert response.status_code == 200
        assert response.json()["state"] == "reconciled"
        assert response.json()["amount_due"] == 0

    def test_empty_checkout_returns_400(self, api_client: APIClient):
        response = checkout(api_client)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"

    def test_storage_outage_reports_failed_entity(self, api_client: APIClient):
        from django.db import DatabaseError

        with mock.patch(
            "registrations.models.Participant.objects.create",
            side_effect=DatabaseError("down"),
        ):
            response = checkout(api_client, new_entities=[{"kind": "player", "name": "Jordan"}])

        assert response.status_code == 422
        assert response.json()["state"] == "error"
        assert response.json()["outcomes"][0]["status"] == "registration_failed"


@pytest.mark.django_db
class TestCapture:
    """Tests for POST /api/checkouts/capture"""

    def test_capture_marks_registrations_paid(self, api_client: APIClient):
        begun = checkout(
            api_client, new_entities=[{"kind": "player", "name": "Jordan"}]
        ).json()

        response = capture(api_client, begun["pending_entity_ids"], card_token())

        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "reconciled"
        assert body["records"][0]["status"] == "paid"
        assert body["records"][0]["amount_paid_minor_units"] == 45000
        assert Registration.objects.get().status == "paid"

    def test_capture_recovers_pending_set_by_owner(self, api_client: APIClient):
        checkout(
            api_client,
            new_entities=[
                {"kind": "player", "name": "Jordan", "owner": "parent-7"},
                {"kind": "player", "name": "Riley", "owner": "parent-7"},
            ],
        )

        response = capture(api_client, [], card_token(), owner="parent-7")

        assert response.status_code == 200
        assert len(response.json()["records"]) == 2
        assert Registration.objects.filter(status="paid").count() == 2

    def test_gateway_failure_returns_502_and_keeps_pending(self, api_client: APIClient):
        begun = checkout(
            api_client, new_entities=[{"kind": "player", "name": "Jordan"}]
        ).json()

        with mock.patch.object(
            type(get_gateway()), "capture", side_effect=GatewayError("Card was declined")
        ):
            response = capture(api_client, begun["pending_entity_ids"], "sandbox-declined")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "GATEWAY_ERROR"
        assert Registration.objects.get().status == "pending"

    def test_second_capture_with_new_token_does_not_charge_again(self, api_client: APIClient):
        begun = checkout(
            api_client, new_entities=[{"kind": "player", "name": "Jordan"}]
        ).json()
        capture(api_client, begun["pending_entity_ids"], card_token())
        gateway = get_gateway()

        with mock.patch.object(gateway, "capture", wraps=gateway.capture) as spy:
            response = capture(api_client, begun["pending_entity_ids"], card_token())

        assert response.status_code == 200
        assert response.json()["state"] == "reconciled"
        assert response.json()["outcomes"][0]["status"] == "already_paid"
        spy.assert_not_called()
        assert Registration.objects.values_list("payment_ref", flat=True).distinct().count() == 1

    def test_capture_with_nothing_pending_returns_400(self, api_client: APIClient):
        response = capture(api_client, [], card_token(), owned_entity_ids=[str(uuid.uuid4())])
        assert response.status_code == 400

    def test_invalid_email_returns_400(self, api_client: APIClient):
        response = api_client.post(
            "/api/checkouts/capture",
            {"event": SEASON, "token": "tok", "payer_email": "nope"},
            format="json",
        )
        assert response.status_code == 400
        assert "payer_email" in response.json()["error"]["fields"]


@pytest.mark.django_db
class TestRegistrationList:
    """Tests for GET /api/registrations"""

    def test_lists_records_for_event(self, api_client: APIClient):
        checkout(api_client, new_entities=[{"kind": "player", "name": "Jordan"}])

        response = api_client.get("/api/registrations", SEASON)

        assert response.status_code == 200
        results = response.json()["results"]
        assert len(results) == 1
        assert results[0]["status"] == "pending"
        assert results[0]["event"] == {**SEASON, "sub_id": ""}

    def test_other_event_is_empty(self, api_client: APIClient):
        checkout(api_client, new_entities=[{"kind": "player", "name": "Jordan"}])
        response = api_client.get(
            "/api/registrations", {"kind": "tryout", "name": "Spring", "year": 2025}
        )
        assert response.json()["results"] == []
