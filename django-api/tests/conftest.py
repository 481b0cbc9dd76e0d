"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from registrations.domain import EventKey, EventKind, FeeSchedule, SelectionSet
from registrations.services.ledger import RegistrationLedger
from registrations.services.orchestrator import RegistrationOrchestrator
from registrations.stores.memory_store import InMemoryEntityStore, InMemoryRegistrationStore

FEES = {
    "season": {"2x/week": 45000, "3x/week": 60000},
    "tryout": {"standard": 5000},
    "tournament": {"standard": 42500},
}


class TickingClock:
    """Clock that advances one second per call."""

    def __init__(self) -> None:
        self.current = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def reset_gateway():
    from registrations.services.factory import get_gateway
    get_gateway.cache_clear()
    yield
    get_gateway.cache_clear()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def season() -> EventKey:
    return EventKey(kind=EventKind.SEASON, name="Basketball", year=2025)


@pytest.fixture
def fees() -> FeeSchedule:
    return FeeSchedule.from_config(FEES)


@pytest.fixture
def store() -> InMemoryRegistrationStore:
    return InMemoryRegistrationStore()


@pytest.fixture
def ledger(store, clock) -> RegistrationLedger:
    return RegistrationLedger(store, clock=clock)


@pytest.fixture
def entities() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def make_checkout(ledger, fees, entities):
    """Build an orchestrator over a fresh selection for an event and tier."""

    def _make(event_key, tier="2x/week", gateway=None, entity_store=None):
        selection = SelectionSet(
            event_key=event_key,
            tier=tier,
            paid_check=lambda entity_id: ledger.is_paid(entity_id, event_key),
        )
        orchestrator = RegistrationOrchestrator(
            selection,
            ledger=ledger,
            fees=fees,
            entities=entity_store or entities,
            gateway=gateway,
        )
        return selection, orchestrator

    return _make
