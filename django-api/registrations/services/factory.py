"""Wiring of services to their Django-backed stores and configured gateway."""

from functools import lru_cache

from django.conf import settings
from django.utils.module_loading import import_string

from registrations.domain import FeeSchedule, SelectionSet
from registrations.gateways.interfaces import PaymentGateway
from registrations.services.ledger import RegistrationLedger
from registrations.services.orchestrator import RegistrationOrchestrator
from registrations.services.pricing import PricingService
from registrations.stores.django_store import (
    DjangoEntityStore,
    DjangoPriceStore,
    DjangoRegistrationStore,
)

DEFAULTS = {
    "CURRENCY": "USD",
    "FEES": {},
    "PAYMENT_GATEWAY": "registrations.gateways.SandboxGateway",
    "PRICE_CACHE_TIMEOUT": 300,
}


def registration_settings() -> dict:
    return {**DEFAULTS, **getattr(settings, "REGISTRATION", {})}


@lru_cache(maxsize=1)
def get_gateway() -> PaymentGateway:
    gateway_class = import_string(registration_settings()["PAYMENT_GATEWAY"])
    return gateway_class()


def build_ledger() -> RegistrationLedger:
    return RegistrationLedger(DjangoRegistrationStore())


def build_pricing() -> PricingService:
    config = registration_settings()
    return PricingService(
        DjangoPriceStore(),
        defaults=config["FEES"],
        currency=config["CURRENCY"],
        cache_timeout=config["PRICE_CACHE_TIMEOUT"],
    )


def build_orchestrator(
    selection: SelectionSet,
    ledger: RegistrationLedger | None = None,
    fees: FeeSchedule | None = None,
) -> RegistrationOrchestrator:
    return RegistrationOrchestrator(
        selection,
        ledger=ledger or build_ledger(),
        fees=fees or build_pricing().fee_schedule(),
        entities=DjangoEntityStore(),
        gateway=get_gateway(),
    )
