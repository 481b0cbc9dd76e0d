from registrations.services.ledger import RegistrationLedger
from registrations.services.orchestrator import RegistrationOrchestrator
from registrations.services.pricing import PricingService

__all__ = ["RegistrationLedger", "RegistrationOrchestrator", "PricingService"]
