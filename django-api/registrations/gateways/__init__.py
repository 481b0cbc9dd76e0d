from registrations.gateways.interfaces import PaymentGateway
from registrations.gateways.sandbox import SandboxGateway

__all__ = ["PaymentGateway", "SandboxGateway"]
