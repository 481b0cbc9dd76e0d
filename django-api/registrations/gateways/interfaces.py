"""Payment gateway interface.

Gateways are remote, slow and fallible. Implementations raise GatewayError
(with timed_out=True when the outcome is unknown) and never retry a charge on
their own.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from registrations.domain import CapturedPayment


class PaymentGateway(ABC):
    """Interface for tokenizing and capturing card payments."""

    @abstractmethod
    def tokenize(self, card_details: Mapping[str, str]) -> str:
        """Exchange card details for a single-use payment token."""
        ...

    @abstractmethod
    def capture(
        self, token: str, amount_minor_units: int, currency: str, payer_email: str
    ) -> CapturedPayment:
        """Charge a token for a confirmed amount."""
        ...
