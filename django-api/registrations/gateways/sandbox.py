"""Deterministic gateway for development and tests.

Card number 4000000000000002 is declined at tokenization. Capturing the same
token twice for the same amount returns the first capture, as hosted
gateways do for an idempotent retry. Only the most recent captures are
remembered.
"""

import threading
import uuid
from collections import OrderedDict
from collections.abc import Mapping

import structlog

from registrations.domain import CapturedPayment
from registrations.domain.errors import GatewayError
from registrations.gateways.interfaces import PaymentGateway

logger = structlog.get_logger(__name__)

DECLINED_CARD = "4000000000000002"
MAX_REMEMBERED_CAPTURES = 1000

_BRANDS = {"3": "AMEX", "4": "VISA", "5": "MASTERCARD", "6": "DISCOVER"}


class SandboxGateway(PaymentGateway):
    """In-process gateway that approves every well-formed card.

    One instance is shared by all request threads; the token bookkeeping is
    guarded by a lock.
    """

    def __init__(self, max_captures: int = MAX_REMEMBERED_CAPTURES) -> None:
        self._cards: dict[str, tuple[str, str]] = {}
        self._captures: OrderedDict[str, CapturedPayment] = OrderedDict()
        self._max_captures = max_captures
        self._lock = threading.Lock()

    def tokenize(self, card_details: Mapping[str, str]) -> str:
        number = "".join(ch for ch in card_details.get("number", "") if ch.isdigit())
        if len(number) < 12:
            raise GatewayError("Card number is invalid")
        if number == DECLINED_CARD:
            raise GatewayError("Card was declined")
        token = f"sandbox-{uuid.uuid4().hex}"
        with self._lock:
            self._cards[token] = (number[-4:], _BRANDS.get(number[0], "UNKNOWN"))
        logger.debug("sandbox_tokenized", token=token)
        return token

    def capture(
        self, token: str, amount_minor_units: int, currency: str, payer_email: str
    ) -> CapturedPayment:
        if not token.startswith("sandbox-"):
            raise GatewayError("Unknown payment token")
        with self._lock:
            previous = self._captures.get(token)
            if previous is not None:
                if previous.amount_minor_units != amount_minor_units:
                    raise GatewayError("Token was already captured for a different amount")
                return previous
            last4, brand = self._cards.pop(token, ("", ""))
            payment = CapturedPayment(
                token=token,
                amount_minor_units=amount_minor_units,
                currency=currency,
                payer_email=payer_email,
                card_last4=last4,
                card_brand=brand,
            )
            self._captures[token] = payment
            while len(self._captures) > self._max_captures:
                self._captures.popitem(last=False)
        logger.info("sandbox_captured", token=token, amount=amount_minor_units, currency=currency)
        return payment
