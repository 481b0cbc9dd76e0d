"""Domain error codes for the registrations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    ALREADY_PAID = "ALREADY_PAID"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    CONSISTENCY_ERROR = "CONSISTENCY_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationFailedError(DomainError):
    """Raised when input has the wrong shape. The caller can correct it."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)


class AlreadyPaidError(DomainError):
    """Raised when an entity is already paid for the event. Informational."""

    def __init__(self, entity_id: str, event: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_PAID,
            message="Entity is already paid for this event",
        )
        self.entity_id = entity_id
        self.event = event


class AmountMismatchError(DomainError):
    """Raised when a captured amount differs from the recomputed quote."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            code=ErrorCode.AMOUNT_MISMATCH,
            message="Payment amount does not match the quoted amount",
        )
        self.expected = expected
        self.actual = actual


class StorageUnavailableError(DomainError):
    """Raised when the backing store cannot be reached. Retryable."""

    def __init__(self, message: str = "Registration storage is unavailable") -> None:
        super().__init__(code=ErrorCode.STORAGE_UNAVAILABLE, message=message)


class GatewayError(DomainError):
    """Raised when the payment gateway rejects or fails a call.

    A timed out capture may still have charged the card, so callers must
    re-check the ledger before asking the payer to try again.
    """

    def __init__(self, message: str = "Payment gateway error", timed_out: bool = False) -> None:
        super().__init__(code=ErrorCode.GATEWAY_ERROR, message=message)
        self.timed_out = timed_out


class ConsistencyError(DomainError):
    """Raised when a capture is reconciled for an entity with no ledger record."""

    def __init__(self, entity_id: str, message: str = "No registration record for entity") -> None:
        super().__init__(code=ErrorCode.CONSISTENCY_ERROR, message=message)
        self.entity_id = entity_id
