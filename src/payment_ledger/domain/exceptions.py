"""Domain exceptions for payment-ledger.

Exception hierarchy:
    DomainException (base)
    ├── Validation Errors
    │   └── InvalidPaymentError
    │       ├── InvalidPaymentIdError
    │       ├── InvalidTimestampError
    │       └── InvalidTotalError
    ├── Existence Errors
    │   ├── PaymentAlreadyExistsError
    │   └── PaymentNotFoundError
    ├── Storage Errors
    │   └── MalformedRecordError
    └── Operation Surface Errors
        ├── UnknownOperationError
        └── InvalidArgumentsError

Callers match on the exception class. None of these carry string error codes.
Ledger failures (LedgerError, LedgerConflictError) are not domain errors; they
live with the ledger port and propagate unchanged.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base exception for all domain-level errors.

    All domain exceptions inherit from this class to enable
    catching domain errors distinctly from infrastructure errors.
    """


# =============================================================================
# Validation Errors
# =============================================================================


class InvalidPaymentError(DomainException):
    """Raised when a payment cannot be constructed from the given fields."""


class InvalidPaymentIdError(InvalidPaymentError):
    """Raised when a payment ID is empty.

    The payment ID is the ledger key, so it must be a non-empty string.
    """


class InvalidTimestampError(InvalidPaymentError):
    """Raised when a payment timestamp has no timezone offset."""


class InvalidTotalError(InvalidPaymentError):
    """Raised when a payment total is not a finite real number."""


# =============================================================================
# Existence Errors
# =============================================================================


class PaymentAlreadyExistsError(DomainException):
    """Raised by create when a payment is already stored under the ID.

    Not retried; surfaced verbatim to the caller.
    """

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} already exists")


class PaymentNotFoundError(DomainException):
    """Raised by read, update, transfer and delete when no payment is stored.

    An empty stored value counts as absent.
    """

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} does not exist")


# =============================================================================
# Storage Errors
# =============================================================================


class MalformedRecordError(DomainException):
    """Raised when stored bytes are not a valid canonical payment encoding.

    Fatal to the single operation. For range listings it aborts the whole
    listing; no partial result is returned.
    """

    def __init__(self, reason: str, key: str | None = None) -> None:
        self.reason = reason
        self.key = key
        if key is None:
            super().__init__(f"Malformed payment record: {reason}")
        else:
            super().__init__(f"Malformed payment record under key {key!r}: {reason}")


# =============================================================================
# Operation Surface Errors
# =============================================================================


class UnknownOperationError(DomainException):
    """Raised when an invocation names an operation that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown operation: {name}")


class InvalidArgumentsError(DomainException):
    """Raised when invocation arguments fail the operation's input schema."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Invalid arguments for {operation}: {detail}")
