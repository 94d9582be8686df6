"""Payment entity stored on the ledger."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from numbers import Real

from payment_ledger.domain.exceptions import (
    InvalidPaymentIdError,
    InvalidTimestampError,
    InvalidTotalError,
)


@dataclass(frozen=True, slots=True)
class Payment:
    """Payment record keyed by its ID on the ledger.

    Payment is immutable (frozen dataclass). Updates replace the whole
    record under the same ID; nothing is mutated in place.

    Equality is field-wise over every attribute. Timestamps are timezone-aware,
    so two payments whose timestamps denote the same instant compare equal
    even if they were built with different offsets.

    Use the create() factory method to construct instances with validation.
    """

    id: str
    order_id: str
    timestamp: datetime
    payment_type: str
    total: float
    receipt_uri: str
    receipt_hash: str

    @classmethod
    def create(
        cls,
        payment_id: str,
        order_id: str,
        timestamp: datetime,
        payment_type: str,
        total: float,
        receipt_uri: str,
        receipt_hash: str,
    ) -> Payment:
        """Factory method to create a Payment with validation.

        Args:
            payment_id: Ledger key of the payment; must be non-empty.
            order_id: Identifier of the associated order (opaque).
            timestamp: Point in time of the payment; must carry an offset.
            payment_type: Free-form category label.
            total: Signed amount; must be finite.
            receipt_uri: Locator of the receipt artifact.
            receipt_hash: Content hash of the receipt artifact.

        Returns:
            A new Payment instance.

        Raises:
            InvalidPaymentIdError: If payment_id is empty.
            InvalidTimestampError: If timestamp is naive or cannot be expressed in UTC.
            InvalidTotalError: If total is not a real number representable as a finite float.
        """
        if not payment_id:
            raise InvalidPaymentIdError("Payment ID cannot be empty")

        if not isinstance(timestamp, datetime):
            raise InvalidTimestampError(f"Payment timestamp must be a datetime, got {timestamp!r}")

        if timestamp.tzinfo is None or timestamp.utcoffset() is None:
            raise InvalidTimestampError(
                f"Payment timestamp must carry a timezone offset, got {timestamp.isoformat()}"
            )

        try:
            timestamp.astimezone(UTC)
        except OverflowError as e:
            raise InvalidTimestampError(
                f"Payment timestamp is out of range in UTC, got {timestamp.isoformat()}"
            ) from e

        if isinstance(total, bool) or not isinstance(total, Real):
            raise InvalidTotalError(f"Payment total must be a number, got {total!r}")
        try:
            total = float(total)
        except OverflowError as e:
            raise InvalidTotalError("Payment total is too large for a float") from e
        if not math.isfinite(total):
            raise InvalidTotalError(f"Payment total must be finite, got {total!r}")

        return cls(
            id=payment_id,
            order_id=order_id,
            timestamp=timestamp,
            payment_type=payment_type,
            total=total,
            receipt_uri=receipt_uri,
            receipt_hash=receipt_hash,
        )

    def with_payment_type(self, payment_type: str) -> Payment:
        """Return a copy of this payment with a different payment type."""
        return replace(self, payment_type=payment_type)
