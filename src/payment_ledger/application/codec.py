"""Canonical JSON codec for payments stored on the ledger.

The encoded form IS the persisted ledger state, and independent executions
of the same operation must write byte-identical values. encode() therefore:

- sorts keys and uses compact separators
- normalizes the timestamp to UTC before formatting it (ISO 8601)
- refuses NaN/Infinity

JSON keys follow the names used by the existing ledger contracts
(paymentID, orderID, ...), so state written elsewhere decodes here.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from payment_ledger.domain.entities import Payment
from payment_ledger.domain.exceptions import InvalidPaymentError, MalformedRecordError

if TYPE_CHECKING:
    from collections.abc import Iterable

PAYMENT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "payment",
    "type": "object",
    "properties": {
        "docType": {"type": "string"},
        "orderID": {"type": "string"},
        "paymentDateTime": {"type": "string"},
        "paymentID": {"type": "string", "minLength": 1},
        "paymentReceiptHash": {"type": "string"},
        "paymentReceiptURI": {"type": "string"},
        "paymentTotal": {"type": "number"},
        "paymentType": {"type": "string"},
    },
    "required": [
        "orderID",
        "paymentDateTime",
        "paymentID",
        "paymentReceiptHash",
        "paymentReceiptURI",
        "paymentTotal",
        "paymentType",
    ],
    "additionalProperties": False,
}

Draft202012Validator.check_schema(PAYMENT_SCHEMA)


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite number {name} is not allowed")


class PaymentCodec:
    """Deterministic encoder/decoder between Payment and ledger bytes.

    decode() is the left inverse of encode(): decode(encode(p)) == p for
    every valid payment p.
    """

    def __init__(self) -> None:
        self._validator = Draft202012Validator(PAYMENT_SCHEMA)

    def encode(self, payment: Payment) -> bytes:
        return self._dumps(self._to_document(payment))

    def encode_many(self, payments: Iterable[Payment]) -> bytes:
        """Encode payments as a JSON array, preserving their order."""
        return self._dumps([self._to_document(payment) for payment in payments])

    def decode(self, data: bytes | str, *, key: str | None = None) -> Payment:
        """Decode one canonical payment document.

        Args:
            data: Encoded payment, as stored on the ledger.
            key: Ledger key the value was read from, reported in errors.

        Returns:
            The decoded Payment.

        Raises:
            MalformedRecordError: If data is not valid UTF-8 JSON, violates
                the payment schema, has an unparseable or naive timestamp,
                or breaks a Payment invariant.
        """
        return self._from_document(self._loads(data, key=key), key=key)

    def decode_many(self, data: bytes | str) -> list[Payment]:
        """Decode a JSON array produced by encode_many()."""
        documents = self._loads(data, key=None)
        if not isinstance(documents, list):
            raise MalformedRecordError("expected a JSON array of payments")
        return [self._from_document(document, key=None) for document in documents]

    def _to_document(self, payment: Payment) -> dict[str, Any]:
        return {
            "orderID": payment.order_id,
            "paymentDateTime": payment.timestamp.astimezone(UTC).isoformat(),
            "paymentID": payment.id,
            "paymentReceiptHash": payment.receipt_hash,
            "paymentReceiptURI": payment.receipt_uri,
            "paymentTotal": payment.total,
            "paymentType": payment.payment_type,
        }

    def _from_document(self, document: Any, *, key: str | None) -> Payment:
        error = best_match(self._validator.iter_errors(document))
        if error is not None:
            raise MalformedRecordError(error.message, key=key)

        raw_timestamp = document["paymentDateTime"]
        try:
            timestamp = datetime.fromisoformat(raw_timestamp)
        except ValueError as e:
            raise MalformedRecordError(f"unparseable timestamp {raw_timestamp!r}", key=key) from e

        try:
            return Payment.create(
                payment_id=document["paymentID"],
                order_id=document["orderID"],
                timestamp=timestamp,
                payment_type=document["paymentType"],
                total=document["paymentTotal"],
                receipt_uri=document["paymentReceiptURI"],
                receipt_hash=document["paymentReceiptHash"],
            )
        except InvalidPaymentError as e:
            raise MalformedRecordError(str(e), key=key) from e

    @staticmethod
    def _dumps(document: Any) -> bytes:
        return json.dumps(
            document,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")

    @staticmethod
    def _loads(data: bytes | str, *, key: str | None) -> Any:
        try:
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise MalformedRecordError(f"invalid JSON: {e}", key=key) from e
        except RecursionError as e:
            raise MalformedRecordError("JSON nesting is too deep", key=key) from e
