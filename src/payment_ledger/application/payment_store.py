from __future__ import annotations

from typing import TYPE_CHECKING

from payment_ledger.domain.entities import Payment
from payment_ledger.domain.exceptions import PaymentAlreadyExistsError, PaymentNotFoundError

if TYPE_CHECKING:
    from datetime import datetime

    from payment_ledger.application.codec import PaymentCodec
    from payment_ledger.application.ports import LedgerStub


class PaymentStore:
    """Record-level payment operations over one ledger transaction.

    Responsibilities:
    - Validate the record, then enforce uniqueness on create (existence probe, then write)
    - Enforce existence on read, update, transfer and delete
    - Translate between Payment and ledger bytes via the codec
    - Aggregate range scans in the order the ledger yields keys

    Each payment is stored under its ID. A key is either Absent or Present;
    an empty stored value counts as Absent.

    A store is bound to a single LedgerStub, i.e. to one unit of work. The
    existence probe and the write in create() are only race-free because the
    ledger rejects conflicting concurrent transactions at commit.
    """

    def __init__(self, stub: LedgerStub, codec: PaymentCodec) -> None:
        self._stub = stub
        self._codec = codec

    @property
    def codec(self) -> PaymentCodec:
        return self._codec

    def create(
        self,
        payment_id: str,
        order_id: str,
        timestamp: datetime,
        payment_type: str,
        total: float,
        receipt_uri: str,
        receipt_hash: str,
    ) -> Payment:
        """Store a new payment.

        Raises:
            PaymentAlreadyExistsError: A payment is already stored under payment_id.
            InvalidPaymentError: The fields violate a Payment invariant.
        """
        payment = Payment.create(
            payment_id=payment_id,
            order_id=order_id,
            timestamp=timestamp,
            payment_type=payment_type,
            total=total,
            receipt_uri=receipt_uri,
            receipt_hash=receipt_hash,
        )
        if self.exists(payment.id):
            raise PaymentAlreadyExistsError(payment.id)
        self._stub.put_state(payment.id, self._codec.encode(payment))
        return payment

    def read(self, payment_id: str) -> Payment:
        """Return the payment stored under payment_id.

        Raises:
            PaymentNotFoundError: Nothing (or an empty value) is stored.
            MalformedRecordError: The stored value does not decode.
        """
        value = self._stub.get_state(payment_id)
        if not value:
            raise PaymentNotFoundError(payment_id)
        return self._codec.decode(value, key=payment_id)

    def update(
        self,
        payment_id: str,
        order_id: str,
        timestamp: datetime,
        payment_type: str,
        total: float,
        receipt_uri: str,
        receipt_hash: str,
    ) -> Payment:
        """Replace the payment stored under payment_id as a whole.

        None of the previous record's fields are carried over.

        Raises:
            PaymentNotFoundError: No payment is stored under payment_id.
            InvalidPaymentError: The fields violate a Payment invariant.
        """
        payment = Payment.create(
            payment_id=payment_id,
            order_id=order_id,
            timestamp=timestamp,
            payment_type=payment_type,
            total=total,
            receipt_uri=receipt_uri,
            receipt_hash=receipt_hash,
        )
        if not self.exists(payment.id):
            raise PaymentNotFoundError(payment.id)
        self._stub.put_state(payment.id, self._codec.encode(payment))
        return payment

    def transfer(self, payment_id: str, new_payment_type: str) -> str:
        """Change the payment type of a stored payment.

        Returns:
            The payment type before the change.

        Raises:
            PaymentNotFoundError: No payment is stored under payment_id.
        """
        payment = self.read(payment_id)
        changed = payment.with_payment_type(new_payment_type)
        self._stub.put_state(payment_id, self._codec.encode(changed))
        return payment.payment_type

    def delete(self, payment_id: str) -> None:
        """Remove the payment stored under payment_id.

        Raises:
            PaymentNotFoundError: No payment is stored under payment_id.
        """
        if not self.exists(payment_id):
            raise PaymentNotFoundError(payment_id)
        self._stub.del_state(payment_id)

    def exists(self, payment_id: str) -> bool:
        value = self._stub.get_state(payment_id)
        return bool(value)

    def list_all(self) -> list[Payment]:
        """Return every stored payment in ascending key order."""
        return self.list_range("", "")

    def list_range(self, start_key: str, end_key: str) -> list[Payment]:
        """Return payments with start_key <= key < end_key, in ledger order.

        Empty bounds are open. The first value that fails to decode aborts
        the listing with MalformedRecordError; no partial result is returned.
        """
        return [
            self._codec.decode(value, key=key)
            for key, value in self._stub.get_state_by_range(start_key, end_key)
        ]
