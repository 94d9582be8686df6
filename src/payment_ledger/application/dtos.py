"""Data Transfer Objects for operation input.

Each ledger operation declares one of these models as its input schema.
Field declaration order is the positional argument order of the operation.
"""

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, FiniteFloat


class OperationArguments(BaseModel):
    """Base for operation input models: immutable, no unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class NoArguments(OperationArguments):
    """Input for operations that take no arguments."""


class PaymentIdArguments(OperationArguments):
    payment_id: str = Field(min_length=1)


class PaymentFieldsArguments(PaymentIdArguments):
    """Input for CreatePayment and UpdatePayment."""

    order_id: str
    timestamp: AwareDatetime
    payment_type: str
    total: FiniteFloat
    receipt_uri: str
    receipt_hash: str


class TransferPaymentArguments(PaymentIdArguments):
    new_payment_type: str


class KeyRangeArguments(OperationArguments):
    """Input for range listings; empty bounds are open."""

    start_key: str = ""
    end_key: str = ""
