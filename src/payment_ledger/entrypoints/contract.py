"""Payment ledger contract - the externally invocable operations.

Each operation validates its raw arguments against its input model, runs in
one ledger transaction through a fresh PaymentStore, and lets typed failures
propagate to the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from payment_ledger.application.codec import PaymentCodec
from payment_ledger.application.dtos import (
    KeyRangeArguments,
    NoArguments,
    PaymentFieldsArguments,
    PaymentIdArguments,
    TransferPaymentArguments,
)
from payment_ledger.application.payment_store import PaymentStore
from payment_ledger.application.ports import LedgerError
from payment_ledger.domain.entities import Payment
from payment_ledger.domain.exceptions import DomainException, InvalidArgumentsError
from payment_ledger.entrypoints.registry import Intent, OperationRegistry
from payment_ledger.logging_config import get_logger

if TYPE_CHECKING:
    from payment_ledger.application.dtos import OperationArguments
    from payment_ledger.application.ports import Ledger
    from payment_ledger.entrypoints.registry import Operation

logger = get_logger(__name__)

SEED_TIMESTAMP = datetime(1996, 10, 20, 12, 30, tzinfo=UTC)

SEED_PAYMENTS: tuple[PaymentFieldsArguments, ...] = (
    PaymentFieldsArguments(
        payment_id="payment1",
        order_id="ordine1",
        timestamp=SEED_TIMESTAMP,
        payment_type="Carta",
        total=30.0,
        receipt_uri="http://www.google.com",
        receipt_hash="de",
    ),
    PaymentFieldsArguments(
        payment_id="payment2",
        order_id="ordine1",
        timestamp=SEED_TIMESTAMP,
        payment_type="Contanti",
        total=50.0,
        receipt_uri="http://www.google.com",
        receipt_hash="de",
    ),
)

OPERATIONS = OperationRegistry()


@OPERATIONS.register("InitLedger", arguments=NoArguments, returns=None, intent=Intent.SUBMIT)
def init_ledger(store: PaymentStore, args: NoArguments) -> None:
    for seed in SEED_PAYMENTS:
        _create(store, seed)


@OPERATIONS.register(
    "CreatePayment", arguments=PaymentFieldsArguments, returns=Payment, intent=Intent.SUBMIT
)
def create_payment(store: PaymentStore, args: PaymentFieldsArguments) -> Payment:
    return _create(store, args)


@OPERATIONS.register(
    "ReadPayment", arguments=PaymentIdArguments, returns=Payment, intent=Intent.EVALUATE
)
def read_payment(store: PaymentStore, args: PaymentIdArguments) -> Payment:
    return store.read(args.payment_id)


@OPERATIONS.register(
    "UpdatePayment", arguments=PaymentFieldsArguments, returns=Payment, intent=Intent.SUBMIT
)
def update_payment(store: PaymentStore, args: PaymentFieldsArguments) -> Payment:
    return store.update(
        payment_id=args.payment_id,
        order_id=args.order_id,
        timestamp=args.timestamp,
        payment_type=args.payment_type,
        total=args.total,
        receipt_uri=args.receipt_uri,
        receipt_hash=args.receipt_hash,
    )


@OPERATIONS.register(
    "DeletePayment", arguments=PaymentIdArguments, returns=None, intent=Intent.SUBMIT
)
def delete_payment(store: PaymentStore, args: PaymentIdArguments) -> None:
    store.delete(args.payment_id)


@OPERATIONS.register(
    "PaymentExists", arguments=PaymentIdArguments, returns=bool, intent=Intent.EVALUATE
)
def payment_exists(store: PaymentStore, args: PaymentIdArguments) -> bool:
    return store.exists(args.payment_id)


@OPERATIONS.register(
    "TransferPayment", arguments=TransferPaymentArguments, returns=str, intent=Intent.SUBMIT
)
def transfer_payment(store: PaymentStore, args: TransferPaymentArguments) -> str:
    return store.transfer(args.payment_id, args.new_payment_type)


@OPERATIONS.register("GetAllPayments", arguments=NoArguments, returns=bytes, intent=Intent.EVALUATE)
def get_all_payments(store: PaymentStore, args: NoArguments) -> bytes:
    return store.codec.encode_many(store.list_all())


@OPERATIONS.register(
    "GetPaymentsByRange", arguments=KeyRangeArguments, returns=bytes, intent=Intent.EVALUATE
)
def get_payments_by_range(store: PaymentStore, args: KeyRangeArguments) -> bytes:
    return store.codec.encode_many(store.list_range(args.start_key, args.end_key))


def _create(store: PaymentStore, args: PaymentFieldsArguments) -> Payment:
    return store.create(
        payment_id=args.payment_id,
        order_id=args.order_id,
        timestamp=args.timestamp,
        payment_type=args.payment_type,
        total=args.total,
        receipt_uri=args.receipt_uri,
        receipt_hash=args.receipt_hash,
    )


class PaymentContract:
    """Entry point invoking registered operations against a ledger.

    Responsibilities:
    - Verify the operation registry once, at construction
    - Validate raw arguments against the operation's input model
    - Run each invocation as one ledger transaction (read-only for EVALUATE)
    - Log outcomes; re-raise every failure unchanged

    Usage:
        contract = PaymentContract(InMemoryLedger())
        contract.invoke("CreatePayment", "payment1", "ordine1", "1996-10-20T12:30:00Z",
                        "Carta", "30.0", "http://x", "de")
    """

    def __init__(
        self,
        ledger: Ledger,
        codec: PaymentCodec | None = None,
        registry: OperationRegistry = OPERATIONS,
    ) -> None:
        registry.verify()
        self._ledger = ledger
        self._codec = codec or PaymentCodec()
        self._registry = registry

    @property
    def codec(self) -> PaymentCodec:
        return self._codec

    def operations(self) -> list[str]:
        return self._registry.names()

    def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke the operation registered under name.

        Positional args map onto the input model's fields in declaration
        order; keyword args are merged on top.

        Raises:
            UnknownOperationError: No operation is registered under name.
            InvalidArgumentsError: The arguments fail the input model.
            DomainException: Any typed failure raised by the operation.
            LedgerError: The ledger failed or rejected the commit.
        """
        operation = self._registry.get(name)
        arguments = self._parse_arguments(operation, args, kwargs)
        payment_id = getattr(arguments, "payment_id", None)
        log = logger.bind(operation=name, payment_id=payment_id)

        try:
            with self._ledger.transaction(read_only=operation.intent is Intent.EVALUATE) as stub:
                result = operation.handler(PaymentStore(stub, self._codec), arguments)
        except (DomainException, LedgerError) as e:
            log.warning("operation.failed", error=type(e).__name__, detail=str(e))
            raise

        log.debug("operation.completed", intent=operation.intent.value)
        return result

    def _parse_arguments(
        self, operation: Operation, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> OperationArguments:
        fields = list(operation.arguments.model_fields)
        if len(args) > len(fields):
            raise InvalidArgumentsError(
                operation.name,
                f"expected at most {len(fields)} positional arguments, got {len(args)}",
            )

        values = dict(zip(fields, args))
        duplicated = values.keys() & kwargs.keys()
        if duplicated:
            raise InvalidArgumentsError(
                operation.name, f"multiple values for {', '.join(sorted(duplicated))}"
            )
        values.update(kwargs)

        try:
            return operation.arguments.model_validate(values)
        except ValidationError as e:
            detail = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
                for error in e.errors()
            )
            raise InvalidArgumentsError(operation.name, detail) from e
