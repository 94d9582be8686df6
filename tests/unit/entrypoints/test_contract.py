"""Tests for PaymentContract.

Tests cover:
- The end-to-end lifecycle of a single payment through every operation
- InitLedger seeding
- Argument validation (InvalidArgumentsError, UnknownOperationError)
- Transactionality: failed operations leave the ledger unchanged
- Structured logging of failures
"""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from payment_ledger.application.ports import LedgerError
from payment_ledger.domain.entities import Payment
from payment_ledger.domain.exceptions import (
    InvalidArgumentsError,
    InvalidTimestampError,
    MalformedRecordError,
    PaymentAlreadyExistsError,
    PaymentNotFoundError,
    UnknownOperationError,
)
from payment_ledger.entrypoints.contract import SEED_PAYMENTS, PaymentContract
from payment_ledger.infrastructure.ledger import InMemoryLedger, JsonFileLedger

PAYMENT1_ARGS = (
    "payment1",
    "ordine1",
    "1996-10-20T12:30:00Z",
    "Carta",
    "30.0",
    "http://x",
    "de",
)


def create_payment1(contract: PaymentContract) -> Payment:
    return contract.invoke("CreatePayment", *PAYMENT1_ARGS)


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestPaymentContractLifecycle:
    def test_full_lifecycle_of_payment1(self, contract: PaymentContract, payment: Payment) -> None:
        assert contract.invoke("PaymentExists", "payment1") is False

        created = create_payment1(contract)
        assert created == payment
        assert contract.invoke("PaymentExists", "payment1") is True
        assert contract.invoke("ReadPayment", "payment1") == payment

        with pytest.raises(PaymentAlreadyExistsError):
            create_payment1(contract)

        old_type = contract.invoke("TransferPayment", "payment1", "Contanti")
        assert old_type == "Carta"
        assert contract.invoke("ReadPayment", "payment1").payment_type == "Contanti"

        contract.invoke("DeletePayment", "payment1")
        assert contract.invoke("PaymentExists", "payment1") is False
        with pytest.raises(PaymentNotFoundError):
            contract.invoke("ReadPayment", "payment1")

    def test_create_stores_canonical_bytes(
        self, contract: PaymentContract, ledger: InMemoryLedger, payment: Payment
    ) -> None:
        create_payment1(contract)

        assert ledger.snapshot() == {"payment1": contract.codec.encode(payment)}

    def test_update_replaces_record(self, contract: PaymentContract) -> None:
        create_payment1(contract)

        updated = contract.invoke(
            "UpdatePayment",
            "payment1",
            "ordine9",
            "2023-06-02T10:00:00+02:00",
            "POS",
            12.5,
            "http://y",
            "ff",
        )

        assert contract.invoke("ReadPayment", "payment1") == updated
        assert updated.order_id == "ordine9"
        assert updated.timestamp == datetime(2023, 6, 2, 8, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "name,args",
        [
            ("ReadPayment", ("ghost",)),
            ("DeletePayment", ("ghost",)),
            ("TransferPayment", ("ghost", "POS")),
            ("UpdatePayment", ("ghost", "o", "1996-10-20T12:30:00Z", "Carta", 1, "u", "h")),
        ],
    )
    def test_operations_on_missing_payment_raise(
        self, contract: PaymentContract, name: str, args: tuple[object, ...]
    ) -> None:
        with pytest.raises(PaymentNotFoundError):
            contract.invoke(name, *args)

    def test_keyword_arguments(self, contract: PaymentContract, payment: Payment) -> None:
        created = contract.invoke(
            "CreatePayment",
            payment_id="payment1",
            order_id="ordine1",
            timestamp=payment.timestamp,
            payment_type="Carta",
            total=30,
            receipt_uri="http://x",
            receipt_hash="de",
        )

        assert created == payment


# =============================================================================
# Listing Tests
# =============================================================================


class TestPaymentContractListing:
    def test_get_all_payments_on_empty_ledger(self, contract: PaymentContract) -> None:
        assert contract.invoke("GetAllPayments") == b"[]"

    def test_get_all_payments_returns_json_array_in_key_order(
        self, contract: PaymentContract, fixed_time: datetime
    ) -> None:
        for payment_id in ("c", "a", "b"):
            contract.invoke("CreatePayment", payment_id, "o", fixed_time, "Carta", 1, "u", "h")

        encoded = contract.invoke("GetAllPayments")

        assert isinstance(encoded, bytes)
        assert [doc["paymentID"] for doc in json.loads(encoded)] == ["a", "b", "c"]

    def test_get_all_payments_matches_codec(
        self, contract: PaymentContract, payment: Payment
    ) -> None:
        create_payment1(contract)

        assert contract.invoke("GetAllPayments") == contract.codec.encode_many([payment])

    def test_get_payments_by_range(self, contract: PaymentContract, fixed_time: datetime) -> None:
        for payment_id in ("a", "b", "c", "d"):
            contract.invoke("CreatePayment", payment_id, "o", fixed_time, "Carta", 1, "u", "h")

        encoded = contract.invoke("GetPaymentsByRange", "b", "d")

        assert [doc["paymentID"] for doc in json.loads(encoded)] == ["b", "c"]

    def test_get_payments_by_range_defaults_to_everything(
        self, contract: PaymentContract, fixed_time: datetime
    ) -> None:
        contract.invoke("CreatePayment", "a", "o", fixed_time, "Carta", 1, "u", "h")

        assert contract.invoke("GetPaymentsByRange") == contract.invoke("GetAllPayments")

    def test_malformed_entry_aborts_listing(self, codec) -> None:  # noqa: ANN001
        contract = PaymentContract(InMemoryLedger({"bad": b"not json"}), codec)

        with pytest.raises(MalformedRecordError):
            contract.invoke("GetAllPayments")


# =============================================================================
# InitLedger Tests
# =============================================================================


class TestPaymentContractInitLedger:
    def test_init_ledger_seeds_sample_payments(self, contract: PaymentContract) -> None:
        contract.invoke("InitLedger")

        payments = contract.codec.decode_many(contract.invoke("GetAllPayments"))

        assert [p.id for p in payments] == ["payment1", "payment2"]
        assert [p.payment_type for p in payments] == ["Carta", "Contanti"]
        assert [p.total for p in payments] == [30.0, 50.0]
        assert len(payments) == len(SEED_PAYMENTS)

    def test_init_ledger_twice_raises_and_keeps_state(
        self, contract: PaymentContract, ledger: InMemoryLedger
    ) -> None:
        contract.invoke("InitLedger")
        before = ledger.snapshot()

        with pytest.raises(PaymentAlreadyExistsError):
            contract.invoke("InitLedger")

        assert ledger.snapshot() == before

    def test_init_ledger_is_atomic_when_one_seed_exists(
        self, contract: PaymentContract, ledger: InMemoryLedger, fixed_time: datetime
    ) -> None:
        contract.invoke("CreatePayment", "payment2", "o", fixed_time, "POS", 1, "u", "h")

        with pytest.raises(PaymentAlreadyExistsError):
            contract.invoke("InitLedger")

        assert list(ledger.snapshot()) == ["payment2"]


# =============================================================================
# Argument Validation Tests
# =============================================================================


class TestPaymentContractArguments:
    def test_unknown_operation_raises(self, contract: PaymentContract) -> None:
        with pytest.raises(UnknownOperationError):
            contract.invoke("StealPayment")

    def test_operations_lists_names(self, contract: PaymentContract) -> None:
        assert "CreatePayment" in contract.operations()
        assert len(contract.operations()) == 9

    def test_empty_payment_id_raises(self, contract: PaymentContract) -> None:
        with pytest.raises(InvalidArgumentsError, match="payment_id"):
            contract.invoke("ReadPayment", "")

    def test_missing_argument_raises(self, contract: PaymentContract) -> None:
        with pytest.raises(InvalidArgumentsError):
            contract.invoke("CreatePayment", "payment1", "ordine1")

    def test_too_many_arguments_raises(self, contract: PaymentContract) -> None:
        with pytest.raises(InvalidArgumentsError, match="positional"):
            contract.invoke("ReadPayment", "payment1", "extra")

    def test_unknown_keyword_raises(self, contract: PaymentContract) -> None:
        with pytest.raises(InvalidArgumentsError):
            contract.invoke("ReadPayment", payment_id="payment1", owner="Tomoko")

    def test_duplicate_argument_raises(self, contract: PaymentContract) -> None:
        with pytest.raises(InvalidArgumentsError, match="multiple values"):
            contract.invoke("ReadPayment", "payment1", payment_id="payment1")

    @pytest.mark.parametrize("total", ["thirty", "NaN", "inf"])
    def test_invalid_total_raises(self, contract: PaymentContract, total: str) -> None:
        args = list(PAYMENT1_ARGS)
        args[4] = total

        with pytest.raises(InvalidArgumentsError, match="total"):
            contract.invoke("CreatePayment", *args)

    @pytest.mark.parametrize("timestamp", ["yesterday", "1996-10-20T12:30:00"])
    def test_invalid_timestamp_raises(self, contract: PaymentContract, timestamp: str) -> None:
        args = list(PAYMENT1_ARGS)
        args[2] = timestamp

        with pytest.raises(InvalidArgumentsError, match="timestamp"):
            contract.invoke("CreatePayment", *args)

    def test_invalid_arguments_leave_ledger_untouched(
        self, contract: PaymentContract, ledger: InMemoryLedger
    ) -> None:
        with pytest.raises(InvalidArgumentsError):
            contract.invoke("CreatePayment", "", "o", "1996-10-20T12:30:00Z", "Carta", 1, "u", "h")

        assert ledger.snapshot() == {}


# =============================================================================
# Failure Handling & Logging Tests
# =============================================================================


class _FailingLedger(InMemoryLedger):
    def _persist(self) -> None:
        raise LedgerError("disk full")


class TestPaymentContractFailures:
    def test_ledger_error_propagates(self) -> None:
        contract = PaymentContract(_FailingLedger())

        with pytest.raises(LedgerError, match="disk full"):
            create_payment1(contract)

        assert contract.invoke("PaymentExists", "payment1") is False

    def test_unwritable_ledger_file_leaves_payment_absent(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.with_name("state.json.tmp").mkdir()
        contract = PaymentContract(JsonFileLedger(path))

        with pytest.raises(LedgerError, match="Cannot write ledger file"):
            create_payment1(contract)

        assert contract.invoke("PaymentExists", "payment1") is False
        assert contract.invoke("GetAllPayments") == b"[]"
        assert not path.exists()

    def test_timestamp_outside_utc_range_is_rejected(
        self, contract: PaymentContract, ledger: InMemoryLedger
    ) -> None:
        args = list(PAYMENT1_ARGS)
        args[2] = "0001-01-01T00:00:00+05:00"

        with pytest.raises(InvalidTimestampError):
            contract.invoke("CreatePayment", *args)

        assert ledger.snapshot() == {}

    def test_failed_operation_is_logged(self, contract: PaymentContract) -> None:
        with capture_logs() as logs:
            with pytest.raises(PaymentNotFoundError):
                contract.invoke("ReadPayment", "ghost")

        failures = [entry for entry in logs if entry["event"] == "operation.failed"]
        assert len(failures) == 1
        assert failures[0]["log_level"] == "warning"
        assert failures[0]["operation"] == "ReadPayment"
        assert failures[0]["payment_id"] == "ghost"
        assert failures[0]["error"] == "PaymentNotFoundError"

    def test_successful_operation_is_logged_at_debug(self, contract: PaymentContract) -> None:
        with capture_logs() as logs:
            contract.invoke("PaymentExists", "payment1")

        assert logs == [
            {
                "event": "operation.completed",
                "log_level": "debug",
                "operation": "PaymentExists",
                "payment_id": "payment1",
                "intent": "evaluate",
            }
        ]
