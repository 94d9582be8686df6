"""Shared pytest fixtures for the test suite."""

from datetime import datetime, timezone

import pytest
import structlog

from payment_ledger.application.codec import PaymentCodec
from payment_ledger.domain.entities import Payment
from payment_ledger.entrypoints.contract import PaymentContract
from payment_ledger.infrastructure.ledger import InMemoryLedger
from payment_ledger.infrastructure.time_provider import FixedTimeProvider


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fixed_time() -> datetime:
    """A fixed timestamp for deterministic testing."""
    return datetime(1996, 10, 20, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def time_provider(fixed_time: datetime) -> FixedTimeProvider:
    """A time provider with a fixed timestamp."""
    return FixedTimeProvider(fixed_time)


@pytest.fixture
def ledger() -> InMemoryLedger:
    """An empty in-memory ledger."""
    return InMemoryLedger()


@pytest.fixture
def codec() -> PaymentCodec:
    return PaymentCodec()


@pytest.fixture
def contract(ledger: InMemoryLedger, codec: PaymentCodec) -> PaymentContract:
    """A contract bound to the empty in-memory ledger."""
    return PaymentContract(ledger, codec)


@pytest.fixture
def payment(fixed_time: datetime) -> Payment:
    """The reference payment used across scenarios."""
    return Payment.create(
        payment_id="payment1",
        order_id="ordine1",
        timestamp=fixed_time,
        payment_type="Carta",
        total=30.0,
        receipt_uri="http://x",
        receipt_hash="de",
    )
