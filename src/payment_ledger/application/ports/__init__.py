"""Ports - the ledger and clock interfaces the record store is written against.

Ledger hands out LedgerStub transactions; infrastructure supplies the
in-memory and file-backed implementations.
"""

from payment_ledger.application.ports.ledger import (
    Ledger,
    LedgerConflictError,
    LedgerError,
    LedgerStub,
)
from payment_ledger.application.ports.time_provider import TimeProvider

__all__ = [
    "Ledger",
    "LedgerConflictError",
    "LedgerError",
    "LedgerStub",
    "TimeProvider",
]
