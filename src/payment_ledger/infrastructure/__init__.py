"""Infrastructure layer - Concrete implementations of ports.

This layer contains:
- Ledger: In-memory and JSON-file-backed transactional key-value ledgers
- Time Provider: Clock abstraction for testability

Infrastructure adapters implement the ports defined in the application layer.
"""

from payment_ledger.infrastructure.ledger import InMemoryLedger, JsonFileLedger
from payment_ledger.infrastructure.time_provider import FixedTimeProvider, SystemTimeProvider

__all__ = [
    "FixedTimeProvider",
    "InMemoryLedger",
    "JsonFileLedger",
    "SystemTimeProvider",
]
