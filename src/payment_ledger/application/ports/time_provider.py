from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class TimeProvider(ABC):
    """Clock used by the gateway to stamp new payments.

    now() returns an aware datetime in UTC. Ledger operations never read the
    clock themselves; every timestamp they store arrives as an argument.
    """

    @abstractmethod
    def now(self) -> datetime: ...

    def epoch_millis(self) -> int:
        """Milliseconds since the Unix epoch, used to derive demo payment IDs."""
        return (self.now() - _EPOCH) // timedelta(milliseconds=1)
