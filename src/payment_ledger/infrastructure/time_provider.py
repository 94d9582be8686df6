from datetime import UTC, datetime, timedelta

from payment_ledger.application.ports import TimeProvider


class SystemTimeProvider(TimeProvider):
    """Wall clock in UTC, truncated to whole milliseconds."""

    def now(self) -> datetime:
        current = datetime.now(UTC)
        return current.replace(microsecond=current.microsecond - current.microsecond % 1000)


class FixedTimeProvider(TimeProvider):
    """Clock that only moves when told to, for gateway tests. Not thread-safe."""

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is not UTC:
            raise ValueError(f"FixedTimeProvider needs tzinfo=UTC, got {start.tzinfo!r}")
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: timedelta) -> None:
        if delta < timedelta(0):
            raise ValueError("FixedTimeProvider cannot move backwards")
        self._current += delta
