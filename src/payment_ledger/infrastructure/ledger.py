from __future__ import annotations

import bisect
import json
import os
from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING

from payment_ledger.application.ports import Ledger, LedgerConflictError, LedgerError, LedgerStub

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

_ABSENT = -1


class InMemoryLedger(Ledger):
    """In-memory ordered key-value ledger with optimistic concurrency control.

    Implementation notes:
    - Committed state is a dict of key -> (value, version) plus a sorted key list
    - Transactions read committed state and record the version of every key
      (and every range) they read
    - Writes are buffered and applied at commit under a single global lock
    - Commit re-checks the read set; any change raises LedgerConflictError
      and the transaction's writes are dropped

    Limitations:
    - Single-process only
    - Range scans copy the matching slice under the lock
    """

    def __init__(self, initial: Mapping[str, bytes] | None = None) -> None:
        self._lock = Lock()
        self._values: dict[str, tuple[bytes, int]] = {}
        self._keys: list[str] = []
        self._version = 0
        for key, value in (initial or {}).items():
            self._apply({key: value})

    @contextmanager
    def transaction(self, *, read_only: bool = False) -> Iterator[LedgerStub]:
        tx = _Transaction(self, read_only=read_only)
        yield tx
        # Only reached when the body did not raise
        self._commit(tx)

    def snapshot(self) -> dict[str, bytes]:
        """Return committed state in ascending key order."""
        with self._lock:
            return {key: self._values[key][0] for key in self._keys}

    def _get(self, key: str) -> tuple[bytes | None, int]:
        with self._lock:
            entry = self._values.get(key)
        if entry is None:
            return None, _ABSENT
        return entry

    def _scan(self, start_key: str, end_key: str) -> list[tuple[str, bytes, int]]:
        with self._lock:
            return self._scan_locked(start_key, end_key)

    def _scan_locked(self, start_key: str, end_key: str) -> list[tuple[str, bytes, int]]:
        lo = bisect.bisect_left(self._keys, start_key) if start_key else 0
        hi = bisect.bisect_left(self._keys, end_key) if end_key else len(self._keys)
        return [(key, *self._values[key]) for key in self._keys[lo:hi]]

    def _commit(self, tx: _Transaction) -> None:
        if tx.read_only:
            return

        with self._lock:
            for key, version in tx.reads.items():
                entry = self._values.get(key)
                if (_ABSENT if entry is None else entry[1]) != version:
                    raise LedgerConflictError(f"Key {key!r} changed since it was read")

            for (start_key, end_key), seen in tx.ranges.items():
                current = [
                    (key, version) for key, _, version in self._scan_locked(start_key, end_key)
                ]
                if current != seen:
                    raise LedgerConflictError(
                        f"Range [{start_key!r}, {end_key!r}) changed since it was read"
                    )

            if tx.writes:
                committed = (dict(self._values), list(self._keys), self._version)
                self._apply(tx.writes)
                try:
                    self._persist()
                except Exception:
                    self._values, self._keys, self._version = committed
                    raise

    def _apply(self, writes: Mapping[str, bytes | None]) -> None:
        self._version += 1
        for key, value in writes.items():
            if value:
                if key not in self._values:
                    bisect.insort(self._keys, key)
                self._values[key] = (value, self._version)
            elif key in self._values:
                del self._values[key]
                self._keys.remove(key)

    def _persist(self) -> None:
        """Hook called under the lock after a commit has been applied.

        If it raises, the commit is rolled back and the error propagates.
        """


class JsonFileLedger(InMemoryLedger):
    """InMemoryLedger whose committed state is mirrored to a JSON file.

    The file maps keys to values decoded as UTF-8 with surrogateescape, so
    arbitrary bytes survive a round trip. Each commit rewrites the file via
    a temporary file and os.replace(); a failed write raises LedgerError and
    the commit is not applied in memory either.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        initial: dict[str, bytes] = {}
        if self._path.exists():
            with open(self._path, encoding="utf-8") as f:
                stored = json.load(f)
            initial = {
                key: value.encode("utf-8", "surrogateescape") for key, value in stored.items()
            }
        super().__init__(initial)

    @property
    def path(self) -> Path:
        return self._path

    def _persist(self) -> None:
        document = {
            key: self._values[key][0].decode("utf-8", "surrogateescape") for key in self._keys
        }
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise LedgerError(f"Cannot write ledger file {self._path}: {e}") from e


class _Transaction(LedgerStub):
    """LedgerStub recording reads and buffering writes for one commit."""

    def __init__(self, ledger: InMemoryLedger, *, read_only: bool) -> None:
        self._ledger = ledger
        self.read_only = read_only
        self.reads: dict[str, int] = {}
        self.ranges: dict[tuple[str, str], list[tuple[str, int]]] = {}
        self.writes: dict[str, bytes | None] = {}

    def get_state(self, key: str) -> bytes | None:
        _validate_key(key)
        value, version = self._ledger._get(key)
        self.reads.setdefault(key, version)
        return value

    def put_state(self, key: str, value: bytes) -> None:
        _validate_key(key)
        self._check_writable()
        self.writes[key] = bytes(value)

    def del_state(self, key: str) -> None:
        _validate_key(key)
        self._check_writable()
        self.writes[key] = None

    def get_state_by_range(self, start_key: str, end_key: str) -> Iterator[tuple[str, bytes]]:
        entries = self._ledger._scan(start_key, end_key)
        seen = [(key, version) for key, _, version in entries]
        self.ranges.setdefault((start_key, end_key), seen)
        for key, value, _ in entries:
            yield key, value

    def _check_writable(self) -> None:
        if self.read_only:
            raise LedgerError("Cannot write through a read-only transaction")


def _validate_key(key: str) -> None:
    if not key:
        raise ValueError("Ledger key cannot be empty")
