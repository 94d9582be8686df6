from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class LedgerError(Exception):
    """Base exception for failures raised by the ledger collaborator.

    Ledger errors are not domain errors. They propagate unchanged through the
    store and the operation surface and abort the current unit of work.
    """


class LedgerConflictError(LedgerError):
    """Raised at commit when a key read by the transaction changed meanwhile.

    None of the transaction's writes are applied.
    """


class LedgerStub(ABC):
    """Port for key-level access within a single ledger transaction.

    Contract:
    - Keys are non-empty strings, ordered by code point (UTF-8 byte order)
    - get_state() returns None for an absent key (no exception)
    - put_state() and del_state() are buffered until the transaction commits
    - Writing an empty value deletes the key, so range scans never yield one
    - Reads observe committed state only; a transaction does not read its own writes
    - get_state_by_range() yields (key, value) pairs in ascending key order;
      start is inclusive, end is exclusive, "" means an open bound
    """

    @abstractmethod
    def get_state(self, key: str) -> bytes | None:
        """Return the committed value under key, or None if absent."""

    @abstractmethod
    def put_state(self, key: str, value: bytes) -> None:
        """Write value under key when the transaction commits."""

    @abstractmethod
    def del_state(self, key: str) -> None:
        """Remove key when the transaction commits."""

    @abstractmethod
    def get_state_by_range(self, start_key: str, end_key: str) -> Iterator[tuple[str, bytes]]:
        """Yield committed (key, value) pairs with start_key <= key < end_key.

        Args:
            start_key: Inclusive lower bound, or "" for the first key.
            end_key: Exclusive upper bound, or "" for past the last key.

        Yields:
            (key, value) pairs in ascending key order. Callers may rely on
            this order; it must not be re-sorted.
        """


class Ledger(ABC):
    """Port for the transactional, ordered key-value ledger.

    Contract:
    - transaction() yields a LedgerStub bound to one unit of work
    - Leaving the context normally commits all buffered writes atomically
    - Leaving the context with an exception discards all buffered writes
    - Conflicting concurrent transactions are rejected at commit with
      LedgerConflictError; this is what keeps create's existence check
      sound under concurrency
    - Writes through a read-only transaction raise LedgerError
    """

    @abstractmethod
    @contextmanager
    def transaction(self, *, read_only: bool = False) -> Iterator[LedgerStub]:
        """Open a unit of work against the ledger.

        Usage:
            with ledger.transaction() as stub:
                stub.put_state("payment1", b"...")
            # Committed here
        """
        ...
