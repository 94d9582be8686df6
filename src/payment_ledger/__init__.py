"""payment-ledger - Payment records on a transactional, ordered key-value ledger."""

__version__ = "0.1.0"
