"""Domain entities - Objects with identity and lifecycle."""

from payment_ledger.domain.entities.payment import Payment

__all__ = [
    "Payment",
]
