"""Application layer - Record store, codec and port definitions.

This layer contains:
- PaymentStore: Record-level operations over one ledger transaction
- PaymentCodec: Canonical encoding of payments for storage
- Ports: Abstract interfaces (ABCs) for the ledger and the clock
- DTOs: Input schemas for the operation surface

The application layer depends only on the domain layer.
Infrastructure implementations are injected via ports.
"""
