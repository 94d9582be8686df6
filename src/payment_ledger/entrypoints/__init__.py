"""Entrypoints layer - Delivery mechanisms for ledger operations.

This layer contains:
- Registry: Explicit map of operation names to handlers and input schemas
- Contract: The operation surface invoked by callers
- CLI: Command-line gateway (typer)

Entrypoints validate raw invocation arguments, run operations through the
application layer, and format results for the delivery mechanism.
"""
