"""Domain layer - Core business logic, entities, and rules.

This layer contains:
- Entities: Immutable records with identity (e.g., Payment)
- Domain Exceptions: Business rule violations and typed failures

The domain layer has NO dependencies on external frameworks or infrastructure.
"""
