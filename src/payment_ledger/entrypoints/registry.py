"""Explicit registry of ledger operations.

Each operation is registered under its external name together with its
input model, its declared return type and its intent. verify() checks the
handlers against those declarations once, when the contract is built.
"""

from __future__ import annotations

import inspect
import typing
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from payment_ledger.domain.exceptions import UnknownOperationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from payment_ledger.application.dtos import OperationArguments


class RegistryError(Exception):
    """Raised when an operation is registered twice or mis-declared."""


class Intent(Enum):
    """Whether an operation writes to the ledger or only reads it."""

    SUBMIT = "submit"
    EVALUATE = "evaluate"


@dataclass(frozen=True, slots=True)
class Operation:
    name: str
    handler: Callable[..., Any]
    arguments: type[OperationArguments]
    returns: Any
    intent: Intent


class OperationRegistry:
    """Maps operation names to handlers with a declared input/output schema.

    Handlers take exactly two parameters, the PaymentStore of the current unit
    of work and the validated input model, and return the declared type.
    """

    def __init__(self) -> None:
        self._operations: dict[str, Operation] = {}

    def register(
        self,
        name: str,
        *,
        arguments: type[OperationArguments],
        returns: Any,
        intent: Intent,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a handler under name."""

        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            if name in self._operations:
                raise RegistryError(f"Operation already registered: {name}")
            self._operations[name] = Operation(
                name=name,
                handler=handler,
                arguments=arguments,
                returns=returns,
                intent=intent,
            )
            return handler

        return decorator

    def get(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def names(self) -> list[str]:
        return list(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    def verify(self) -> None:
        """Check every handler against its declared schema.

        Raises:
            RegistryError: A handler does not take (store, args), annotates
                args with a different model, or returns a different type.
        """
        for operation in self:
            parameters = list(inspect.signature(operation.handler).parameters)
            if parameters != ["store", "args"]:
                raise RegistryError(
                    f"{operation.name}: handler must take (store, args), "
                    f"got ({', '.join(parameters)})"
                )

            try:
                hints = typing.get_type_hints(operation.handler)
            except NameError as e:
                raise RegistryError(f"{operation.name}: unresolvable annotation: {e}") from e

            if hints.get("args") is not operation.arguments:
                raise RegistryError(
                    f"{operation.name}: args must be annotated as {operation.arguments.__name__}"
                )

            declared = type(None) if operation.returns is None else operation.returns
            if hints.get("return") is not declared:
                raise RegistryError(
                    f"{operation.name}: handler must return "
                    f"{getattr(declared, '__name__', declared)}"
                )
