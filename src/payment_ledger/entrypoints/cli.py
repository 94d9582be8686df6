from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Optional

import typer

from payment_ledger.application.ports import LedgerError, TimeProvider
from payment_ledger.config import get_settings
from payment_ledger.domain.entities import Payment
from payment_ledger.domain.exceptions import (
    DomainException,
    PaymentAlreadyExistsError,
    PaymentNotFoundError,
)
from payment_ledger.entrypoints.contract import PaymentContract
from payment_ledger.infrastructure import InMemoryLedger, JsonFileLedger, SystemTimeProvider
from payment_ledger.logging_config import configure_logging

app = typer.Typer(help="Payment ledger gateway CLI.", no_args_is_help=True)


@dataclass
class CliState:
    contract: PaymentContract
    time_provider: TimeProvider


@app.callback()
def setup(ctx: typer.Context) -> None:
    """
    Build the contract from settings unless a state was supplied.
    """
    if ctx.obj is not None:
        return

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    ledger = JsonFileLedger(settings.ledger_path) if settings.ledger_path else InMemoryLedger()
    ctx.obj = CliState(contract=PaymentContract(ledger), time_provider=SystemTimeProvider())


@app.command("init-ledger")
def init_ledger(ctx: typer.Context) -> None:
    """
    Seed the ledger with the sample payments.
    """
    _invoke(ctx, "InitLedger")
    typer.echo("Ledger initialized.")


@app.command()
def create(
    ctx: typer.Context,
    payment_id: str,
    order_id: str,
    payment_type: str,
    total: float,
    receipt_uri: str,
    receipt_hash: str,
    timestamp: Optional[str] = typer.Option(
        None, "--timestamp", "-t", help="Payment time, ISO 8601 with offset (default: now)."
    ),
) -> None:
    """
    Create a new payment.
    """
    payment = _invoke(
        ctx,
        "CreatePayment",
        payment_id=payment_id,
        order_id=order_id,
        timestamp=timestamp or ctx.obj.time_provider.now(),
        payment_type=payment_type,
        total=total,
        receipt_uri=receipt_uri,
        receipt_hash=receipt_hash,
    )
    _echo_payment(ctx, payment)


@app.command()
def read(ctx: typer.Context, payment_id: str) -> None:
    """
    Show a payment.
    """
    _echo_payment(ctx, _invoke(ctx, "ReadPayment", payment_id))


@app.command()
def update(
    ctx: typer.Context,
    payment_id: str,
    order_id: str,
    payment_type: str,
    total: float,
    receipt_uri: str,
    receipt_hash: str,
    timestamp: Optional[str] = typer.Option(
        None, "--timestamp", "-t", help="Payment time, ISO 8601 with offset (default: now)."
    ),
) -> None:
    """
    Replace an existing payment.
    """
    payment = _invoke(
        ctx,
        "UpdatePayment",
        payment_id=payment_id,
        order_id=order_id,
        timestamp=timestamp or ctx.obj.time_provider.now(),
        payment_type=payment_type,
        total=total,
        receipt_uri=receipt_uri,
        receipt_hash=receipt_hash,
    )
    _echo_payment(ctx, payment)


@app.command()
def delete(ctx: typer.Context, payment_id: str) -> None:
    """
    Delete a payment.
    """
    _invoke(ctx, "DeletePayment", payment_id)
    typer.echo(f"Payment {payment_id} deleted.")


@app.command()
def exists(ctx: typer.Context, payment_id: str) -> None:
    """
    Print whether a payment exists.
    """
    typer.echo("true" if _invoke(ctx, "PaymentExists", payment_id) else "false")


@app.command("list")
def list_payments(
    ctx: typer.Context,
    start: str = typer.Option("", "--start", help="Inclusive lower key bound."),
    end: str = typer.Option("", "--end", help="Exclusive upper key bound."),
) -> None:
    """
    List payments in ascending key order.
    """
    if start or end:
        encoded = _invoke(ctx, "GetPaymentsByRange", start_key=start, end_key=end)
    else:
        encoded = _invoke(ctx, "GetAllPayments")
    typer.echo(encoded.decode("utf-8"))


@app.command()
def transfer(ctx: typer.Context, payment_id: str, new_payment_type: str) -> None:
    """
    Change the payment type of a payment.
    """
    old_type = _invoke(ctx, "TransferPayment", payment_id, new_payment_type)
    typer.echo(f"Payment {payment_id} type changed from {old_type} to {new_payment_type}.")


@app.command()
def operations(ctx: typer.Context) -> None:
    """
    List the registered ledger operations.
    """
    for name in ctx.obj.contract.operations():
        typer.echo(name)


@app.command()
def demo(ctx: typer.Context) -> None:
    """
    Walk through the main ledger operations end to end.
    """
    state: CliState = ctx.obj
    contract = state.contract
    now = state.time_provider.now()
    payment_id = f"payment{state.time_provider.epoch_millis()}"

    typer.echo("--> Submit Transaction: InitLedger")
    try:
        contract.invoke("InitLedger")
        typer.echo("*** Transaction committed successfully")
    except PaymentAlreadyExistsError as e:
        typer.echo(f"*** Ledger already initialized ({e})")

    typer.echo(f"--> Submit Transaction: CreatePayment {payment_id}")
    _invoke(
        ctx, "CreatePayment", payment_id, "ordine15", now, "contanti", 3000, "Tomoko.com", "Tomoko"
    )
    typer.echo("*** Transaction committed successfully")

    typer.echo("--> Evaluate Transaction: GetAllPayments")
    typer.echo(_invoke(ctx, "GetAllPayments").decode("utf-8"))

    typer.echo(f"--> Submit Transaction: TransferPayment {payment_id}")
    old_type = _invoke(ctx, "TransferPayment", payment_id, "Saptha")
    typer.echo(f"*** Payment type changed from {old_type} to Saptha")

    typer.echo(f"--> Evaluate Transaction: ReadPayment {payment_id}")
    _echo_payment(ctx, _invoke(ctx, "ReadPayment", payment_id))

    typer.echo("--> Submit Transaction: UpdatePayment payment70, which does not exist")
    try:
        contract.invoke(
            "UpdatePayment", "payment70", "ordine70", now, "Carta", 10, "Tomoko.com", "Tomoko"
        )
    except PaymentNotFoundError as e:
        typer.echo(f"*** Caught expected error: {e}")
    else:
        typer.echo("*** UpdatePayment unexpectedly succeeded", err=True)
        raise typer.Exit(code=1)


def _invoke(ctx: typer.Context, name: str, *args: Any, **kwargs: Any) -> Any:
    state: CliState = ctx.obj
    try:
        return state.contract.invoke(name, *args, **kwargs)
    except DomainException as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    except LedgerError as e:
        typer.echo(f"Ledger error: {e}", err=True)
        raise typer.Exit(code=2) from e


def _echo_payment(ctx: typer.Context, payment: Payment) -> None:
    state: CliState = ctx.obj
    typer.echo(state.contract.codec.encode(payment).decode("utf-8"))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
