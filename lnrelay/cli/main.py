"""Main CLI entry point for lnrelay."""

import asyncio
import contextlib

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lnrelay import __version__
from lnrelay.core.events.broadcaster import EventBroadcaster
from lnrelay.exceptions import ConfigurationError, LNRelayError
from lnrelay.lightning.domain.events import INVOICE_PAID_TOPIC
from lnrelay.lightning.domain.memo import render
from lnrelay.utils.config import get_settings
from lnrelay.utils.logging import configure_from_settings

from .lifespan import RelayApplication

app = typer.Typer(
    name="lnrelay",
    help="⚡ Real-time relay for settled Lightning invoices",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"lnrelay version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Relay settled Lightning invoices to live listeners."""
    try:
        settings = get_settings()
    except PydanticValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_from_settings(settings)


async def _print_settlements(broadcaster: EventBroadcaster) -> None:
    async with broadcaster.listen(INVOICE_PAID_TOPIC) as listener:
        async for event in listener:
            console.print(
                f"[green]⚡ paid[/green] {event.amount_sat:,} sat "
                f"[dim]{event.payment_hash[:16]}…[/dim] {event.memo or ''}"
            )


@app.command()
def run() -> None:
    """Subscribe to the node and relay settlements until interrupted."""

    async def _run() -> None:
        application = RelayApplication(get_settings())
        printer = asyncio.create_task(_print_settlements(application.broadcaster))
        try:
            await application.run_until_shutdown()
        finally:
            printer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await printer

    try:
        asyncio.run(_run())
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def memo(amount: int = typer.Argument(..., help="Amount in satoshis")) -> None:
    """Print the memo the configured template renders for AMOUNT."""
    console.print(render(get_settings().memo_template, amount), markup=False)


@app.command()
def invoice(amount: int = typer.Argument(..., min=1, help="Amount in satoshis")) -> None:
    """Create a payment request for AMOUNT satoshis."""

    async def _create():
        application = RelayApplication(get_settings())
        try:
            return await application.payment_requests.create(amount)
        finally:
            await application.lnd_client.close()

    try:
        request = asyncio.run(_create())
    except LNRelayError as e:
        console.print(f"[red]Error creating payment request:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Payment Request", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Amount", f"{request.amount_sat:,} sat")
    table.add_row("Memo", request.memo)
    table.add_row("Payment hash", request.payment_hash)
    table.add_row("Request", request.payment_request)
    console.print(table)


if __name__ == "__main__":
    app()
