"""
Family Wallet CLI - Command-line interface.

Manage the family member registry from the terminal. Calls are signed
with the identity keys from FW_IDENTITY_KEYS and state is kept under
FW_STATE_DIR.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from family_wallet import __version__
from family_wallet.auth.verifier import HmacIdentityVerifier
from family_wallet.core.config import Settings, load_settings
from family_wallet.core.exceptions import ErrorKind, FamilyWalletError
from family_wallet.events.sink import JsonlEventSink
from family_wallet.registry.wallet import WalletRegistry
from family_wallet.storage.store import FileInstanceStore

app = typer.Typer(
    name="family-wallet",
    help="Family Wallet - owner-managed member registry with spending limits",
    no_args_is_help=True,
)
console = Console()

T = TypeVar("T")


def _fail(kind: ErrorKind | None, message: str) -> None:
    label = f" ({kind.value})" if kind else ""
    console.print(f"[red]Error{label}:[/red] {escape(message)}")
    raise typer.Exit(1)


def _run(action: Callable[[], T]) -> T:
    """Run a registry action, turning wallet errors into exit code 1."""
    try:
        return action()
    except FamilyWalletError as e:
        _fail(e.kind, str(e))


def _settings() -> Settings:
    return _run(load_settings)


class WalletContext:
    """Registry wired to on-disk state, the JSONL event log, and HMAC keys."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.verifier = HmacIdentityVerifier(settings.identity_keys)
        self.events = JsonlEventSink(settings.audit_dir)
        self.registry = WalletRegistry(
            store=FileInstanceStore(settings.state_dir),
            verifier=self.verifier,
            events=self.events,
            lifetime=settings.lifetime,
        )


def _context() -> WalletContext:
    settings = _settings()
    return _run(lambda: WalletContext(settings))


@app.callback()
def main() -> None:
    """Configure logging from FW_LOG_LEVEL."""
    settings = _settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(
    owner: str = typer.Argument(..., help="Owner identity (must have a signing key)"),
):
    """Initialize the wallet with its owner."""
    ctx = _context()
    caller = _run(lambda: ctx.verifier.sign(owner, "initialize", owner=owner))
    _run(lambda: ctx.registry.initialize(caller, owner))
    console.print(f"[green]Wallet initialized.[/green] Owner: {escape(owner)}")


@app.command()
def add(
    identity: str = typer.Argument(..., help="Member identity"),
    name: str = typer.Argument(..., help="Display name"),
    spending_limit: int = typer.Argument(..., help="Spending limit (must be positive)"),
    role: str = typer.Argument(..., help="Role label, e.g. parent or child"),
    owner: str = typer.Option(..., "--as", help="Owner identity signing the call"),
):
    """Add a member, or update an existing one."""
    ctx = _context()
    existed = _run(lambda: ctx.registry.get_member(identity)) is not None
    caller = _run(
        lambda: ctx.verifier.sign(
            owner, "add_member", identity=identity, name=name, spending_limit=spending_limit, role=role
        )
    )
    _run(lambda: ctx.registry.add_member(caller, identity, name, spending_limit, role))
    verb = "updated" if existed else "added"
    console.print(f"[green]Member {verb}:[/green] {escape(identity)}")


@app.command()
def show(
    identity: str = typer.Argument(..., help="Member identity"),
):
    """Show a single member."""
    ctx = _context()
    member = _run(lambda: ctx.registry.get_member(identity))
    if member is None:
        _fail(ErrorKind.NOT_FOUND, f"Member not found: {identity}")

    console.print(
        Panel.fit(
            f"[bold blue]{escape(member.name)}[/bold blue]\n"
            f"Identity: {escape(member.identity)}\n"
            f"Role: {escape(member.role)}\n"
            f"Spending limit: {member.spending_limit}",
        )
    )


@app.command()
def members():
    """List all members in the order they were first added."""
    ctx = _context()
    member_list = _run(ctx.registry.get_all_members)

    table = Table(title=f"Family Members ({len(member_list)})")
    table.add_column("Identity", style="cyan")
    table.add_column("Name")
    table.add_column("Role", style="magenta")
    table.add_column("Limit", justify="right", style="green")

    for member in member_list:
        table.add_row(
            escape(member.identity), escape(member.name), escape(member.role), str(member.spending_limit)
        )

    console.print(table)


@app.command("set-limit")
def set_limit(
    identity: str = typer.Argument(..., help="Member identity"),
    new_limit: int = typer.Argument(..., help="New spending limit (must be positive)"),
    owner: str = typer.Option(..., "--as", help="Owner identity signing the call"),
):
    """Update a member's spending limit."""
    ctx = _context()
    caller = _run(
        lambda: ctx.verifier.sign(owner, "update_spending_limit", identity=identity, new_limit=new_limit)
    )
    updated = _run(lambda: ctx.registry.update_spending_limit(caller, identity, new_limit))
    if not updated:
        _fail(ErrorKind.NOT_FOUND, f"Member not found: {identity}")
    console.print(f"[green]Spending limit updated:[/green] {escape(identity)} -> {new_limit}")


@app.command()
def check(
    identity: str = typer.Argument(..., help="Member identity"),
    amount: int = typer.Argument(..., help="Amount to check"),
):
    """Check whether an amount is within a member's limit."""
    ctx = _context()
    allowed = _run(lambda: ctx.registry.check_spending_limit(identity, amount))
    if allowed:
        console.print(f"[green]Within limit:[/green] {escape(identity)} may spend {amount}")
        return
    console.print(f"[red]Not allowed:[/red] {escape(identity)} may not spend {amount}")
    raise typer.Exit(1)


@app.command()
def events(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of recent events"),
):
    """Show recent audit events."""
    settings = _settings()
    sink = JsonlEventSink(settings.audit_dir)
    recent = sink.read_events()[-limit:]

    table = Table(title="Wallet Events")
    table.add_column("Timestamp", style="dim")
    table.add_column("Event", style="cyan")
    table.add_column("Identity")

    for event in recent:
        table.add_row(event.timestamp, event.kind.value, escape(event.identity))

    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"Family Wallet v{__version__}")


if __name__ == "__main__":
    app()
