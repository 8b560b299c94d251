"""Audit log CLI commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...audit import AuditStore
from ...core.errors import PangolinError
from ...core.log import get_logger

console = Console()
logger = get_logger(__name__)
audit_app = typer.Typer(help="Show and clean audit logs")


def _store(ctx: typer.Context) -> AuditStore:
    return AuditStore(ctx.obj["config"].audit_dir())


@audit_app.command("list")
def list_audit(ctx: typer.Context) -> None:
    """List audit logs, oldest first."""
    table = Table(title="Audit Logs")
    table.add_column("ID", style="cyan")
    table.add_column("Time", style="green")
    table.add_column("Command")
    for record in _store(ctx).list():
        table.add_row(record.id, record.time.isoformat(sep=" ", timespec="seconds"),
                      record.command)
    console.print(table)


@audit_app.command()
def show(ctx: typer.Context, audit_id: str = typer.Argument(..., help="Audit ID")) -> None:
    """Show one audit log."""
    try:
        console.print(_store(ctx).show(audit_id), markup=False, highlight=False)
    except PangolinError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)


@audit_app.command()
def cleanup(
    ctx: typer.Context,
    retain_days: Optional[int] = typer.Option(
        None, "--retain-days", help="Keep audit logs younger than this many days"
    ),
) -> None:
    """Delete audit logs older than the retention window."""
    days = ctx.obj["config"].audit_retain_days if retain_days is None else retain_days
    if days < 0:
        console.print("[red]Error: --retain-days must not be negative[/red]")
        raise typer.Exit(1)
    removed = _store(ctx).cleanup(days)
    console.print(f"Removed {len(removed)} audit log(s)")
