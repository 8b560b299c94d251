"""Main CLI entry point for Pangolin."""

import sys
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import Optional
import typer
from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table
from ..audit import HistoryStore
from ..core.config import load_config
from ..core.errors import ConfigurationError
from ..core.log import configure_logging, get_logger
from .commands import cluster
from .commands.audit import audit_app


class GlobalCliOptions(BaseModel):
    """Global CLI options that can be used across all commands."""

    verbose: int = Field(0, description="Increase verbosity level")
    config_file: Optional[Path] = Field(None, description="Configuration file path")
    log_level: Optional[str] = Field(
        None, description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )


app = typer.Typer(
    name="pangolin",
    help="Cluster lifecycle orchestration",
    no_args_is_help=True,
    rich_markup_mode="markdown",
)
app.add_typer(audit_app, name="audit", help="Show and clean audit logs")
app.command("start")(cluster.start)
app.command("stop")(cluster.stop)
app.command("restart")(cluster.restart)
app.command("enable")(cluster.enable)
app.command("disable")(cluster.disable)
app.command("clean")(cluster.clean)
console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase verbosity level"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR) - explicit level",
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
) -> None:
    """Pangolin: start, stop and clean distributed clusters."""
    if verbose > 0 and log_level is not None:
        console.print("[red]Error: Cannot specify both --verbose and --log-level[/red]")
        raise typer.Exit(1)

    if log_level is None and verbose > 0:
        log_level = "DEBUG" if verbose >= 2 else "INFO"

    cli_options = GlobalCliOptions(
        verbose=verbose,
        config_file=config_file,
        log_level=log_level,
    )

    try:
        config = load_config(
            config_file=cli_options.config_file, log_level=cli_options.log_level
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e.message}[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["cli_options"] = cli_options
    ctx.obj["config"] = config

    configure_logging(
        level=config.log_level,
        log_file=config.log_file,
        enable_console=True,
        enable_json=config.log_file is not None,
    )


@app.command()
def history(
    ctx: typer.Context,
    count: int = typer.Argument(100, help="Number of rows to show"),
) -> None:
    """Show the most recent commands."""
    rows = HistoryStore(ctx.obj["config"].history_dir()).get_history(count)
    table = Table(title="Command History")
    table.add_column("Time", style="cyan")
    table.add_column("Command", style="green")
    table.add_column("Code")
    for row in rows:
        style = "red" if row.code else "green"
        table.add_row(
            row.time.isoformat(sep=" ", timespec="seconds"),
            row.command,
            f"[{style}]{row.code}[/{style}]",
        )
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__

    table = Table(title="Pangolin Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("Pangolin", __version__)
    for dist in ("pydantic", "rich", "typer", "PyYAML"):
        try:
            table.add_row(dist, dist_version(dist))
        except PackageNotFoundError:
            table.add_row(dist, "[red]Not installed[/red]")
    console.print(table)


@app.command()
def config(ctx: typer.Context) -> None:
    """Show current configuration."""
    current_config = ctx.obj["config"]
    table = Table(title="Pangolin Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Home Directory", str(current_config.home_dir))
    table.add_row("Log Level", current_config.log_level)
    if current_config.log_file:
        table.add_row("Log File", str(current_config.log_file))
    table.add_row("SSH User", current_config.ssh.user or "(topology user)")
    table.add_row("SSH Timeout", f"{current_config.ssh.timeout}s")
    if current_config.ssh.identity_file:
        table.add_row("SSH Identity File", str(current_config.ssh.identity_file))
    table.add_row("Wait Timeout", f"{current_config.timeouts.wait_timeout}s")
    table.add_row("Poll Interval", f"{current_config.timeouts.poll_interval}s")
    if current_config.timeouts.command_timeout:
        table.add_row("Command Timeout", f"{current_config.timeouts.command_timeout}s")
    table.add_row(
        "Default Concurrency", str(current_config.infrastructure.default_concurrency)
    )
    table.add_row(
        "Local Execution", str(current_config.infrastructure.local_execution)
    )
    table.add_row("Audit Retention", f"{current_config.audit_retain_days} days")
    console.print(table)


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except (RuntimeError, OSError, ValueError, ImportError) as e:
        logger.error("Unexpected error: %s", e)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
