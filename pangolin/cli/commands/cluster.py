"""Lifecycle CLI commands: start, stop, restart, enable, disable, clean."""

import threading
from typing import Callable, List, Optional

import typer
from rich.console import Console

from ...audit import AuditStore, HistoryStore
from ...core.errors import PangolinError, StepError, UserAbortError
from ...core.log import get_logger, log_context
from ...core.types import PangolinConfig
from ...executor import build_executors
from ...manager import Manager, prompt_confirm
from ...operation.options import CleanupOptions, Options
from ...utils.codec import to_json_string

console = Console(stderr=True)
logger = get_logger(__name__)

NodeOption = typer.Option(
    None, "--node", "-N", help="Only operate on the given instance IDs or hosts"
)
RoleOption = typer.Option(None, "--role", "-R", help="Only operate on the given components")
ConcurrencyOption = typer.Option(
    None, "--concurrency", help="Maximum number of concurrent operations"
)
WaitTimeoutOption = typer.Option(
    None, "--wait-timeout", help="Seconds to wait for a port to change state"
)
YesOption = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts")


def _config(ctx: typer.Context) -> PangolinConfig:
    return ctx.obj["config"]


def build_options(
    config: PangolinConfig,
    nodes: Optional[List[str]] = None,
    roles: Optional[List[str]] = None,
    concurrency: Optional[int] = None,
    wait_timeout: Optional[float] = None,
    skip_confirm: bool = False,
    wait_stopped: bool = False,
) -> Options:
    """Merge command-line flags over configured defaults."""
    return Options(
        concurrency=concurrency or config.infrastructure.default_concurrency,
        nodes=tuple(nodes or ()),
        roles=tuple(roles or ()),
        skip_confirm=skip_confirm,
        wait_timeout=wait_timeout or config.timeouts.wait_timeout,
        poll_interval=config.timeouts.poll_interval,
        wait_stopped=wait_stopped,
    )


def make_manager(
    config: PangolinConfig, cancel_event: Optional[threading.Event] = None
) -> Manager:
    return Manager(
        config,
        executor_factory=build_executors,
        confirm=prompt_confirm,
        cancel_event=cancel_event,
    )


def run_command(
    config: PangolinConfig,
    command_line: str,
    fn: Callable[[Manager], None],
    audit_body: str = "",
) -> None:
    """Run a manager call, record history and audit, and map errors to exit codes.

    Ctrl-C sets the run's cancel event so no further instance work starts,
    and exits with 130.
    """
    code = 0
    cancel_event = threading.Event()
    try:
        with log_context(command=command_line):
            fn(make_manager(config, cancel_event))
    except KeyboardInterrupt:
        cancel_event.set()
        code = 130
        console.print("\n[yellow]Interrupted, remaining operations cancelled[/yellow]")
    except UserAbortError as e:
        console.print(f"[yellow]{e.message}[/yellow]")
    except PangolinError as e:
        code = 1
        if isinstance(e, StepError):
            logger.debug("Root cause (%s): %r", e.root_kind.value, e.root_error)
        console.print(f"[red]Error: {e.message}[/red]")
    finally:
        HistoryStore(config.history_dir()).record(command_line, code)
        AuditStore(config.audit_dir()).write(command_line, audit_body)
    if code:
        raise typer.Exit(code)


def _command_line(name: str, cluster: str, options: Options) -> str:
    parts = [name, cluster]
    for node in options.nodes:
        parts += ["-N", node]
    for role in options.roles:
        parts += ["-R", role]
    if options.skip_confirm:
        parts.append("--yes")
    return " ".join(parts)


def start(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster name"),
    node: Optional[List[str]] = NodeOption,
    role: Optional[List[str]] = RoleOption,
    concurrency: Optional[int] = ConcurrencyOption,
    wait_timeout: Optional[float] = WaitTimeoutOption,
) -> None:
    """Start a cluster."""
    config = _config(ctx)
    options = build_options(config, node, role, concurrency, wait_timeout)
    run_command(
        config,
        _command_line("start", cluster, options),
        lambda m: m.start_cluster(cluster, options),
        to_json_string(options),
    )


def stop(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster name"),
    node: Optional[List[str]] = NodeOption,
    role: Optional[List[str]] = RoleOption,
    concurrency: Optional[int] = ConcurrencyOption,
    wait_timeout: Optional[float] = WaitTimeoutOption,
    wait_stopped: bool = typer.Option(
        False, "--wait-stopped", help="Wait for ports to close after stopping"
    ),
    yes: bool = YesOption,
) -> None:
    """Stop a cluster."""
    config = _config(ctx)
    options = build_options(config, node, role, concurrency, wait_timeout, yes, wait_stopped)
    run_command(
        config,
        _command_line("stop", cluster, options),
        lambda m: m.stop_cluster(cluster, options),
        to_json_string(options),
    )


def restart(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster name"),
    node: Optional[List[str]] = NodeOption,
    role: Optional[List[str]] = RoleOption,
    concurrency: Optional[int] = ConcurrencyOption,
    wait_timeout: Optional[float] = WaitTimeoutOption,
    yes: bool = YesOption,
) -> None:
    """Restart a cluster."""
    config = _config(ctx)
    options = build_options(config, node, role, concurrency, wait_timeout, yes)
    run_command(
        config,
        _command_line("restart", cluster, options),
        lambda m: m.restart_cluster(cluster, options),
        to_json_string(options),
    )


def enable(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster name"),
    node: Optional[List[str]] = NodeOption,
    role: Optional[List[str]] = RoleOption,
    concurrency: Optional[int] = ConcurrencyOption,
) -> None:
    """Enable a cluster's services at boot."""
    config = _config(ctx)
    options = build_options(config, node, role, concurrency)
    run_command(
        config,
        _command_line("enable", cluster, options),
        lambda m: m.enable_cluster(cluster, options, True),
        to_json_string(options),
    )


def disable(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster name"),
    node: Optional[List[str]] = NodeOption,
    role: Optional[List[str]] = RoleOption,
    concurrency: Optional[int] = ConcurrencyOption,
) -> None:
    """Disable a cluster's services at boot."""
    config = _config(ctx)
    options = build_options(config, node, role, concurrency)
    run_command(
        config,
        _command_line("disable", cluster, options),
        lambda m: m.enable_cluster(cluster, options, False),
        to_json_string(options),
    )


def clean(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster name"),
    data: bool = typer.Option(False, "--data", help="Clean data directories"),
    log: bool = typer.Option(False, "--log", help="Clean log files"),
    tls: bool = typer.Option(False, "--tls", help="Clean TLS certificates and keys"),
    clean_all: bool = typer.Option(False, "--all", help="Clean data, logs and TLS files"),
    retain_role: Optional[List[str]] = typer.Option(
        None, "--retain-role", help="Keep files of these components"
    ),
    retain_node: Optional[List[str]] = typer.Option(
        None, "--retain-node", help="Keep files of these instance IDs or hosts"
    ),
    concurrency: Optional[int] = ConcurrencyOption,
    yes: bool = YesOption,
) -> None:
    """Stop a cluster and delete its data, logs or TLS files."""
    config = _config(ctx)
    options = build_options(config, concurrency=concurrency, skip_confirm=yes)
    cleanup = CleanupOptions(
        clean_data=data or clean_all,
        clean_log=log or clean_all,
        clean_tls=tls or clean_all,
        retain_roles=tuple(retain_role or ()),
        retain_nodes=tuple(retain_node or ()),
    )
    run_command(
        config,
        _command_line("clean", cluster, options),
        lambda m: m.clean_cluster(cluster, options, cleanup),
        to_json_string(cleanup),
    )
