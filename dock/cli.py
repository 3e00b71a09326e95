"""
dock - Lightweight container manager for sandboxed scripts.

Usage:
  dock create web app.py          # Create a container for app.py
  dock start web -p 8080:80       # Start it with a port-mapping hint
  dock list                       # Show all containers
  dock logs web                   # Print captured output
  dock status web --verify        # Compare record with live processes
  dock stop web                   # Stop it
  dock remove web                 # Delete root, logs and record
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

# User-level overrides are loaded before settings are instantiated
from dotenv import load_dotenv


def dotenv_path() -> Path:
    """The .env file inside the dock home, honouring DOCK_HOME."""
    return Path(os.environ.get("DOCK_HOME", "~/.dock")).expanduser() / ".env"


load_dotenv(dotenv_path())

from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from . import __version__
from .models import ContainerStatus, DockException
from .services.container import ContainerManager
from .utils.logging import setup_logging

console = Console()
# Soft wrap keeps paths in error messages on one line for parsing scripts
err_console = Console(stderr=True, soft_wrap=True)


# ============================================================================
# Service Initialization
# ============================================================================

def get_manager() -> ContainerManager:
    """Get a container manager bound to the configured dock home."""
    return ContainerManager()


# ============================================================================
# Formatting Helpers
# ============================================================================

def format_status(status: ContainerStatus) -> str:
    """Color a container status for display."""
    if status == ContainerStatus.RUNNING:
        return f"[green]{status.value}[/green]"
    return f"[dim]{status.value}[/dim]"


def build_containers_table(containers) -> Table:
    """Build the container listing table."""
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("NAME", style="cyan", no_wrap=True)
    table.add_column("STATUS")
    table.add_column("PYTHON")
    table.add_column("PORT")

    for config in containers:
        table.add_row(
            config.name,
            format_status(config.status),
            config.runtime_version,
            config.port_mapping or "-",
        )
    return table


# ============================================================================
# Commands
# ============================================================================

def cmd_create(args) -> Optional[int]:
    """Create a container."""
    config = get_manager().create(args.name, args.script)
    if args.json:
        console.print_json(config.model_dump_json())
        return None
    console.print(
        f"[green]✓[/green] Container '{config.name}' created (Python: {config.runtime_version})"
    )
    return None


def cmd_start(args) -> Optional[int]:
    """Start a container."""
    handle = get_manager().start(args.name, args.port)
    if args.json:
        console.print_json(data={"name": handle.container_name, "pid": handle.pid, "port": args.port})
        return None
    console.print(f"[green]✓[/green] Container '{args.name}' started (PID: {handle.pid})")
    if args.port:
        console.print(f"  Port mapping: {args.port}")
    return None


def cmd_stop(args) -> Optional[int]:
    """Stop a container."""
    pids = get_manager().stop(args.name)
    if args.json:
        console.print_json(data={"name": args.name, "signalled": pids})
        return None
    console.print(f"[green]✓[/green] Container '{args.name}' stopped")
    return None


def cmd_list(args) -> Optional[int]:
    """List all containers."""
    containers = get_manager().list()
    if args.json:
        console.print_json(data=[c.model_dump(mode="json") for c in containers])
        return None
    if not containers:
        console.print("No containers found")
        return None
    console.print(build_containers_table(containers))
    return None


def cmd_enter(args) -> Optional[int]:
    """Enter a container shell."""
    return get_manager().enter(args.name)


def cmd_logs(args) -> Optional[int]:
    """Print container logs."""
    content = get_manager().logs(args.name)
    if args.json:
        console.print_json(data={"name": args.name, "logs": content})
        return None
    if content is None:
        console.print(f"No logs available for container '{escape(args.name)}'")
        return None
    # Raw write: log content must not be interpreted as rich markup
    sys.stdout.write(content)
    if content and not content.endswith("\n"):
        sys.stdout.write("\n")
    return None


def cmd_remove(args) -> Optional[int]:
    """Remove a container."""
    get_manager().remove(args.name)
    if args.json:
        console.print_json(data={"name": args.name, "removed": True})
        return None
    console.print(f"[green]✓[/green] Container '{args.name}' removed")
    return None


def cmd_status(args) -> Optional[int]:
    """Show persisted status, optionally verified against live processes."""
    report = get_manager().status(args.name, verify=args.verify)
    if args.json:
        data = report.model_dump(mode="json")
        data["consistent"] = report.consistent
        console.print_json(data=data)
        return 0 if report.consistent else 1

    console.print(f"{report.name}: {format_status(report.persisted_status)}")
    if report.verified:
        pids = ", ".join(str(p) for p in report.live_pids) or "none"
        console.print(f"  Live processes: {pids}")
        if report.consistent:
            console.print("  [green]Consistent[/green]")
        else:
            console.print(
                "  [yellow]Inconsistent:[/yellow] reconcile with "
                f"'dock stop {report.name}' then 'dock start {report.name}'"
            )
    return 0 if report.consistent else 1


def cmd_doctor(args) -> Optional[int]:
    """Check that the sandbox tool is usable."""
    manager = get_manager()
    error = manager.get_initialization_error()
    if args.json:
        console.print_json(data={"ok": error is None, "error": error})
        return 0 if error is None else 1
    console.print(f"dock {__version__}")
    console.print(f"  Home: {manager.store.base_dir.parent}")
    if error:
        console.print(f"  [red]✗[/red] {error}")
        return 1
    console.print("  [green]✓[/green] Sandbox tool available")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dock",
        description="Lightweight container manager for sandboxed scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s create web app.py         # Create a container
  %(prog)s start web --port 8080:80  # Start with a port mapping
  %(prog)s status web --verify       # Check record against live processes
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # create
    create_p = subparsers.add_parser("create", help="Create a new container")
    create_p.add_argument("name", help="Container name")
    create_p.add_argument("script", help="Path to Python script")

    # start
    start_p = subparsers.add_parser("start", help="Start a container")
    start_p.add_argument("name", help="Container name")
    start_p.add_argument("-p", "--port", help="Port mapping (host:container)")

    # stop
    stop_p = subparsers.add_parser("stop", help="Stop a container")
    stop_p.add_argument("name", help="Container name")

    # list
    subparsers.add_parser("list", help="List all containers")

    # enter
    enter_p = subparsers.add_parser("enter", help="Enter a container shell")
    enter_p.add_argument("name", help="Container name")

    # logs
    logs_p = subparsers.add_parser("logs", help="View container logs")
    logs_p.add_argument("name", help="Container name")

    # remove
    remove_p = subparsers.add_parser("remove", help="Remove a container")
    remove_p.add_argument("name", help="Container name")

    # status
    status_p = subparsers.add_parser("status", help="Show container status")
    status_p.add_argument("name", help="Container name")
    status_p.add_argument(
        "--verify", action="store_true", help="Check against live tagged processes"
    )

    # doctor
    subparsers.add_parser("doctor", help="Check the sandbox tool installation")

    return parser


HANDLERS = {
    "create": cmd_create,
    "start": cmd_start,
    "stop": cmd_stop,
    "list": cmd_list,
    "enter": cmd_enter,
    "logs": cmd_logs,
    "remove": cmd_remove,
    "status": cmd_status,
    "doctor": cmd_doctor,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        code = HANDLERS[args.command](args)
    except DockException as e:
        if args.json:
            console.print_json(e.to_response().model_dump_json())
        else:
            err_console.print(f"[red]Error:[/red] {escape(e.message)}", highlight=False)
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(0)

    sys.exit(code or 0)


if __name__ == "__main__":
    main()
