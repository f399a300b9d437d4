"""Shared Rich console for CLI output."""

import json
import os
from functools import wraps

from rich.console import Console
from rich.table import Table

_console = Console()
_error_console = Console(stderr=True)


def _should_print() -> bool:
    return os.environ.get("LOG_CONSOLE_ENABLED", "true").lower() == "true"


def _console_output(func):
    """Skip the call when console output is disabled."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        if _should_print():
            return func(*args, **kwargs)

    return wrapper


@_console_output
def print_success(message: str):
    _console.print(f"[green]{message}[/green]")


@_console_output
def print_error(message: str):
    """Print error message to stderr."""
    _error_console.print(f"[red]{message}[/red]")


@_console_output
def print_info(message: str):
    _console.print(f"[cyan]{message}[/cyan]")


@_console_output
def print_warning(message: str):
    _console.print(f"[yellow]{message}[/yellow]")


@_console_output
def print_command(message: str):
    """Print a command the user can run."""
    _console.print(f"[yellow]{message}[/yellow]")


def print_json(data: dict):
    """Print JSON data (always outputs, ignores LOG_CONSOLE_ENABLED)."""
    print(json.dumps(data, indent=2))


def catalog_table(catalog: dict) -> Table:
    """Render an OSB catalog body as one row per plan."""
    table = Table(title="Service catalog")
    table.add_column("Service", style="cyan")
    table.add_column("Plan")
    table.add_column("Plan ID", style="dim")
    table.add_column("Bindable", justify="center")
    for service in catalog.get("services", []):
        for plan in service.get("plans", []):
            table.add_row(
                service["name"],
                plan["name"],
                plan["id"],
                "yes" if service.get("bindable") else "no",
            )
    return table


def print_table(table: Table):
    """Print a rich table (always outputs)."""
    _console.print(table)
