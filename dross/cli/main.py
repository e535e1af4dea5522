"""dross CLI — schema management for operators.

`dross migrate` runs the same sequence as process boot.
`dross status` shows where the schema stands.
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from dross.boot import build_manager, prepare_database
from dross.config import settings
from dross.exceptions import DrossError

console = Console()

app = typer.Typer(
    name="dross",
    help="dross -- Dross Manager schema tools.",
    no_args_is_help=True,
)


@app.command("migrate")
def migrate():
    """Bring the database schema up to the build version."""
    logging.basicConfig(level=settings.log_level.upper())
    try:
        outcome = asyncio.run(prepare_database(settings))
    except DrossError as e:
        console.print(f"[red]Migration failed:[/red] {e}")
        raise typer.Exit(code=1)

    if outcome is None:
        console.print("[green]Schema is up to date.[/green]")
        return
    console.print(f"[green]Migration finished[/green] ({outcome.path.value})")
    for name in outcome.applied:
        console.print(f"  applied [bold]{name}[/bold]")
    console.print(f"Record: {outcome.record}")


@app.command("status")
def status():
    """Show current, target and build versions."""
    manager = build_manager(settings)

    async def _status():
        return await manager.current(), await manager.needs_migration()

    try:
        record, pending = asyncio.run(_status())
    except DrossError as e:
        console.print(f"[red]Could not read migration state:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title="dross schema")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("database", str(settings.db_path))
    table.add_row("current", str(record.current_version or "absent"))
    table.add_row("target", str(record.target_version))
    table.add_row("state", "in progress" if record.in_progress else "settled")
    table.add_row("build", str(manager.build_version))
    table.add_row("latest step", str(manager.step_table.latest))
    table.add_row("pending", "[yellow]yes[/yellow]" if pending else "[green]no[/green]")
    console.print(table)


@app.command("version")
def version():
    """Show the build version."""
    from dross import __version__
    console.print(f"dross {settings.build_version or __version__}")


def main():
    app()


if __name__ == "__main__":
    main()
