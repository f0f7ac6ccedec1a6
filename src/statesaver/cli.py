# src/statesaver/cli.py
"""
StateSaver Command Line Interface (CLI).

Capturing and applying snapshots needs a live object, so those happen in the
host process through :class:`statesaver.saver.StateSaver`. This CLI works on
the store file itself: it lists what has been saved, shows a snapshot's
variables, and deletes snapshots that are no longer wanted.

Usage
-----
    $ statesaver targets
    $ statesaver list "game.Player140234"
    $ statesaver show "game.Player140234" checkpoint
    $ statesaver delete "game.Player140234" checkpoint --yes

The store path defaults to ``STATESAVER_STORE_PATH`` (or ``StateData.json``)
and can be overridden per command with ``--store``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from statesaver.core.errors import StateSaverError
from statesaver.core.keys import KeySource, parse_key
from statesaver.core.store import SnapshotStore

# Pick up STATESAVER_* settings from a local .env before any command runs
load_dotenv()

app = typer.Typer(
    help="StateSaver: inspect and manage saved object snapshots.",
    rich_markup_mode="markdown",
)
console = Console()

StoreOption = Annotated[
    Path | None,
    typer.Option(
        "--store",
        "-s",
        dir_okay=False,
        help="Path to the snapshot store JSON file.",
    ),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _open_store(store: Path | None) -> SnapshotStore:
    return SnapshotStore(store)


def _fail(message: str, exc: Exception | None = None) -> typer.Exit:
    """Print a red error line and return the Exit to raise."""
    detail = f" {exc}" if exc is not None else ""
    console.print(f"[bold red]Error:[/bold red] {escape(message + detail)}")
    return typer.Exit(code=1)


def _render_value(value: Any) -> str:
    """Compact one-line JSON for table cells, safe from Rich markup."""
    return escape(json.dumps(value, ensure_ascii=False))


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def targets(store: StoreOption = None) -> None:
    """List every object identity in the store with its snapshot count."""
    snapshot_store = _open_store(store)
    try:
        groups = snapshot_store.load_all()
    except StateSaverError as e:
        raise _fail("Could not read store.", e) from e

    if not groups:
        console.print(f"[dim]No snapshots in {snapshot_store.path}[/dim]")
        return

    table = Table(title=f"Targets in {snapshot_store.path}")
    table.add_column("Identity", style="cyan")
    table.add_column("Snapshots", justify="right")
    for identity, group in groups.items():
        table.add_row(escape(identity), str(len(group.snapshots)))
    console.print(table)


@app.command(name="list")  # type: ignore[misc]
def list_snapshots(
    identity: Annotated[str, typer.Argument(help="Object identity (see `targets`).")],
    store: StoreOption = None,
) -> None:
    """List the snapshot names saved for one identity, in save order."""
    try:
        names = _open_store(store).list_names(identity)
    except StateSaverError as e:
        raise _fail("Could not read store.", e) from e

    if not names:
        console.print(f"[yellow]No snapshots for {escape(identity)}[/yellow]")
        return
    for i, name in enumerate(names, start=1):
        console.print(f" {i:02d}. {escape(name)}")


@app.command()  # type: ignore[misc]
def show(
    identity: Annotated[str, typer.Argument(help="Object identity (see `targets`).")],
    name: Annotated[str, typer.Argument(help="Snapshot name.")],
    store: StoreOption = None,
) -> None:
    """Show the stored variables of one snapshot."""
    try:
        snap = _open_store(store).get(identity, name)
    except StateSaverError as e:
        raise _fail("Could not read store.", e) from e
    if snap is None:
        raise _fail(f"No snapshot named {name!r} for {identity}.")

    table = Table(title=escape(snap.name), caption=escape(identity))
    table.add_column("Source", style="magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    for raw_key, value in snap.variables.items():
        parsed = parse_key(raw_key)
        if parsed is None:
            table.add_row("?", escape(raw_key), _render_value(value))
        elif parsed.source is KeySource.PROP:
            source = f"prop ({parsed.property_kind})"
            table.add_row(source, escape(parsed.name), _render_value(value))
        else:
            table.add_row("field", escape(parsed.name), _render_value(value))
    console.print(table)


@app.command()  # type: ignore[misc]
def delete(
    identity: Annotated[str, typer.Argument(help="Object identity (see `targets`).")],
    name: Annotated[str, typer.Argument(help="Snapshot name.")],
    store: StoreOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Delete without asking for confirmation."),
    ] = False,
) -> None:
    """Delete one snapshot from the store."""
    if not yes and not Confirm.ask(f"Delete snapshot {name!r} for {identity}?", default=False):
        console.print("[dim]Aborted.[/dim]")
        return

    try:
        removed = _open_store(store).delete(identity, name)
    except (StateSaverError, OSError) as e:
        raise _fail("Could not update store.", e) from e
    if not removed:
        raise _fail(f"No snapshot named {name!r} for {identity}.")

    console.print(Panel.fit(f"Deleted [bold]{escape(name)}[/bold]", border_style="green"))


if __name__ == "__main__":
    app()
