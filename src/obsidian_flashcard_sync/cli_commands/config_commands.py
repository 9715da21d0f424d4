"""Commands for reading and changing the persisted sync settings."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from ..exceptions import ConfigurationError, ObsidianFlashcardSyncError
from .shared import console, fail, get_config_and_logger, open_state

config_app = typer.Typer(no_args_is_help=True)

SETTING_KEYS = {
    "marker": "flashcard_marker",
    "deck-root": "deck_root_name",
    "anki-url": "anki_connect_url",
}

VaultOption = Annotated[
    Path | None,
    typer.Option("--vault", help="Obsidian vault directory (default: current directory)"),
]
StateOption = Annotated[
    Path | None,
    typer.Option(
        "--state",
        help="Settings + card cache file (default: <vault>/.obsidian-flashcard-sync.json)",
    ),
]


@config_app.command("show")
def show(vault: VaultOption = None, state: StateOption = None) -> None:
    """Show the stored settings."""
    try:
        config, _ = get_config_and_logger(vault_path=vault, state_path=state)
        store = open_state(config)
    except ObsidianFlashcardSyncError as e:
        raise fail(e) from e

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, field_name in SETTING_KEYS.items():
        table.add_row(key, getattr(store.settings, field_name))
    console.print(table)
    console.print(f"State file: {store.path}")
    console.print(f"Cached cards: {len(store.cache)}")


@config_app.command("set")
def set_value(
    key: Annotated[str, typer.Argument(help="marker, deck-root or anki-url")],
    value: Annotated[str, typer.Argument(help="New value")],
    vault: VaultOption = None,
    state: StateOption = None,
) -> None:
    """Change a stored setting."""
    try:
        field_name = SETTING_KEYS.get(key)
        if field_name is None:
            msg = f"Unknown setting: {key}"
            raise ConfigurationError(msg, suggestion=f"Use one of: {', '.join(SETTING_KEYS)}")
        config, logger = get_config_and_logger(vault_path=vault, state_path=state)
        store = open_state(config)
        setattr(store.settings, field_name, value)
        store.save()
    except ObsidianFlashcardSyncError as e:
        raise fail(e) from e

    logger.info("setting_changed", key=key, value=getattr(store.settings, field_name))
    console.print(f"{key} = {getattr(store.settings, field_name)}")
