"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from obsidian_flashcard_sync.config import Config, load_config
from obsidian_flashcard_sync.exceptions import ObsidianFlashcardSyncError
from obsidian_flashcard_sync.sync.state import FlashcardSettings, StateStore
from obsidian_flashcard_sync.utils.logging import configure_logging, get_logger

console = Console()


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
    **overrides: Any,
) -> tuple[Config, Any]:
    """Load configuration and configure logging for a command.

    Args:
        config_path: Optional path to config.yaml
        log_level: Console log level (defaults to the configured one)
        verbose: Show all log messages on terminal
        **overrides: Config fields set from CLI options (None values ignored)

    Returns:
        Tuple of (Config, Logger)
    """
    config = load_config(config_path, log_level=log_level, **overrides)
    configure_logging(config.log_level, log_dir=config.log_dir, verbose=verbose)
    return config, get_logger("cli")


def open_state(config: Config) -> StateStore:
    """Load the settings + card cache file for the configured vault."""
    return StateStore.open(config.get_state_path())


def effective_settings(
    stored: FlashcardSettings,
    marker: str | None = None,
    deck_root: str | None = None,
    anki_url: str | None = None,
) -> FlashcardSettings:
    """Stored settings with CLI options applied on top (not persisted)."""
    updates: dict[str, Any] = {}
    if marker is not None:
        updates["flashcard_marker"] = marker
    if deck_root is not None:
        updates["deck_root_name"] = deck_root
    if anki_url is not None:
        updates["anki_connect_url"] = anki_url
    if not updates:
        return stored
    return FlashcardSettings.model_validate({**stored.model_dump(), **updates})


def fail(error: ObsidianFlashcardSyncError) -> typer.Exit:
    """Print an expected error without a traceback and build the exit."""
    console.print(f"[bold red]Error:[/bold red] {error.message}")
    if error.suggestion:
        console.print(f"[dim]{error.suggestion}[/dim]")
    return typer.Exit(code=1)
