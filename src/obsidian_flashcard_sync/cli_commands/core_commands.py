"""Core CLI commands: sync, extract, check, css."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from pygments.util import ClassNotFound
from rich.table import Table

from ..exceptions import ObsidianFlashcardSyncError
from ..obsidian.parser import extract_flashcards
from ..obsidian.vault import resolve_document
from ..rendering.markdown_converter import get_pygments_css
from ..sync.naming import compute_card_id
from .shared import (
    console,
    effective_settings,
    fail,
    get_config_and_logger,
    open_state,
)
from .sync_handler import run_check, run_sync

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
MarkerOption = Annotated[
    str | None, typer.Option("--marker", help="Flashcard marker for this run")
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config.yaml", exists=True),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show all log messages on terminal"),
]


def _preview(text: str, width: int = 60) -> str:
    single_line = " ".join(text.split())
    if len(single_line) <= width:
        return single_line
    return single_line[: width - 1] + "…"


def register(app: typer.Typer) -> None:
    """Register core commands on the given Typer app."""

    @app.command()
    def sync(
        file: Annotated[Path, typer.Argument(help="Note to sync (absolute or vault-relative)")],
        vault: VaultOption = None,
        state: StateOption = None,
        marker: MarkerOption = None,
        deck_root: Annotated[
            str | None, typer.Option("--deck-root", help="Top-level deck for this run")
        ] = None,
        anki_url: Annotated[
            str | None, typer.Option("--anki-url", help="AnkiConnect URL for this run")
        ] = None,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Synchronize the flashcards of one note to Anki."""
        try:
            config, logger = get_config_and_logger(
                config_path, log_level, verbose, vault_path=vault, state_path=state
            )
            store = open_state(config)
            settings = effective_settings(store.settings, marker, deck_root, anki_url)
            logger.debug("cli_command_started", command="sync", file=str(file))
            result = run_sync(config, store, settings, file)
        except ObsidianFlashcardSyncError as e:
            raise fail(e) from e

        if result.ok:
            console.print(f"[green]{result.summary()}[/green]")
        else:
            console.print(f"[bold red]{result.summary()}[/bold red]")
            if verbose:
                for error in result.errors:
                    console.print(f"  [red]{error}[/red]")
            raise typer.Exit(code=1)

    @app.command()
    def extract(
        file: Annotated[Path, typer.Argument(help="Note to inspect")],
        vault: VaultOption = None,
        state: StateOption = None,
        marker: MarkerOption = None,
        config_path: ConfigOption = None,
    ) -> None:
        """Show the flashcards found in a note without contacting Anki."""
        try:
            config, _ = get_config_and_logger(
                config_path, vault_path=vault, state_path=state
            )
            settings = effective_settings(open_state(config).settings, marker)
            document = resolve_document(config.vault_path, file)
            cards = extract_flashcards(document.read_text(), settings.marker)
        except ObsidianFlashcardSyncError as e:
            raise fail(e) from e

        if not settings.marker:
            console.print("[yellow]No flashcard marker configured.[/yellow]")
            return
        if not cards:
            console.print("[yellow]No flashcards found in this note.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Line", style="cyan", justify="right")
        table.add_column("Front", style="white")
        table.add_column("Back", style="white")
        table.add_column("Card id", style="green")
        for card in cards:
            table.add_row(
                str(card.line_number),
                _preview(card.front),
                _preview(card.back),
                compute_card_id(document.path, card.front, card.back),
            )
        console.print(table)
        console.print(f"{len(cards)} flashcards in {document.path}")

    @app.command()
    def check(
        vault: VaultOption = None,
        state: StateOption = None,
        anki_url: Annotated[
            str | None, typer.Option("--anki-url", help="AnkiConnect URL to check")
        ] = None,
        config_path: ConfigOption = None,
    ) -> None:
        """Check that AnkiConnect is reachable."""
        try:
            config, _ = get_config_and_logger(
                config_path, vault_path=vault, state_path=state
            )
            settings = effective_settings(open_state(config).settings, anki_url=anki_url)
        except ObsidianFlashcardSyncError as e:
            raise fail(e) from e

        if run_check(config, settings):
            console.print(f"[green]✓ AnkiConnect reachable at {settings.anki_connect_url}[/green]")
            return
        console.print(f"[red]✗ AnkiConnect not reachable at {settings.anki_connect_url}[/red]")
        console.print("[dim]Start Anki and make sure the AnkiConnect add-on is installed.[/dim]")
        raise typer.Exit(code=1)

    @app.command()
    def css(
        style: Annotated[
            str, typer.Option("--style", help="Pygments style for code blocks")
        ] = "default",
    ) -> None:
        """Print the code highlighting CSS for the Anki note type styling."""
        try:
            stylesheet = get_pygments_css(style)
        except ClassNotFound as e:
            console.print(f"[red]Unknown highlighting style: {style}[/red]")
            raise typer.Exit(code=1) from e
        console.print(stylesheet, markup=False, highlight=False, soft_wrap=True)
