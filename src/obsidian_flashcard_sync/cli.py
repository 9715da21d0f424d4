"""Command-line interface for the sync tool."""

from __future__ import annotations

import typer

from .cli_commands import config_commands, core_commands

app = typer.Typer(
    name="obsidian-flashcard-sync",
    help="Sync <!--ANKI-START--> flashcards from Obsidian notes to Anki.",
    no_args_is_help=True,
)

app.add_typer(
    config_commands.config_app,
    name="config",
    help="Show or change the stored sync settings",
)

core_commands.register(app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
