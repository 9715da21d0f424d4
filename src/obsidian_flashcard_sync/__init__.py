"""Sync marker-delimited flashcards from Obsidian notes to Anki."""

__version__ = "0.3.0"
