"""Obsidian note access and flashcard extraction."""

from .parser import delimiter_tokens, extract_flashcards
from .vault import VaultDocument, resolve_document, vault_name

__all__ = [
    "VaultDocument",
    "delimiter_tokens",
    "extract_flashcards",
    "resolve_document",
    "vault_name",
]
