"""Centralized exception hierarchy for obsidian-flashcard-sync.

All custom exceptions inherit from ObsidianFlashcardSyncError, so callers
(the CLI in particular) can catch every expected failure with a single
except clause and show a clean message instead of a traceback.

Exception Hierarchy:
    ObsidianFlashcardSyncError (base)
     ConfigurationError - Configuration loading/validation errors
     DocumentError - Vault document resolution/reading errors
     StateError - Persisted state (settings + card cache) errors
     AnkiError - Anki-related errors
        AnkiConnectError - AnkiConnect transport failures and rejections

Usage Examples:
    try:
        result = await engine.sync_document(document, vault_name, store.save)
    except ObsidianFlashcardSyncError as e:
        logger.error("sync_failed", **e.to_dict())
"""

from typing import Any


class ObsidianFlashcardSyncError(Exception):
    """Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        context: Additional context for debugging (e.g., file paths, note ids)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with the suggestion if available."""
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


class ConfigurationError(ObsidianFlashcardSyncError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is malformed
    - A settings key is unknown
    - Configuration values fail validation
    """


class DocumentError(ObsidianFlashcardSyncError):
    """A vault document could not be resolved or read."""


class StateError(ObsidianFlashcardSyncError):
    """The persisted settings/card cache could not be read or written."""


class AnkiError(ObsidianFlashcardSyncError):
    """Base class for Anki-related errors."""


class AnkiConnectError(AnkiError):
    """AnkiConnect communication errors.

    Covers both transport failures (Anki not running, HTTP errors, invalid
    responses) and logical rejections reported in the ``error`` field of an
    AnkiConnect reply (duplicate note, unknown model, ...).
    """
