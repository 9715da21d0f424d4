"""Data models for the sync service."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class FlashcardDefinition:
    """A single front/back card extracted from a document."""

    front: str
    back: str
    line_number: int  # 1-based line of the first character of the front


@dataclass(frozen=True)
class CardError:
    """A failure recorded for one card (or for the whole batch)."""

    line_number: Optional[int]  # None for batch-level failures
    message: str

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


@dataclass
class SyncResult:
    """Outcome of one sync invocation for one document."""

    created: int = 0
    updated: int = 0
    errors: list[CardError] = field(default_factory=list)
    aborted: bool = False
    skipped: Optional[str] = None  # "marker_not_configured" | "no_flashcards"

    @property
    def ok(self) -> bool:
        """True when nothing failed."""
        return not self.aborted and not self.errors

    def summary(self) -> str:
        """Single-line summary suitable for a user notification."""
        if self.skipped == "marker_not_configured":
            return "No flashcard marker configured. Set one with `config set marker`."
        if self.skipped == "no_flashcards":
            return "No flashcards found in this note."
        if self.aborted:
            return f"Sync aborted: {self.errors[0].message if self.errors else 'unknown error'}"
        if self.errors:
            return (
                f"Sync finished with {len(self.errors)} errors. "
                "See the log for details."
            )
        return f"Sync complete: {self.created} created, {self.updated} updated."
