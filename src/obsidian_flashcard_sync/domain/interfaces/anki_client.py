"""Interface for Anki client operations."""

from abc import ABC, abstractmethod


class IAnkiClient(ABC):
    """Interface for the remote note store used by the sync engine.

    Every method is a coroutine; the engine awaits each call before issuing
    the next one. Failures are reported by raising AnkiConnectError.
    """

    @abstractmethod
    async def check_connection(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if connection is successful, False otherwise
        """

    @abstractmethod
    async def create_deck(self, deck_name: str) -> None:
        """Create a deck; creating an existing deck is a no-op."""

    @abstractmethod
    async def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        """Add a new note and return its id.

        The store rejects a note whose first field duplicates another note
        in the same deck.
        """

    @abstractmethod
    async def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        """Overwrite the named fields of a note."""

    @abstractmethod
    async def add_tags(self, note_ids: list[int], tags: list[str]) -> None:
        """Add tags to notes (union with existing tags)."""

    @abstractmethod
    async def find_notes(self, query: str) -> list[int]:
        """Find notes matching a query.

        Args:
            query: Anki search query

        Returns:
            List of note IDs
        """

    @abstractmethod
    async def find_note_by_tag(self, tag: str) -> int | None:
        """Return the first note carrying ``tag``, or None."""

    @abstractmethod
    async def get_note_card_ids(self, note_id: int) -> list[int]:
        """Return the ids of the cards generated from a note."""

    @abstractmethod
    async def change_deck(self, card_ids: list[int], deck_name: str) -> None:
        """Move cards to another deck."""
