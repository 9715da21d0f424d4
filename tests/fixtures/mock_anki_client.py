"""In-memory implementation of IAnkiClient for testing."""

from collections.abc import Callable
from typing import Any

from obsidian_flashcard_sync.domain.interfaces.anki_client import IAnkiClient
from obsidian_flashcard_sync.exceptions import AnkiConnectError


class MockAnkiClient(IAnkiClient):
    """Mock Anki collection for testing sync operations.

    Notes keep their fields, tags and cards; each note gets one card. Every
    call is recorded in ``calls`` and failures can be injected per method
    with ``fail_when``.
    """

    def __init__(self) -> None:
        self.decks: set[str] = {"Default"}
        self.notes: dict[int, dict[str, Any]] = {}
        self.card_decks: dict[int, str] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self._failures: list[tuple[str, Callable[..., bool], Exception]] = []
        self._note_counter = 1000
        self._card_counter = 5000

    # Test helpers

    def fail_when(
        self,
        method: str,
        error: Exception | None = None,
        predicate: Callable[..., bool] | None = None,
    ) -> None:
        """Make ``method`` raise ``error`` for calls matching ``predicate``."""
        self._failures.append(
            (
                method,
                predicate or (lambda **_: True),
                error or AnkiConnectError(f"{method} failed"),
            )
        )

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))
        for name, predicate, error in self._failures:
            if name == method and predicate(**kwargs):
                raise error

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def seed_note(
        self, deck: str, fields: dict[str, str], tags: list[str]
    ) -> int:
        """Insert a note directly, as if created outside the sync tool."""
        self.decks.add(deck)
        return self._insert_note(deck, "Basic", fields, tags)

    def _insert_note(
        self, deck: str, model_name: str, fields: dict[str, str], tags: list[str]
    ) -> int:
        note_id = self._note_counter
        self._note_counter += 1
        card_id = self._card_counter
        self._card_counter += 1
        self.notes[note_id] = {
            "modelName": model_name,
            "fields": dict(fields),
            "tags": set(tags),
            "cards": [card_id],
        }
        self.card_decks[card_id] = deck
        return note_id

    def deck_of(self, note_id: int) -> str:
        return self.card_decks[self.notes[note_id]["cards"][0]]

    # IAnkiClient

    async def check_connection(self) -> bool:
        self._record("check_connection")
        return True

    async def create_deck(self, deck_name: str) -> None:
        self._record("create_deck", deck_name=deck_name)
        self.decks.add(deck_name)

    async def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        self._record(
            "add_note", deck_name=deck_name, model_name=model_name, fields=fields, tags=tags
        )
        if deck_name not in self.decks:
            raise AnkiConnectError("deck was not found: " + deck_name)
        first_field = next(iter(fields.values()), "")
        for note_id, note in self.notes.items():
            if (
                self.deck_of(note_id) == deck_name
                and next(iter(note["fields"].values()), "") == first_field
            ):
                raise AnkiConnectError("cannot create note because it is a duplicate")
        return self._insert_note(deck_name, model_name, fields, tags or [])

    async def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        self._record("update_note_fields", note_id=note_id, fields=fields)
        if note_id not in self.notes:
            raise AnkiConnectError("Note was not found: " + str(note_id))
        self.notes[note_id]["fields"].update(fields)

    async def add_tags(self, note_ids: list[int], tags: list[str]) -> None:
        self._record("add_tags", note_ids=note_ids, tags=tags)
        for note_id in note_ids:
            if note_id in self.notes:
                self.notes[note_id]["tags"].update(tags)

    async def find_notes(self, query: str) -> list[int]:
        self._record("find_notes", query=query)
        if not query.startswith("tag:"):
            return []
        wanted = query[len("tag:") :].lower()
        return [
            note_id
            for note_id, note in sorted(self.notes.items())
            if any(tag.lower() == wanted for tag in note["tags"])
        ]

    async def find_note_by_tag(self, tag: str) -> int | None:
        notes = await self.find_notes(f"tag:{tag}")
        return notes[0] if notes else None

    async def get_note_card_ids(self, note_id: int) -> list[int]:
        self._record("get_note_card_ids", note_id=note_id)
        note = self.notes.get(note_id)
        return list(note["cards"]) if note else []

    async def change_deck(self, card_ids: list[int], deck_name: str) -> None:
        self._record("change_deck", card_ids=card_ids, deck_name=deck_name)
        self.decks.add(deck_name)
        for card_id in card_ids:
            self.card_decks[card_id] = deck_name

    async def __aenter__(self) -> "MockAnkiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        self.closed = True
        return False
