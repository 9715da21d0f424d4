"""Persisted sync state: user settings plus the card identity cache.

The state file is a single JSON document owned by this tool::

    {
      "settings": {"flashcardMarker": "ANKI", "deckRootName": "Obsidian",
                   "ankiConnectUrl": "http://127.0.0.1:8765"},
      "cards": {"<card id>": {"noteId": 1700000000000, "file": "a/b.md", "line": 3}}
    }

Card ids and tags differ from the ones the Obsidian plugin keeps in its own
``data.json``, so the default location is a separate file in the vault root.

It is loaded once when a command starts and written back once after each
sync batch.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..exceptions import StateError
from ..utils.io import atomic_write
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MARKER = "ANKI"
DEFAULT_DECK_ROOT = "Obsidian"
DEFAULT_ANKI_CONNECT_URL = "http://127.0.0.1:8765"


class FlashcardSettings(BaseModel):
    """User-facing sync settings stored alongside the card cache."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    flashcard_marker: str = Field(
        default=DEFAULT_MARKER,
        description="Comment marker, e.g. ANKI for <!--ANKI-START-->",
    )
    deck_root_name: str = Field(
        default=DEFAULT_DECK_ROOT, description="Top-level Anki deck"
    )
    anki_connect_url: str = Field(
        default=DEFAULT_ANKI_CONNECT_URL, description="AnkiConnect URL"
    )

    @field_validator("deck_root_name", mode="before")
    @classmethod
    def _default_deck_root(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_DECK_ROOT
        return v

    @field_validator("anki_connect_url", mode="before")
    @classmethod
    def _default_anki_url(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_ANKI_CONNECT_URL
        return v

    @property
    def marker(self) -> str:
        """Marker with surrounding whitespace removed ("" when unset)."""
        return self.flashcard_marker.strip()


class StoredCardReference(BaseModel):
    """Last known Anki note for a card id."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    note_id: int = Field(alias="noteId")
    file: str
    line: int


class CardCache:
    """In-memory map of card id -> StoredCardReference.

    Entries are never evicted; a card whose text changes simply gets a new id
    and its old entry stops being looked up.
    """

    def __init__(self, entries: dict[str, StoredCardReference] | None = None):
        self._entries: dict[str, StoredCardReference] = dict(entries or {})

    def get(self, card_id: str) -> StoredCardReference | None:
        return self._entries.get(card_id)

    def set(self, card_id: str, reference: StoredCardReference) -> None:
        self._entries[card_id] = reference

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def serialize(self) -> dict[str, dict[str, Any]]:
        return {
            card_id: reference.model_dump(by_alias=True)
            for card_id, reference in self._entries.items()
        }

    @classmethod
    def deserialize(cls, data: Any) -> CardCache:
        """Build a cache from its serialized form, skipping malformed entries."""
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("card_cache_malformed", type=type(data).__name__)
            return cls()

        entries: dict[str, StoredCardReference] = {}
        for card_id, raw in data.items():
            try:
                entries[str(card_id)] = StoredCardReference.model_validate(raw)
            except ValidationError as e:
                logger.warning(
                    "card_cache_entry_skipped", card_id=card_id, error=str(e)
                )
        return cls(entries)


class StateStore:
    """Loads and saves the settings and card cache as one JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.settings = FlashcardSettings()
        self.cache = CardCache()

    @classmethod
    def open(cls, path: Path) -> StateStore:
        store = cls(path)
        store.load()
        return store

    def load(self) -> None:
        """Read the state file; a missing file yields defaults and an empty cache."""
        if not self.path.exists():
            logger.debug("state_file_missing", path=str(self.path))
            self.settings = FlashcardSettings()
            self.cache = CardCache()
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            msg = f"Failed to read sync state: {self.path}"
            raise StateError(
                msg,
                suggestion="Fix or remove the file; a new one is created on the next sync.",
                context={"path": str(self.path), "error": str(e)},
            ) from e

        if not isinstance(data, dict):
            msg = f"Sync state must be a JSON object: {self.path}"
            raise StateError(msg, context={"path": str(self.path)})

        stored_settings = data.get("settings")
        if isinstance(stored_settings, dict):
            try:
                self.settings = FlashcardSettings.model_validate(stored_settings)
            except ValidationError as e:
                logger.warning("stored_settings_invalid", error=str(e))
                self.settings = FlashcardSettings()
        else:
            self.settings = FlashcardSettings()

        self.cache = CardCache.deserialize(data.get("cards"))
        logger.debug(
            "state_loaded", path=str(self.path), cached_cards=len(self.cache)
        )

    def save(self) -> None:
        """Write settings and cache back atomically."""
        payload = {
            "settings": self.settings.model_dump(by_alias=True),
            "cards": self.cache.serialize(),
        }
        try:
            with atomic_write(self.path) as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
        except OSError as e:
            msg = f"Failed to write sync state: {self.path}"
            raise StateError(msg, context={"path": str(self.path)}) from e
        logger.debug("state_saved", path=str(self.path), cached_cards=len(self.cache))
