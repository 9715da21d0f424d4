"""Synchronization engine: reconcile a note's flashcards with Anki.

For every card extracted from a note, in document order:

1. compute the card id from the note path and card text;
2. find its Anki note: the local cache first, then a ``card::<id>`` tag search;
3. render the Front/Back fields;
4. known note -> overwrite fields, add tags, move its cards into the deck;
   unknown -> add a new note in the deck;
5. on success record the note id in the cache; on failure record an error
   for the card's line and leave the cache untouched.

Cards are processed one at a time. A card failure never stops the batch;
only a failure to create the deck does, since no card could be placed.
"""

import asyncio
import weakref
from collections.abc import Callable, Sequence
from typing import Any

from ..domain.interfaces.anki_client import IAnkiClient
from ..exceptions import ObsidianFlashcardSyncError
from ..models import CardError, FlashcardDefinition, SyncResult
from ..obsidian.parser import extract_flashcards
from ..obsidian.vault import VaultDocument
from ..rendering.card_renderer import CardRenderer, FieldRenderer
from ..utils.logging import get_logger
from .naming import (
    build_breadcrumb,
    build_card_tags,
    build_deck_name,
    card_tag,
    compute_card_id,
    create_obsidian_link,
)
from .state import CardCache, FlashcardSettings, StoredCardReference

logger = get_logger(__name__)

SKIP_MARKER_NOT_CONFIGURED = "marker_not_configured"
SKIP_NO_FLASHCARDS = "no_flashcards"


def _error_message(error: Exception) -> str:
    if isinstance(error, ObsidianFlashcardSyncError):
        return error.message
    return str(error) or type(error).__name__


def _error_details(error: Exception) -> dict[str, Any]:
    """Structured fields for the diagnostic log."""
    if isinstance(error, ObsidianFlashcardSyncError):
        return error.to_dict()
    return {"message": _error_message(error), "type": type(error).__name__}


class SyncEngine:
    """Reconciles extracted flashcards with notes in Anki."""

    def __init__(
        self,
        anki: IAnkiClient,
        settings: FlashcardSettings,
        cache: CardCache,
        renderer: FieldRenderer | None = None,
        note_type: str = "Basic",
        front_field: str = "Front",
        back_field: str = "Back",
    ):
        self.anki = anki
        self.settings = settings
        self.cache = cache
        self.renderer: FieldRenderer = renderer or CardRenderer()
        self.note_type = note_type
        self.front_field = front_field
        self.back_field = back_field
        # A lock lives only while a sync holds or waits for it
        self._document_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, document_path: str) -> asyncio.Lock:
        lock = self._document_locks.get(document_path)
        if lock is None:
            lock = asyncio.Lock()
            self._document_locks[document_path] = lock
        return lock

    async def sync_document(
        self,
        document: VaultDocument,
        vault_name: str,
        persist: Callable[[], None],
    ) -> SyncResult:
        """Extract the note's flashcards and reconcile them with Anki.

        ``persist`` is called exactly once after reconciliation, whether it
        completed or aborted. Nothing is persisted when there was nothing to
        sync.

        Raises:
            DocumentError: If the note cannot be read
        """
        marker = self.settings.marker
        if not marker:
            logger.warning(
                "sync_skipped", reason="no flashcard marker configured", file=document.path
            )
            return SyncResult(skipped=SKIP_MARKER_NOT_CONFIGURED)

        content = document.read_text()
        cards = extract_flashcards(content, marker)
        if not cards:
            logger.info(
                "sync_skipped", reason="no flashcards found", file=document.path
            )
            return SyncResult(skipped=SKIP_NO_FLASHCARDS)

        deck_name = build_deck_name(document.path, self.settings.deck_root_name)
        breadcrumb = build_breadcrumb(document.path)

        lock = self._lock_for(document.path)
        async with lock:
            logger.info(
                "sync_started", file=document.path, cards=len(cards), deck=deck_name
            )
            try:
                result = await self.reconcile(
                    document.path, cards, deck_name, breadcrumb, vault_name
                )
            finally:
                persist()

        logger.info(
            "sync_summary",
            file=document.path,
            created=result.created,
            updated=result.updated,
            errors=len(result.errors),
            aborted=result.aborted,
        )
        return result

    async def reconcile(
        self,
        document_path: str,
        cards: Sequence[FlashcardDefinition],
        deck_name: str,
        breadcrumb: str,
        vault_name: str,
    ) -> SyncResult:
        """Create or update one Anki note per card, isolating failures per card."""
        result = SyncResult()

        try:
            await self.anki.create_deck(deck_name)
        except Exception as e:
            message = _error_message(e)
            logger.error(
                "sync_aborted",
                file=document_path,
                deck=deck_name,
                error=message,
                error_type=type(e).__name__,
            )
            result.aborted = True
            result.errors.append(CardError(line_number=None, message=message))
            return result

        for card in cards:
            try:
                created = await self._reconcile_card(
                    document_path, card, deck_name, breadcrumb, vault_name
                )
            except Exception as e:
                message = _error_message(e)
                logger.warning(
                    "card_sync_failed",
                    file=document_path,
                    line=card.line_number,
                    **_error_details(e),
                    exc_info=not isinstance(e, ObsidianFlashcardSyncError),
                )
                result.errors.append(
                    CardError(line_number=card.line_number, message=message)
                )
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1

        return result

    async def _resolve_note_id(self, card_id: str) -> int | None:
        """Cached note id if any, else the first note tagged with the card id."""
        cached = self.cache.get(card_id)
        if cached is not None:
            return cached.note_id
        return await self.anki.find_note_by_tag(card_tag(card_id))

    async def _ensure_note_in_deck(self, note_id: int, deck_name: str) -> None:
        card_ids = await self.anki.get_note_card_ids(note_id)
        if card_ids:
            await self.anki.change_deck(card_ids, deck_name)

    async def _reconcile_card(
        self,
        document_path: str,
        card: FlashcardDefinition,
        deck_name: str,
        breadcrumb: str,
        vault_name: str,
    ) -> bool:
        """Sync one card; returns True when a new note was created."""
        card_id = compute_card_id(document_path, card.front, card.back)
        link = create_obsidian_link(vault_name, document_path, card.line_number)
        tags = build_card_tags(card_id, document_path)

        note_id = await self._resolve_note_id(card_id)
        fields = {
            self.front_field: self.renderer.front_field(card, breadcrumb, link),
            self.back_field: self.renderer.back_field(card, breadcrumb),
        }

        if note_id is not None:
            await self.anki.update_note_fields(note_id, fields)
            await self.anki.add_tags([note_id], tags)
            await self._ensure_note_in_deck(note_id, deck_name)
            created = False
        else:
            note_id = await self.anki.add_note(
                deck_name=deck_name,
                model_name=self.note_type,
                fields=fields,
                tags=tags,
            )
            created = True

        self.cache.set(
            card_id,
            StoredCardReference(note_id=note_id, file=document_path, line=card.line_number),
        )
        logger.debug(
            "card_synced",
            file=document_path,
            line=card.line_number,
            card_id=card_id,
            note_id=note_id,
            created=created,
        )
        return created
