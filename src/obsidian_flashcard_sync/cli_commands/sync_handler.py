"""Sync command implementation logic."""

import asyncio
from pathlib import Path

from ..anki.client import AnkiClient
from ..config import Config
from ..models import SyncResult
from ..obsidian.vault import VaultDocument, resolve_document
from ..sync.engine import SyncEngine
from ..sync.state import FlashcardSettings, StateStore


async def _sync_document(
    config: Config,
    store: StateStore,
    settings: FlashcardSettings,
    document: VaultDocument,
) -> SyncResult:
    async with AnkiClient(settings.anki_connect_url, timeout=config.anki_timeout) as anki:
        engine = SyncEngine(
            anki,
            settings,
            store.cache,
            note_type=config.note_type,
            front_field=config.front_field,
            back_field=config.back_field,
        )
        return await engine.sync_document(document, config.get_vault_name(), store.save)


def run_sync(
    config: Config,
    store: StateStore,
    settings: FlashcardSettings,
    file: Path,
) -> SyncResult:
    """Sync one note's flashcards to Anki.

    Args:
        config: Configuration object
        store: Loaded state (its cache is updated and saved)
        settings: Effective settings for this run
        file: Note to sync (absolute or vault-relative)

    Raises:
        DocumentError: If the note cannot be resolved or read
        StateError: If the state cannot be saved
    """
    document = resolve_document(config.vault_path, file)
    return asyncio.run(_sync_document(config, store, settings, document))


async def _check_connection(url: str, timeout: float) -> bool:
    async with AnkiClient(url, timeout=timeout) as anki:
        return await anki.check_connection()


def run_check(config: Config, settings: FlashcardSettings) -> bool:
    """Return True when AnkiConnect answers."""
    return asyncio.run(_check_connection(settings.anki_connect_url, config.anki_timeout))
