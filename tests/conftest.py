"""Pytest configuration and fixtures for the test suite."""

import logging

import pytest

from obsidian_flashcard_sync.obsidian.vault import VaultDocument
from obsidian_flashcard_sync.sync.state import CardCache, FlashcardSettings, StateStore
from tests.fixtures import MockAnkiClient


@pytest.fixture(autouse=True)
def _isolate_logging(monkeypatch, tmp_path):
    """Keep CLI log files inside tmp_path and drop handlers afterwards."""
    monkeypatch.setenv("FLASHCARD_SYNC_LOG_DIR", str(tmp_path / "logs"))
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if type(handler).__module__.startswith("_pytest"):
            continue
        root_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def mock_anki_client():
    """Provide an in-memory Anki collection."""
    return MockAnkiClient()


@pytest.fixture
def settings():
    """Default settings with a short marker."""
    return FlashcardSettings(flashcard_marker="X", deck_root_name="Root")


@pytest.fixture
def card_cache():
    return CardCache()


@pytest.fixture
def vault(tmp_path):
    """An empty vault directory."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def write_note(vault):
    """Write a note into the vault and return it as a VaultDocument."""

    def _write(relative_path: str, content: str) -> VaultDocument:
        target = vault / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return VaultDocument(vault_path=vault, path=relative_path)

    return _write


@pytest.fixture
def state_store(tmp_path):
    return StateStore(tmp_path / "state" / "data.json")


@pytest.fixture
def sample_note_content():
    """A note with two flashcards and some surrounding prose."""
    return """# Geography

Some intro text.

<!--X-START-->
What is the capital of **France**?
<!--X-BACK-->
Paris
<!--X-END-->

More prose.

<!--X-START-->Largest ocean?<!--X-BACK-->The Pacific<!--X-END-->
"""
