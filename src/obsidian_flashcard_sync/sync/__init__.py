"""Card identity, persisted state and the reconciliation engine."""

from .engine import SyncEngine
from .state import CardCache, FlashcardSettings, StateStore, StoredCardReference

__all__ = [
    "CardCache",
    "FlashcardSettings",
    "StateStore",
    "StoredCardReference",
    "SyncEngine",
]
