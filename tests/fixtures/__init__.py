"""Test fixtures package."""

from .mock_anki_client import MockAnkiClient

__all__ = ["MockAnkiClient"]
