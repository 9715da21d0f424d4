"""Abstract interfaces."""

from .anki_client import IAnkiClient

__all__ = ["IAnkiClient"]
