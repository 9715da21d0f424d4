"""Card identity and naming helpers.

Everything here is a pure function of the note path and card content:
the card id (used in the ``card::`` tag and as the cache key), the deck
name mirroring the vault folders, the breadcrumb shown on the card, the
``obsidian://`` link back to the note and the path tag.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from urllib.parse import quote

SYNC_TAG = "obsidian-anki-sync"
CARD_TAG_PREFIX = "card"
PATH_TAG_PREFIX = "path"
DECK_SEPARATOR = "::"

# NUL never occurs in a file path or in note text
_ID_SEPARATOR = "\x00"

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 0x01000193
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"

_WHITESPACE_RE = re.compile(r"\s+")
_TAG_UNSAFE_RE = re.compile(r"[^a-z0-9_-]+")
_MD_SUFFIX_RE = re.compile(r"\.md$", re.IGNORECASE)


def _normalize_for_hash(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip().lower()


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``text``."""
    data = text.encode("utf-16-le")
    value = _FNV_OFFSET_BASIS
    for index in range(0, len(data), 2):
        value ^= data[index] | (data[index + 1] << 8)
        value = (value * _FNV_PRIME) & 0xFFFFFFFF
    return value


def compute_card_id(file_path: str, front: str, back: str) -> str:
    """Compute the stable identity of a card.

    Whitespace runs collapse and case is ignored, so reformatting a card
    keeps its id; any change to the words or to the note path changes it.
    """
    source = _ID_SEPARATOR.join(
        (file_path, _normalize_for_hash(front), _normalize_for_hash(back))
    )
    return _to_base36(fnv1a_32(source))


def _sanitize_deck_segment(segment: str) -> str:
    return segment.replace(":", "-").strip()


def build_deck_name(file_path: str, root: str) -> str:
    """Deck name mirroring the note's folders under ``root``.

    ``build_deck_name("a/b/c.md", "Obsidian") == "Obsidian::a::b"``
    """
    normalized_root = root.strip()
    folders = file_path.split("/")[:-1]
    segments = [
        _sanitize_deck_segment(segment) for segment in [normalized_root, *folders]
    ]
    return DECK_SEPARATOR.join(s for s in segments if s) or normalized_root


def build_breadcrumb(file_path: str) -> str:
    """Human-readable trail such as ``Folder / Sub / Note``."""
    parts = file_path.split("/")
    parts[-1] = PurePosixPath(parts[-1]).stem
    return " / ".join(parts)


def create_obsidian_link(vault: str, file_path: str, line: int) -> str:
    """``obsidian://`` URI that opens the note at ``line``."""
    vault_param = quote(vault, safe=_URI_COMPONENT_SAFE)
    file_param = quote(file_path, safe=_URI_COMPONENT_SAFE)
    return f"obsidian://open?vault={vault_param}&file={file_param}&line={line}"


def sanitize_path_for_tag(path: str) -> str:
    """Turn a note path into a hierarchical tag body.

    ``sanitize_path_for_tag("Notes/My File.md") == "notes::my_file"``
    """
    normalized = _MD_SUFFIX_RE.sub("", path.replace("\\", "/"))
    segments = (
        _TAG_UNSAFE_RE.sub("_", segment.strip().lower())
        for segment in normalized.split("/")
    )
    return DECK_SEPARATOR.join(s for s in segments if s)


def card_tag(card_id: str) -> str:
    return f"{CARD_TAG_PREFIX}{DECK_SEPARATOR}{card_id}"


def build_card_tags(card_id: str, file_path: str) -> list[str]:
    """Tags applied to every synced note."""
    tags = [SYNC_TAG, card_tag(card_id)]
    path_tag = sanitize_path_for_tag(file_path)
    if path_tag:
        tags.append(f"{PATH_TAG_PREFIX}{DECK_SEPARATOR}{path_tag}")
    return tags
