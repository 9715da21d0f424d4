"""Extraction of marker-delimited flashcards from Obsidian notes.

A card is written in a note as three HTML comments around its content::

    <!--ANKI-START-->
    What is the capital of France?
    <!--ANKI-BACK-->
    Paris
    <!--ANKI-END-->

The marker (``ANKI`` above) is configurable. Anything may appear between
the comments, including further markup.
"""

import re

from ..models import FlashcardDefinition
from ..utils.logging import get_logger

logger = get_logger(__name__)

_NEWLINE_RE = re.compile(r"\r?\n")
_NON_WHITESPACE_RE = re.compile(r"\S")


def delimiter_tokens(marker: str) -> tuple[str, str, str]:
    """Return the (start, back, end) comment tokens for a marker."""
    normalized = marker.strip()
    return (
        f"<!--{normalized}-START-->",
        f"<!--{normalized}-BACK-->",
        f"<!--{normalized}-END-->",
    )


def _line_number_at(content: str, index: int) -> int:
    """1-based line number of the character at ``index``."""
    if index <= 0:
        return 1
    return len(_NEWLINE_RE.findall(content, 0, index)) + 1


def extract_flashcards(content: str, marker: str) -> list[FlashcardDefinition]:
    """Extract all complete flashcards from note content, in document order.

    A start token without a following back or end token is abandoned and the
    scan resumes right after it, so an unfinished card never hides a later
    complete one. Cards whose front or back is blank are skipped silently.

    Args:
        content: Full note text
        marker: Flashcard marker, e.g. ``ANKI``; blank disables extraction

    Returns:
        Extracted flashcards (possibly empty)
    """
    if not marker.strip():
        return []

    start_token, back_token, end_token = delimiter_tokens(marker)

    cards: list[FlashcardDefinition] = []
    search_index = 0

    while search_index < len(content):
        start_index = content.find(start_token, search_index)
        if start_index == -1:
            break
        front_start = start_index + len(start_token)

        back_index = content.find(back_token, front_start)
        if back_index == -1:
            search_index = front_start
            continue

        end_index = content.find(end_token, back_index + len(back_token))
        if end_index == -1:
            search_index = front_start
            continue

        front_raw = content[front_start:back_index]
        back_raw = content[back_index + len(back_token) : end_index]
        front = front_raw.strip()
        back = back_raw.strip()

        if front and back:
            match = _NON_WHITESPACE_RE.search(front_raw)
            position = front_start + match.start() if match else start_index
            cards.append(
                FlashcardDefinition(
                    front=front,
                    back=back,
                    line_number=_line_number_at(content, position),
                )
            )
        else:
            logger.debug(
                "empty_flashcard_skipped",
                line=_line_number_at(content, start_index),
            )

        search_index = end_index + len(end_token)

    return cards
