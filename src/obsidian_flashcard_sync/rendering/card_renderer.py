"""Build the Front/Back field HTML for a flashcard."""

import html
from typing import Protocol

from ..models import FlashcardDefinition
from .markdown_converter import convert_markdown_to_html


class FieldRenderer(Protocol):
    """Anything that can turn a card into its two Anki field payloads."""

    def front_field(
        self, card: FlashcardDefinition, breadcrumb: str, link: str
    ) -> str: ...

    def back_field(self, card: FlashcardDefinition, breadcrumb: str) -> str: ...


class CardRenderer:
    """Default renderer: Markdown content plus a breadcrumb and a link back."""

    def _breadcrumb_html(self, breadcrumb: str) -> str:
        return f'<div class="obsidian-anki-breadcrumb">{html.escape(breadcrumb)}</div>'

    def front_field(self, card: FlashcardDefinition, breadcrumb: str, link: str) -> str:
        rendered = convert_markdown_to_html(card.front)
        link_html = (
            f'<div class="obsidian-anki-link">'
            f'<a href="{html.escape(link)}">Open in Obsidian</a></div>'
        )
        return (
            f"{self._breadcrumb_html(breadcrumb)}{link_html}"
            f'<div class="obsidian-anki-front">{rendered}</div>'
        )

    def back_field(self, card: FlashcardDefinition, breadcrumb: str) -> str:
        rendered = convert_markdown_to_html(card.back)
        return (
            f"{self._breadcrumb_html(breadcrumb)}"
            f'<div class="obsidian-anki-back">{rendered}</div>'
        )
