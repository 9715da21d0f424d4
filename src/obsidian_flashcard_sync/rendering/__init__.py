"""Rendering of card Markdown into Anki field HTML."""

from .card_renderer import CardRenderer, FieldRenderer
from .markdown_converter import convert_markdown_to_html, sanitize_html

__all__ = ["CardRenderer", "FieldRenderer", "convert_markdown_to_html", "sanitize_html"]
