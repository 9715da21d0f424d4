"""Convert card Markdown to HTML for Anki.

Uses mistune for Markdown parsing, Pygments for syntax highlighting of
fenced code and nh3 for HTML sanitization.
"""

import html
import re

import mistune
import nh3
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from obsidian_flashcard_sync.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_TAGS = {
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "s",
    "del",
    "mark",
    "code",
    "pre",
    "ul",
    "ol",
    "li",
    "input",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
    "blockquote",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "a",
    "img",
    "div",
    "span",
    "sup",
    "sub",
    "hr",
}

_GLOBAL_ATTRIBUTES = {"class", "id", "style"}

# "rel" is set through nh3's link_rel parameter
_TAG_SPECIFIC_ATTRIBUTES = {
    "a": {"href", "title", "target"},
    "img": {"src", "alt", "title", "width", "height"},
    "input": {"type", "checked", "disabled"},
    "td": {"colspan", "rowspan", "align"},
    "th": {"colspan", "rowspan", "align"},
}

ALLOWED_ATTRIBUTES = {
    tag: _GLOBAL_ATTRIBUTES | _TAG_SPECIFIC_ATTRIBUTES.get(tag, set())
    for tag in ALLOWED_TAGS
}

# [[target]] / [[target|alias]] / [[target#heading]]
_WIKILINK_RE = re.compile(r"!?\[\[([^\]|#]+)(?:#[^\]|]*)?(?:\|([^\]]+))?\]\]")


class AnkiHighlightRenderer(mistune.HTMLRenderer):
    """Mistune renderer with Pygments syntax highlighting for fenced code."""

    def __init__(self, escape: bool = True) -> None:
        super().__init__(escape=escape)
        self._formatter = HtmlFormatter(cssclass="codehilite", nowrap=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        lang = info.split()[0] if info and info.strip() else None
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                highlighted: str = highlight(code, lexer, self._formatter)
                return highlighted

        lang_class = f"language-{lang}" if lang else "language-text"
        return f'<pre><code class="{lang_class}">{html.escape(code.strip())}</code></pre>\n'


def _create_mistune_converter() -> mistune.Markdown:
    return mistune.create_markdown(
        # Raw HTML in cards is kept here and filtered by sanitize_html
        renderer=AnkiHighlightRenderer(escape=False),
        plugins=["strikethrough", "mark", "table", "task_lists"],
    )


def _replace_wikilinks(md_content: str) -> str:
    """Show Obsidian wiki-links as their alias (or target) text."""
    return _WIKILINK_RE.sub(
        lambda m: (m.group(2) or m.group(1)).strip(), md_content
    )


def sanitize_html(raw_html: str) -> str:
    """
    Sanitize HTML using nh3.

    Args:
        raw_html: Raw HTML string

    Returns:
        Sanitized HTML string
    """
    if not raw_html:
        return raw_html
    return nh3.clean(
        raw_html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        link_rel="noopener noreferrer",
    )


def convert_markdown_to_html(md_content: str, sanitize: bool = True) -> str:
    """
    Convert Markdown content to HTML.

    Args:
        md_content: Markdown-formatted text
        sanitize: Whether to sanitize HTML output (default True)

    Returns:
        HTML-formatted text suitable for Anki
    """
    if not md_content or not md_content.strip():
        return ""

    converter = _create_mistune_converter()
    result = converter(_replace_wikilinks(md_content))
    rendered = result if isinstance(result, str) else str(result)

    if sanitize:
        rendered = sanitize_html(rendered)
    return rendered.strip()


def get_pygments_css(style: str = "default") -> str:
    """CSS for the highlighted code blocks, for pasting into the note type styling."""
    formatter = HtmlFormatter(style=style, cssclass="codehilite")
    result: str = formatter.get_style_defs()
    return result
