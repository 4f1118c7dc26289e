"""Preview rendering of parsed markup.

:func:`render_html` produces the markup the A4 preview pane displays:
escaped text, ``<br/>`` line breaks, styled spans, and directive tables
with inline styles matching the printed document. Pagination and layout
belong to the host. :func:`strip_formatting` and :func:`to_plain_text`
serve exports that cannot carry styling (SMS previews, CSV, plain text).
"""

import re
from typing import Iterable

from doccomposer.config import ComposerConfig
from doccomposer.markup.parser import parse
from doccomposer.markup.tokens import MarkupToken, PlainText, StyleKind, StyleSpan, TableDirective, escape_display

TABLE_STYLE = "width: 100%; border-collapse: collapse; margin: 1em 0; font-family: inherit; font-size: 10pt;"
HEADER_CELL_STYLE = "border: 1px solid #000; padding: 4px 8px; text-align: left; font-weight: bold;"
BODY_CELL_STYLE = "border: 1px solid #000; padding: 4px 8px; text-align: left;"

STYLE_TAG_PATTERN = re.compile(r"\[\[(?:/?[BIU]|SIZE=\d+|/SIZE)\]\]")
_DEFAULT_CONFIG = ComposerConfig()


def render(content: str) -> tuple[MarkupToken, ...]:
    """Parse ``content`` for the preview pane; a fresh token tree per call."""
    return parse(content)


def _text_html(token: PlainText) -> str:
    return token.display_text.replace("\n", "<br/>")


def _table_html(token: TableDirective) -> str:
    header_cells = "".join(f'<th style="{HEADER_CELL_STYLE}">{escape_display(h)}</th>' for h in token.headers)
    body_rows = "".join(
        "<tr>" + "".join(f'<td style="{BODY_CELL_STYLE}">{escape_display(cell)}</td>' for cell in row) + "</tr>"
        for row in token.rows
    )
    return f'<table style="{TABLE_STYLE}"><thead><tr>{header_cells}</tr></thead><tbody>{body_rows}</tbody></table>'


def _span_html(token: StyleSpan, config: ComposerConfig) -> str:
    inner = tokens_to_html(token.children, config)
    if token.style is StyleKind.BOLD:
        return f"<strong>{inner}</strong>"
    if token.style is StyleKind.ITALIC:
        return f"<em>{inner}</em>"
    if token.style is StyleKind.UNDERLINE:
        return f'<span style="text-decoration: underline;">{inner}</span>'
    size = config.clamp_font_size(token.size or config.min_font_size)
    return f'<span style="font-size: {size}pt;">{inner}</span>'


def tokens_to_html(tokens: Iterable[MarkupToken], config: ComposerConfig | None = None) -> str:
    config = config or _DEFAULT_CONFIG
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, PlainText):
            parts.append(_text_html(token))
        elif isinstance(token, StyleSpan):
            parts.append(_span_html(token, config))
        else:
            parts.append(_table_html(token))
    return "".join(parts)


def render_html(content: str, config: ComposerConfig | None = None) -> str:
    """Render document content as preview HTML.

    Args:
        content: Buffer content with inline markup.
        config: Supplies the font size bounds; defaults apply when omitted.
    """
    if not content:
        return ""
    return tokens_to_html(parse(content), config)


def strip_formatting(content: str) -> str:
    """Remove every style tag, keeping the text between them.

    Table directives are left untouched.
    """
    if not content:
        return ""
    return STYLE_TAG_PATTERN.sub("", content)


def _plain(token: MarkupToken) -> str:
    if isinstance(token, PlainText):
        return token.text
    if isinstance(token, StyleSpan):
        return "".join(_plain(child) for child in token.children)
    lines = ["\t".join(token.headers)] + ["\t".join(row) for row in token.rows]
    return "\n".join(lines)


def to_plain_text(content: str) -> str:
    """Flatten content to text: styles dropped, tables as tab-separated lines."""
    return "".join(_plain(token) for token in parse(content))
