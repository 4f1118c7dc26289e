"""Two-pass parser for the inline markup format.

Pass 1 (:func:`tokenize`) splits the buffer into text segments and
``[[...]]`` regions: non-greedy, non-overlapping, never nested (the last
``[[`` before a ``]]`` opens the region), never crossing a line
break. Pass 2 (:func:`classify` and :func:`parse`) decides what each region
is and pairs style tags:

* ``[[TABLO:COLS=... # ROWS=...]]`` becomes a :class:`TableDirective`;
  a directive missing either part stays literal text.
* ``[[B]]``, ``[[I]]``, ``[[U]]``, ``[[SIZE=n]]`` and their closing tags
  are style tags. An opening tag pairs with the next closing tag of the
  same kind inside the region being parsed; the pair becomes a
  :class:`StyleSpan` whose children are parsed recursively from the inner
  text. Tags left without a partner (unbalanced, or crossing the boundary
  of an enclosing span) degrade to literal text.
* Any other region is literal text.

Parsing never raises and keeps no state between calls.
"""

import re
from typing import NamedTuple, Sequence

from doccomposer.markup.serializer import CELL_SEPARATOR, ROW_SEPARATOR
from doccomposer.markup.tokens import MarkupToken, PlainText, StyleKind, StyleSpan, TableDirective

# the body neither starts with "[" nor contains "[["
REGION_PATTERN = re.compile(r"\[\[(?!\[)((?:(?!\[\[).)*?)\]\]")
TABLE_PATTERN = re.compile(r"^TABLO:\s*COLS=(?P<cols>.*?)\s+#\s+ROWS=(?P<rows>.*)$")
STYLE_TAG_PATTERN = re.compile(r"^(?P<closing>/?)(?P<kind>B|I|U)$")
SIZE_OPEN_PATTERN = re.compile(r"^SIZE=(?P<size>\d+)$")
SIZE_CLOSE = "/SIZE"


class Segment(NamedTuple):
    """A pass-1 piece of the buffer; ``body`` is None for plain text."""

    start: int
    end: int
    body: str | None = None


class StyleTag(NamedTuple):
    kind: StyleKind
    closing: bool
    start: int
    end: int
    size: int | None = None


def tokenize(content: str) -> list[Segment]:
    """Split ``content`` into text segments and ``[[...]]`` regions."""
    segments: list[Segment] = []
    position = 0
    for match in REGION_PATTERN.finditer(content):
        if match.start() > position:
            segments.append(Segment(position, match.start()))
        segments.append(Segment(match.start(), match.end(), match.group(1)))
        position = match.end()
    if position < len(content):
        segments.append(Segment(position, len(content)))
    return segments


def parse_table_body(body: str) -> tuple[tuple[str, ...], tuple[tuple[str, ...], ...]] | None:
    """Return ``(headers, rows)`` for a ``TABLO:`` body, or None if malformed."""
    match = TABLE_PATTERN.match(body)
    if match is None:
        return None
    cols = match.group("cols")
    if not cols:
        return None
    headers = tuple(cols.split(CELL_SEPARATOR))
    rows_part = match.group("rows")
    rows = tuple(tuple(row.split(CELL_SEPARATOR)) for row in rows_part.split(ROW_SEPARATOR)) if rows_part else ()
    return headers, rows


def parse_style_tag(body: str, start: int, end: int) -> StyleTag | None:
    match = STYLE_TAG_PATTERN.match(body)
    if match is not None:
        return StyleTag(StyleKind(match.group("kind")), bool(match.group("closing")), start, end)
    match = SIZE_OPEN_PATTERN.match(body)
    if match is not None:
        return StyleTag(StyleKind.SIZE, False, start, end, int(match.group("size")))
    if body == SIZE_CLOSE:
        return StyleTag(StyleKind.SIZE, True, start, end)
    return None


def classify(segment: Segment) -> Segment | StyleTag | TableDirective:
    """Classify a pass-1 segment; unrecognized regions come back as text."""
    if segment.body is None:
        return segment
    parsed = parse_table_body(segment.body)
    if parsed is not None:
        headers, rows = parsed
        return TableDirective(headers=headers, rows=rows, start=segment.start, end=segment.end)
    tag = parse_style_tag(segment.body, segment.start, segment.end)
    if tag is not None:
        return tag
    return Segment(segment.start, segment.end)


def _append_text(tokens: list, content: str, start: int, end: int) -> None:
    if start == end:
        return
    if tokens and isinstance(tokens[-1], PlainText) and tokens[-1].end == start:
        previous = tokens.pop()
        start = previous.start
    tokens.append(PlainText(text=content[start:end], start=start, end=end))


def _build(content: str, items: Sequence[Segment | StyleTag | TableDirective], lo: int, hi: int) -> list:
    tokens: list = []
    index = lo
    while index < hi:
        item = items[index]
        if isinstance(item, TableDirective):
            tokens.append(item)
        elif isinstance(item, StyleTag) and not item.closing:
            partner = next(
                (
                    j
                    for j in range(index + 1, hi)
                    if isinstance(items[j], StyleTag) and items[j].closing and items[j].kind is item.kind
                ),
                None,
            )
            if partner is None:
                _append_text(tokens, content, item.start, item.end)
            else:
                close = items[partner]
                tokens.append(
                    StyleSpan(
                        style=item.kind,
                        size=item.size,
                        start=item.start,
                        end=close.end,
                        inner_start=item.end,
                        inner_end=close.start,
                        children=tuple(_build(content, items, index + 1, partner)),
                    )
                )
                index = partner
        else:
            _append_text(tokens, content, item.start, item.end)
        index += 1
    return tokens


def parse(content: str) -> tuple[MarkupToken, ...]:
    """Parse ``content`` into an ordered sequence of markup tokens.

    Example:
        ```python
        tokens = parse("Hello [[B]]world[[/B]]!")
        # PlainText("Hello "), StyleSpan(BOLD, children=(PlainText("world"),)), PlainText("!")
        ```
    """
    items = [classify(segment) for segment in tokenize(content)]
    return tuple(_build(content, items, 0, len(items)))
