"""Serialize an entity/field selection into an inline table directive.

Format::

    [[TABLO:COLS=Ad|Soyad # ROWS=Ahmet|Yılmaz;Mehmet|Demir]]

``|`` separates cells, ``;`` separates rows and `` # `` separates the header
part from the rows part. Those characters are stripped, not escaped, from
every header and cell before joining, so a value such as ``"A|B"`` is
written as ``"AB"``. The directive is plain text from the buffer's point of
view and is expanded by :mod:`doccomposer.markup.render` at preview time.
"""

import re
from typing import Sequence

from doccomposer.entity import MISSING_VALUE, EntityRecord
from doccomposer.fields import FieldCatalog, FieldKey

DIRECTIVE_OPEN = "[["
DIRECTIVE_CLOSE = "]]"
TABLE_KEYWORD = "TABLO:"
COLS_PREFIX = "COLS="
ROWS_PREFIX = "ROWS="
PART_SEPARATOR = " # "
CELL_SEPARATOR = "|"
ROW_SEPARATOR = ";"

_STRUCTURAL = str.maketrans("", "", "|#;]")
_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")
_OPEN_RUNS = re.compile(r"\[{2,}")


def clean_cell(value: str) -> str:
    """Strip the format's delimiter characters from a header or cell value.

    Line breaks collapse to a space, ``]`` is dropped and runs of ``[``
    shrink to one, since a directive cannot span lines or contain its own
    ``[[`` or ``]]``.
    """
    return _OPEN_RUNS.sub("[", _LINE_BREAKS.sub(" ", value).translate(_STRUCTURAL))


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Build a directive from already-resolved header and cell strings."""
    cols = CELL_SEPARATOR.join(clean_cell(header) for header in headers)
    body = ROW_SEPARATOR.join(CELL_SEPARATOR.join(clean_cell(cell) or MISSING_VALUE for cell in row) for row in rows)
    return f"{DIRECTIVE_OPEN}{TABLE_KEYWORD}{COLS_PREFIX}{cols}{PART_SEPARATOR}{ROWS_PREFIX}{body}{DIRECTIVE_CLOSE}"


def serialize(entities: Sequence[EntityRecord], fields: Sequence[FieldKey], catalog: FieldCatalog) -> str:
    """Serialize ``entities`` restricted to ``fields`` into a table directive.

    Args:
        entities: Rows, in order.
        fields: Columns, in order; labels come from ``catalog``.
        catalog: Field catalog used for labels and key validation.

    Returns:
        The directive string, ready to splice into the buffer.

    Raises:
        ValueError: If ``fields`` is empty.
        UnknownFieldError: If a field key is not in ``catalog``.
    """
    if not fields:
        raise ValueError("At least one field is required to build a table")
    headers = [catalog.label(key) for key in fields]
    rows = [[entity.checked_value(key, catalog) for key in fields] for entity in entities]
    return format_table(headers, rows)
