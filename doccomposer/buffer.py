"""Plain-text document buffer shared between the host editor and the composer.

The host editor owns the buffer and is its only broad writer. The composer
reads slices and, when a mention is committed or a style is applied, splices
text in through :meth:`TextBuffer.replace_range`; it never overwrites the
whole content.
"""

from doccomposer.errors import BufferRangeError


class TextBuffer:
    """Document content plus a cursor offset.

    Example:
        ```python
        buffer = TextBuffer("Sayın @uye", cursor=10)
        buffer.replace_range(6, 10, "[[TABLO:COLS=Ad # ROWS=Ahmet]]")
        assert buffer.cursor == len(buffer.content)
        ```
    """

    def __init__(self, content: str = "", cursor: int | None = None) -> None:
        self._content = content
        self._cursor = len(content) if cursor is None else cursor
        self._check_offset(self._cursor)
        self.version = 0

    @property
    def content(self) -> str:
        return self._content

    @property
    def cursor(self) -> int:
        return self._cursor

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset > len(self._content):
            raise BufferRangeError(f"Offset {offset} outside buffer of length {len(self._content)}")

    def _check_range(self, start: int, end: int) -> None:
        self._check_offset(start)
        self._check_offset(end)
        if end < start:
            raise BufferRangeError(f"Range end {end} precedes start {start}")

    def read(self, start: int, end: int) -> str:
        """Return the text in ``[start, end)``."""
        self._check_range(start, end)
        return self._content[start:end]

    def replace_range(self, start: int, end: int, text: str) -> None:
        """Replace ``[start, end)`` with ``text`` and move the cursor after it.

        Raises:
            BufferRangeError: If the range is reversed or out of bounds.
        """
        self._check_range(start, end)
        self._content = self._content[:start] + text + self._content[end:]
        self._cursor = start + len(text)
        self.version += 1

    def set_cursor(self, offset: int) -> None:
        self._check_offset(offset)
        self._cursor = offset

    def load(self, content: str, cursor: int | None = None) -> None:
        """Replace the whole content; reserved for the host editor."""
        self._content = content
        self._cursor = len(content) if cursor is None else cursor
        self._check_offset(self._cursor)
        self.version += 1

    def type_text(self, text: str) -> None:
        """Insert ``text`` at the cursor, as a keystroke would."""
        self.replace_range(self._cursor, self._cursor, text)

    def __repr__(self) -> str:
        return f"TextBuffer(content={self._content!r}, cursor={self._cursor})"
