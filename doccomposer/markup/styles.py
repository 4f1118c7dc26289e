"""Formatting toolbar actions: wrap a buffer selection in style tags."""

from doccomposer.buffer import TextBuffer
from doccomposer.config import ComposerConfig
from doccomposer.markup.tokens import StyleKind


def style_tags(style: StyleKind, size: int | None = None) -> tuple[str, str]:
    """Return the ``(opening, closing)`` tag pair for ``style``."""
    if style is StyleKind.SIZE:
        if size is None:
            raise ValueError("A size is required for SIZE spans")
        return f"[[SIZE={size}]]", "[[/SIZE]]"
    return f"[[{style.value}]]", f"[[/{style.value}]]"


def apply_style(
    buffer: TextBuffer,
    start: int,
    end: int,
    style: StyleKind,
    size: int | None = None,
    config: ComposerConfig | None = None,
) -> None:
    """Wrap ``[start, end)`` with the tags for ``style``.

    With an empty selection both tags are inserted and the cursor is left
    between them, ready for typing. Otherwise the cursor moves after the
    closing tag. Sizes outside the configured font bounds are rejected.

    Raises:
        ValueError: For a missing or out-of-bounds size.
        BufferRangeError: If the selection is outside the buffer.
    """
    if start > end:
        start, end = end, start
    if style is StyleKind.SIZE and size is not None:
        config = config or ComposerConfig()
        if not config.min_font_size <= size <= config.max_font_size:
            raise ValueError(f"Font size must be between {config.min_font_size} and {config.max_font_size}")
    opening, closing = style_tags(style, size)
    selected = buffer.read(start, end)
    buffer.replace_range(start, end, f"{opening}{selected}{closing}")
    if start == end:
        buffer.set_cursor(start + len(opening))
