"""Markup tokens produced by the parser for each render pass.

Tokens are recomputed from the buffer on every render and never persisted.
All offsets are buffer offsets, so a token can always be traced back to the
text it came from.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class StyleKind(str, Enum):
    BOLD = "B"
    ITALIC = "I"
    UNDERLINE = "U"
    SIZE = "SIZE"


def escape_display(text: str) -> str:
    """Presentation-only escaping of ``<`` and ``>``; not a security boundary."""
    return text.replace("<", "&lt;").replace(">", "&gt;")


class PlainText(BaseModel, frozen=True):
    token_type: Literal["text"] = "text"
    text: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @property
    def display_text(self) -> str:
        return escape_display(self.text)


class StyleSpan(BaseModel, frozen=True):
    """A paired style region such as ``[[B]]...[[/B]]``.

    ``start``/``end`` cover the tags, ``inner_start``/``inner_end`` the text
    between them; ``children`` is the parse of that inner text.
    """

    token_type: Literal["style"] = "style"
    style: StyleKind
    size: int | None = Field(default=None, description="Font size for SIZE spans, as written")
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    inner_start: int = Field(ge=0)
    inner_end: int = Field(ge=0)
    children: tuple["MarkupToken", ...] = ()

    @property
    def inner_range(self) -> tuple[int, int]:
        return (self.inner_start, self.inner_end)

    @property
    def text(self) -> str:
        """Concatenated plain text of the span's children."""
        return "".join(_flatten_text(child) for child in self.children)


class TableDirective(BaseModel, frozen=True):
    token_type: Literal["table"] = "table"
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    start: int = Field(ge=0)
    end: int = Field(ge=0)


MarkupToken = Annotated[Union[PlainText, StyleSpan, TableDirective], Field(discriminator="token_type")]

StyleSpan.model_rebuild()


def _flatten_text(token: "PlainText | StyleSpan | TableDirective") -> str:
    if isinstance(token, PlainText):
        return token.text
    if isinstance(token, StyleSpan):
        return token.text
    return ""
