"""Trigger scanner: find and classify the ``@`` span behind the cursor.

``scan`` is a pure function of ``(content, cursor)``; the engine calls it on
every buffer change and drives the mention session from the result. The
scan walks backward from the cursor to the nearest ``@`` on the same line,
splits the typed text into the command word (``prefix_text``) and whatever
follows the first whitespace (``tail_text``), then classifies it:

* ``MENU``: nothing typed after ``@``; open the command menu.
* ``COMMAND``: the prefix starts with a known command; the rest of the
  prefix plus the tail is the search query (``@uyetablo mehmet``).
* ``FILTER``: no command matches but some command trigger contains the
  prefix; keep the menu open, filtered.
* ``CLOSE``: a trigger span exists but matches nothing; close the popup.
* ``INACTIVE``: no usable ``@`` behind the cursor.
"""

from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field

from doccomposer.commands import DEFAULT_COMMANDS, Command, filter_commands, match_command

TRIGGER_CHAR = "@"


class TriggerOutcome(str, Enum):
    INACTIVE = "inactive"
    MENU = "menu"
    COMMAND = "command"
    FILTER = "filter"
    CLOSE = "close"


class TriggerMatch(BaseModel, frozen=True):
    """Result of scanning the buffer behind the cursor.

    Produced fresh on every buffer change and never persisted. Offsets are
    buffer offsets; ``trigger_offset`` points at the ``@`` itself.
    """

    trigger_offset: int = Field(default=-1, description="Offset of the trigger character, -1 when inactive")
    cursor: int = Field(default=0, ge=0, description="Cursor offset the scan started from")
    prefix_text: str = Field(default="", description="Command word typed after the trigger (no whitespace)")
    tail_text: str = Field(default="", description="Text after the first whitespace following the command word")
    is_active: bool = Field(default=False, description="Whether a trigger span was found behind the cursor")
    outcome: TriggerOutcome = TriggerOutcome.INACTIVE
    command: Command | None = None
    query: str = Field(default="", description="Search text following a recognized command")
    query_offset: int = Field(default=-1, description="Offset where the query text starts, -1 without a command")
    menu_commands: tuple[Command, ...] = Field(default=(), description="Commands to list in the menu")

    @property
    def keeps_popup_open(self) -> bool:
        return self.outcome in (TriggerOutcome.MENU, TriggerOutcome.COMMAND, TriggerOutcome.FILTER)


def _first_whitespace(text: str) -> int:
    for index, ch in enumerate(text):
        if ch.isspace():
            return index
    return -1


def scan(content: str, cursor: int, commands: Sequence[Command] = DEFAULT_COMMANDS) -> TriggerMatch:
    """Find the active trigger span ending at ``cursor`` and classify it.

    Args:
        content: Buffer content.
        cursor: Cursor offset; clamped into ``[0, len(content)]``.
        commands: Command table in menu order.

    Returns:
        A new :class:`TriggerMatch`. Calling ``scan`` twice with the same
        arguments yields equal results.
    """
    cursor = min(max(cursor, 0), len(content))
    inactive = TriggerMatch(cursor=cursor)

    line_start = content.rfind("\n", 0, cursor) + 1
    trigger_offset = content.rfind(TRIGGER_CHAR, line_start, cursor)
    if trigger_offset == -1:
        return inactive

    typed = content[trigger_offset + 1 : cursor]
    if typed[:1].isspace():
        return inactive

    split = _first_whitespace(typed)
    prefix = typed if split == -1 else typed[:split]
    tail = "" if split == -1 else typed[split:]
    found = dict(trigger_offset=trigger_offset, cursor=cursor, prefix_text=prefix, tail_text=tail, is_active=True)

    if not prefix:
        return TriggerMatch(**found, outcome=TriggerOutcome.MENU, menu_commands=tuple(commands))

    command = match_command(prefix, commands)
    if command is not None:
        query_offset = trigger_offset + 1 + len(command.trigger)
        return TriggerMatch(
            **found,
            outcome=TriggerOutcome.COMMAND,
            command=command,
            query=content[query_offset:cursor].strip(),
            query_offset=query_offset,
        )

    if tail:
        # whitespace after an unknown word ends the trigger
        return inactive

    filtered = filter_commands(prefix, commands)
    if filtered:
        return TriggerMatch(**found, outcome=TriggerOutcome.FILTER, menu_commands=filtered)
    return TriggerMatch(**found, outcome=TriggerOutcome.CLOSE)
