"""Mention session state machine.

The session is an immutable value owned by the host editor (through
:class:`~doccomposer.engine.MentionEngine`). Every transition is a pure
function returning a new :class:`MentionSession`; nothing here touches the
buffer or the lookup gateway.

**Modes and transitions:**

1. ``IDLE`` → ``COMMAND_MENU`` on a bare ``@``.
2. ``IDLE``/``COMMAND_MENU`` → ``ENTITY_SEARCH`` when a command is
   recognized; ``trigger_offset`` is fixed here.
3. ``ENTITY_SEARCH`` (single) → ``FIELD_SELECT`` when a candidate is picked.
4. ``ENTITY_SEARCH`` (multi): picks toggle membership and the query resets;
   ``finish_selection`` moves to ``FIELD_SELECT``.
5. ``FIELD_SELECT`` → ``IDLE`` on commit (the engine serializes and splices).
6. Any mode → ``IDLE`` on cancel.
"""

from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field, model_validator

from doccomposer.commands import Command
from doccomposer.config import DEFAULT_MAX_FIELDS
from doccomposer.entity import EntityRecord
from doccomposer.errors import FieldLimitError
from doccomposer.fields import FieldCatalog, FieldKey
from doccomposer.scanner import TriggerMatch


class SessionMode(str, Enum):
    IDLE = "idle"
    COMMAND_MENU = "command_menu"
    ENTITY_SEARCH = "entity_search"
    FIELD_SELECT = "field_select"


class MentionSession(BaseModel):
    """Current interaction mode and selection state of the mention popup.

    The popup UI renders directly from this value: the menu from
    ``menu_commands``, the result list from ``candidates`` (with ``loading``
    and ``searched`` distinguishing "searching" from "no results"), the
    field checklist from ``selected_fields``.
    """

    model_config = {"frozen": True}

    mode: SessionMode = SessionMode.IDLE
    multi_select: bool = False
    command: Command | None = None
    query: str = ""
    candidates: tuple[EntityRecord, ...] = ()
    selected_entities: tuple[EntityRecord, ...] = ()
    selected_fields: tuple[FieldKey, ...] = ()
    highlight_index: int = Field(default=0, ge=0)
    trigger_offset: int = Field(default=-1, description="Offset of the trigger character the directive replaces")
    span_end: int = Field(default=-1, description="End of the trigger span in the buffer")
    query_offset: int = Field(default=-1, description="Offset where the typed query starts")
    menu_commands: tuple[Command, ...] = ()
    loading: bool = False
    search_generation: int = Field(default=0, ge=0)
    searched: bool = False

    @model_validator(mode="after")
    def idle_session_is_cleared(self) -> "MentionSession":
        if self.mode is SessionMode.IDLE:
            for name, field_info in type(self).model_fields.items():
                if name != "mode" and getattr(self, name) != field_info.get_default(call_default_factory=True):
                    raise ValueError(f"Idle session must have default {name}")
        return self

    @property
    def is_idle(self) -> bool:
        return self.mode is SessionMode.IDLE

    @property
    def active_items(self) -> tuple:
        """The list keyboard navigation moves through in the current mode."""
        if self.mode is SessionMode.COMMAND_MENU:
            return self.menu_commands
        if self.mode is SessionMode.ENTITY_SEARCH:
            return self.candidates
        return ()

    @property
    def highlighted(self) -> Command | EntityRecord | None:
        items = self.active_items
        if 0 <= self.highlight_index < len(items):
            return items[self.highlight_index]
        return None

    @property
    def no_results(self) -> bool:
        """True once a search completed with nothing to show."""
        return self.mode is SessionMode.ENTITY_SEARCH and self.searched and not self.loading and not self.candidates

    @property
    def preview_entity(self) -> EntityRecord | None:
        """Record whose values the field checklist previews."""
        return self.selected_entities[0] if self.selected_entities else None

    def is_selected(self, record: EntityRecord) -> bool:
        return any(selected.id == record.id for selected in self.selected_entities)


def idle() -> MentionSession:
    return MentionSession()


def cancel(session: MentionSession) -> MentionSession:
    """Escape, focus loss or an invalidated trigger: back to idle."""
    return idle()


def open_menu(match: TriggerMatch) -> MentionSession:
    """Show the (possibly filtered) command menu for ``match``."""
    return MentionSession(
        mode=SessionMode.COMMAND_MENU,
        trigger_offset=match.trigger_offset,
        span_end=match.cursor,
        menu_commands=match.menu_commands,
    )


def start_search(match: TriggerMatch) -> MentionSession:
    """Enter entity search for the command recognized in ``match``."""
    if match.command is None:
        raise ValueError("start_search needs a match with a recognized command")
    return MentionSession(
        mode=SessionMode.ENTITY_SEARCH,
        multi_select=match.command.multi_select,
        command=match.command,
        query=match.query,
        trigger_offset=match.trigger_offset,
        span_end=match.cursor,
        query_offset=match.query_offset,
    )


def update_query(session: MentionSession, match: TriggerMatch) -> MentionSession:
    """Follow further typing inside the trigger span of an ongoing search."""
    update: dict = {"span_end": match.cursor, "query_offset": match.query_offset}
    if match.query != session.query:
        update.update(query=match.query, highlight_index=0)
    return session.model_copy(update=update)


def extend_span(session: MentionSession, match: TriggerMatch) -> MentionSession:
    return session.model_copy(update={"span_end": match.cursor})


def move_highlight(session: MentionSession, delta: int) -> MentionSession:
    """Move the keyboard highlight, clamped to the active list."""
    items = session.active_items
    if not items:
        return session
    index = min(max(session.highlight_index + delta, 0), len(items) - 1)
    if index == session.highlight_index:
        return session
    return session.model_copy(update={"highlight_index": index})


def begin_lookup(session: MentionSession, generation: int) -> MentionSession:
    """Record that the lookup with ``generation`` is now the one to wait for."""
    if session.mode is not SessionMode.ENTITY_SEARCH:
        return session
    return session.model_copy(update={"loading": True, "search_generation": generation})


def apply_candidates(session: MentionSession, generation: int, records: Sequence[EntityRecord]) -> MentionSession:
    """Replace the candidate list with a lookup result.

    Results for any generation other than the one the session waits for,
    or arriving after the session left entity search, are dropped and the
    session is returned unchanged.
    """
    if session.mode is not SessionMode.ENTITY_SEARCH or generation != session.search_generation:
        return session
    return session.model_copy(
        update={"candidates": tuple(records), "loading": False, "searched": True, "highlight_index": 0}
    )


def pick_candidate(session: MentionSession, record: EntityRecord) -> MentionSession:
    """Pick ``record`` from the candidate list.

    In single mode the record becomes the sole selection and the session
    moves to field selection. In multi mode the record's membership is
    toggled and a fresh search begins: the query and candidates are reset
    and the span shrinks back to the command word, since the caller removes
    the typed query from the buffer.
    """
    if session.mode is not SessionMode.ENTITY_SEARCH:
        return session
    if not session.multi_select:
        return session.model_copy(
            update={
                "mode": SessionMode.FIELD_SELECT,
                "selected_entities": (record,),
                "candidates": (),
                "highlight_index": 0,
                "loading": False,
                "searched": False,
            }
        )
    if session.is_selected(record):
        selection = tuple(selected for selected in session.selected_entities if selected.id != record.id)
    else:
        selection = session.selected_entities + (record,)
    return session.model_copy(
        update={
            "selected_entities": selection,
            "query": "",
            "candidates": (),
            "highlight_index": 0,
            "loading": False,
            "searched": False,
            "span_end": session.query_offset,
        }
    )


def finish_selection(session: MentionSession) -> MentionSession:
    """Leave multi-select search for field selection, keeping every pick."""
    if session.mode is not SessionMode.ENTITY_SEARCH or not session.multi_select or not session.selected_entities:
        return session
    return session.model_copy(
        update={
            "mode": SessionMode.FIELD_SELECT,
            "candidates": (),
            "highlight_index": 0,
            "loading": False,
            "searched": False,
        }
    )


def toggle_field(
    session: MentionSession,
    key: FieldKey,
    catalog: FieldCatalog,
    max_fields: int = DEFAULT_MAX_FIELDS,
) -> MentionSession:
    """Add ``key`` to the selected fields, or remove it if already selected.

    Raises:
        UnknownFieldError: If ``key`` is not in ``catalog``.
        FieldLimitError: If adding would exceed ``max_fields`` (itself capped
            at ``DEFAULT_MAX_FIELDS``); the selection is left as it was.
    """
    if session.mode is not SessionMode.FIELD_SELECT:
        return session
    limit = min(max_fields, DEFAULT_MAX_FIELDS)
    field_key = catalog.get(key).key
    if field_key in session.selected_fields:
        fields = tuple(selected for selected in session.selected_fields if selected != field_key)
    elif len(session.selected_fields) >= limit:
        raise FieldLimitError(limit)
    else:
        fields = session.selected_fields + (field_key,)
    return session.model_copy(update={"selected_fields": fields})
