"""Host editor surface of the mention engine.

:class:`MentionEngine` is what the composer's text control talks to. It
connects the pieces:

- **Trigger scanner**: run on every buffer change.
- **Session state machine**: pure transitions, the current value exposed
  read-only through :attr:`MentionEngine.session` for the popup to render.
- **Debounced lookup**: issued whenever the search query changes.
- **Serializer**: writes the directive into the buffer on commit.

All handlers run synchronously on the event loop thread. None of them
raise during normal operation: lookup failures become empty results, an
invalid trigger closes the popup, a malformed buffer state cancels the
session. The one condition reported back to the user is the field cap,
through the ``False`` return of :meth:`on_field_toggled` and
:attr:`last_notice`.
"""

import logging
from typing import Sequence

from doccomposer.buffer import TextBuffer
from doccomposer.commands import DEFAULT_COMMANDS, Command
from doccomposer.config import ComposerConfig
from doccomposer.entity import EntityRecord
from doccomposer.errors import ComposerError, FieldLimitError, UnknownFieldError
from doccomposer.fields import FieldCatalog, FieldKey
from doccomposer.logging import PprintLogger
from doccomposer.lookup.debounce import DebouncedLookup
from doccomposer.lookup.interfaces import EntityLookupInterface
from doccomposer.markup.render import render, render_html
from doccomposer.markup.serializer import serialize
from doccomposer.markup.tokens import MarkupToken
from doccomposer.scanner import TRIGGER_CHAR, TriggerOutcome, scan
from doccomposer import session as transitions
from doccomposer.session import MentionSession, SessionMode

logger = PprintLogger(logging.getLogger(__name__))

KEY_UP = "ArrowUp"
KEY_DOWN = "ArrowDown"
KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"

NO_FIELDS_NOTICE = "Select at least one field for the table"


class MentionEngine:
    """Inline mention engine bound to one host-owned text buffer.

    Args:
        buffer: The host editor's buffer. The engine only writes to it
            through :meth:`TextBuffer.replace_range`.
        lookup: Gateway used for entity search.
        catalog: Selectable fields; defaults to ``config.fields``.
        config: Debounce, limits and font bounds.
        commands: Command table in menu order.

    Example:
        ```python
        engine = MentionEngine(buffer, InMemoryEntityLookup(members))
        buffer.type_text("@uye ahmet")
        engine.on_buffer_changed(buffer.content, buffer.cursor)
        await engine.wait_for_lookup()
        engine.on_key_down("Enter")              # pick the highlighted member
        engine.on_field_toggled("first_name")
        engine.on_commit()                       # directive spliced into buffer
        ```
    """

    def __init__(
        self,
        buffer: TextBuffer,
        lookup: EntityLookupInterface,
        catalog: FieldCatalog | None = None,
        config: ComposerConfig | None = None,
        commands: Sequence[Command] = DEFAULT_COMMANDS,
    ) -> None:
        self.config = config or ComposerConfig()
        self.catalog = catalog if catalog is not None else self.config.fields
        self.buffer = buffer
        self.commands = tuple(commands)
        self.last_notice: str | None = None
        self._session = transitions.idle()
        self._lookup = DebouncedLookup(
            lookup,
            on_results=self._receive_results,
            delay=self.config.debounce_seconds,
            limit=self.config.search_limit,
        )

    @property
    def session(self) -> MentionSession:
        return self._session

    def _set(self, new: MentionSession, reason: str) -> None:
        old = self._session
        if new == old:
            return
        if old.mode is SessionMode.ENTITY_SEARCH and new.mode is not SessionMode.ENTITY_SEARCH:
            self._lookup.cancel()
        self._session = new
        if old.mode is not new.mode:
            logger.debug(f"Mention session {old.mode.value} -> {new.mode.value} ({reason})", pprint=False)
        logger.debug(new)

    def _span_is_current(self, session: MentionSession) -> bool:
        content = self.buffer.content
        return (
            0 <= session.trigger_offset < session.span_end <= len(content)
            and content[session.trigger_offset] == TRIGGER_CHAR
        )

    def _request_lookup(self) -> None:
        current = self._session
        if current.mode is not SessionMode.ENTITY_SEARCH:
            return
        if len(current.query) < self.config.min_query_length:
            self._lookup.cancel()
            self._set(current.model_copy(update={"loading": False}), "query too short")
            return
        try:
            generation = self._lookup.schedule(current.query)
        except RuntimeError as e:
            logger.warning(f"Entity lookup not scheduled, no running event loop: {e}", pprint=False)
            return
        self._set(transitions.begin_lookup(current, generation), "lookup scheduled")

    def _receive_results(self, generation: int, records: Sequence[EntityRecord]) -> None:
        updated = transitions.apply_candidates(self._session, generation, records)
        if updated is self._session:
            logger.debug(f"Ignoring lookup results for generation {generation}", pprint=False)
            return
        self._set(updated, f"{len(records)} candidates")

    # -- host editor events -------------------------------------------------

    def on_buffer_changed(self, content: str, cursor: int) -> None:
        """Re-scan after any buffer edit and move the session accordingly."""
        match = scan(content, cursor, self.commands)
        current = self._session
        if not current.is_idle and match.trigger_offset != current.trigger_offset:
            self._set(transitions.cancel(current), "edit outside the trigger span")
            current = self._session

        if not match.keeps_popup_open:
            self._set(transitions.cancel(current), f"trigger {match.outcome.value}")
            return
        if current.mode is SessionMode.FIELD_SELECT:
            self._set(transitions.extend_span(current, match), "typing during field selection")
            return
        if match.outcome in (TriggerOutcome.MENU, TriggerOutcome.FILTER):
            self._set(transitions.open_menu(match), "command menu")
            return

        if current.mode is SessionMode.ENTITY_SEARCH and current.command == match.command:
            updated = transitions.update_query(current, match)
            self._set(updated, "query typed")
            if updated.query != current.query:
                self._request_lookup()
            return
        self._set(transitions.start_search(match), f"command {match.command.trigger}")
        self._request_lookup()

    def on_key_down(self, key: str) -> bool:
        """Handle navigation keys while the popup is open.

        Returns:
            True if the key was consumed and the host should not apply its
            default behaviour (moving the caret, inserting a newline).
        """
        current = self._session
        if current.is_idle:
            return False
        if key == KEY_ESCAPE:
            self.on_cancel()
            return True
        if key in (KEY_UP, KEY_DOWN):
            if not current.active_items:
                return False
            self._set(transitions.move_highlight(current, -1 if key == KEY_UP else 1), key)
            return True
        if key == KEY_ENTER:
            if current.mode is SessionMode.FIELD_SELECT:
                self.on_commit()
                return True
            highlighted = current.highlighted
            if isinstance(highlighted, Command):
                self.on_command_picked(highlighted)
                return True
            if isinstance(highlighted, EntityRecord):
                self.on_candidate_picked(highlighted)
                return True
        return False

    def on_command_picked(self, command: Command) -> None:
        """Choose a command from the menu; the buffer is rewritten to ``@<trigger>``."""
        current = self._session
        if current.mode is not SessionMode.COMMAND_MENU:
            return
        if not self._span_is_current(current):
            self._set(transitions.cancel(current), "trigger span no longer in buffer")
            return
        self.buffer.replace_range(current.trigger_offset + 1, current.span_end, command.trigger)
        match = scan(self.buffer.content, self.buffer.cursor, self.commands)
        if match.outcome is not TriggerOutcome.COMMAND or match.trigger_offset != current.trigger_offset:
            self._set(transitions.cancel(current), "command not recognized after rewrite")
            return
        self._set(transitions.start_search(match), f"command {command.trigger} picked")
        self._request_lookup()

    def on_candidate_picked(self, entity: EntityRecord) -> None:
        """Pick a search result (click or Enter on the highlighted row)."""
        current = self._session
        if current.mode is not SessionMode.ENTITY_SEARCH:
            return
        updated = transitions.pick_candidate(current, entity)
        if not current.multi_select:
            self._set(updated, f"picked {entity.id}")
            return
        if self._span_is_current(current) and 0 <= current.query_offset < current.span_end:
            self.buffer.replace_range(current.query_offset, current.span_end, "")
        self._set(updated, f"toggled {entity.id}")
        self._request_lookup()

    def on_finish(self) -> None:
        """Finish a multi-select search and move on to field selection."""
        self._set(transitions.finish_selection(self._session), "selection finished")

    def on_field_toggled(self, field_key: FieldKey) -> bool:
        """Toggle a field in the table's column list.

        Returns:
            False if the toggle was rejected (field cap reached or unknown
            key); :attr:`last_notice` then holds the message to show.
        """
        current = self._session
        if current.mode is not SessionMode.FIELD_SELECT:
            return False
        try:
            updated = transitions.toggle_field(current, field_key, self.catalog, self.config.max_fields)
        except (FieldLimitError, UnknownFieldError) as e:
            self.last_notice = str(e)
            logger.info(f"Field toggle rejected: {e}", pprint=False)
            return False
        self.last_notice = None
        self._set(updated, f"field {field_key}")
        return True

    def on_commit(self) -> str | None:
        """Serialize the selection and splice it over the trigger span.

        Returns:
            The inserted directive, or None if nothing was committed.
        """
        current = self._session
        if current.mode is not SessionMode.FIELD_SELECT or not current.selected_entities:
            return None
        if not current.selected_fields:
            self.last_notice = NO_FIELDS_NOTICE
            return None
        if not self._span_is_current(current):
            self._set(transitions.cancel(current), "trigger span no longer in buffer")
            return None
        try:
            directive = serialize(current.selected_entities, current.selected_fields, self.catalog)
            self.buffer.replace_range(current.trigger_offset, current.span_end, directive)
        except (ComposerError, ValueError) as e:
            logger.warning(f"Could not insert table directive: {e}", pprint=False)
            self._set(transitions.cancel(current), "commit failed")
            return None
        self.last_notice = None
        self._set(transitions.idle(), "committed")
        return directive

    def on_cancel(self) -> None:
        """Escape or focus loss outside the popup."""
        self._set(transitions.cancel(self._session), "cancelled")

    # -- preview ------------------------------------------------------------

    def render(self, content: str) -> tuple[MarkupToken, ...]:
        return render(content)

    def render_html(self, content: str) -> str:
        return render_html(content, self.config)

    async def wait_for_lookup(self, flush: bool = False) -> None:
        """Wait for pending lookups to deliver; ``flush`` skips the debounce delay."""
        if flush:
            await self._lookup.flush()
        else:
            await self._lookup.wait_idle()
