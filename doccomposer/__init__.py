"""
Document composer: inline mention engine and structured markup templating.

An author types ``@uye`` or ``@uyetablo`` in a plain-text document, searches
members, picks one or several of them and up to five fields, and the
selection is spliced back into the text as an inline directive:

    [[TABLO:COLS=Ad|Soyad # ROWS=Ahmet|Yılmaz;Mehmet|Demir]]

The preview renderer later expands directives and style spans
(``[[B]]...[[/B]]``, ``[[SIZE=12]]...[[/SIZE]]``) for display.

Typical wiring by a host editor:

    from doccomposer import MentionEngine, TextBuffer, load_composer_config
    from doccomposer.lookup import PostgrestEntityLookup

    config = load_composer_config()
    buffer = TextBuffer()
    engine = MentionEngine(buffer, PostgrestEntityLookup.from_config(url, api_key, config), config=config)
    # on every edit:     engine.on_buffer_changed(buffer.content, buffer.cursor)
    # on key presses:    engine.on_key_down(key)
    # popup rendering:   engine.session
    # preview pane:      engine.render_html(buffer.content)
"""

from doccomposer.buffer import TextBuffer
from doccomposer.commands import DEFAULT_COMMANDS, Command
from doccomposer.config import ComposerConfig, load_composer_config
from doccomposer.engine import MentionEngine
from doccomposer.entity import EntityRecord
from doccomposer.errors import (
    BufferRangeError,
    ComposerError,
    FieldLimitError,
    LookupFailedError,
    UnknownFieldError,
)
from doccomposer.fields import DEFAULT_MEMBER_FIELDS, FieldCatalog, FieldDefinition, MemberField
from doccomposer.markup import parse, render, render_html, serialize, strip_formatting
from doccomposer.scanner import TriggerMatch, TriggerOutcome, scan
from doccomposer.session import MentionSession, SessionMode

__all__ = [
    "TextBuffer",
    "Command",
    "DEFAULT_COMMANDS",
    "ComposerConfig",
    "load_composer_config",
    "MentionEngine",
    "EntityRecord",
    "ComposerError",
    "FieldLimitError",
    "UnknownFieldError",
    "BufferRangeError",
    "LookupFailedError",
    "FieldCatalog",
    "FieldDefinition",
    "MemberField",
    "DEFAULT_MEMBER_FIELDS",
    "TriggerMatch",
    "TriggerOutcome",
    "scan",
    "MentionSession",
    "SessionMode",
    "parse",
    "serialize",
    "render",
    "render_html",
    "strip_formatting",
]

__version__ = "0.1.0"
