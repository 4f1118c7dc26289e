"""Test fixtures for the document composer.

This module provides:
- A small member list with Turkish names (dotted/dotless i, diacritics)
- Lookup gateways: in-memory, always failing, and one whose responses are
  released manually so tests can reorder them
- An engine factory with a zero debounce delay, plus a helper that types
  text into the buffer and notifies the engine like a host editor would
"""

import asyncio
from typing import Callable

import pytest

from doccomposer.buffer import TextBuffer
from doccomposer.config import ComposerConfig
from doccomposer.engine import MentionEngine
from doccomposer.entity import EntityRecord
from doccomposer.errors import LookupFailedError
from doccomposer.fields import DEFAULT_MEMBER_FIELDS, FieldCatalog
from doccomposer.lookup.interfaces import EntityLookupInterface
from doccomposer.lookup.memory import InMemoryEntityLookup


def make_member(member_id: str, first_name: str, last_name: str, **extra: str) -> EntityRecord:
    fields = {"first_name": first_name, "last_name": last_name}
    fields.update(extra)
    return EntityRecord(id=member_id, fields=fields)


class FailingLookup(EntityLookupInterface):
    """Gateway whose every search raises a transport error."""

    def __init__(self) -> None:
        self.calls = 0

    async def search(self, query: str, limit: int) -> list[EntityRecord]:
        self.calls += 1
        raise LookupFailedError("connection refused")


class ControlledLookup(EntityLookupInterface):
    """Gateway that holds each response until the test releases it."""

    def __init__(self) -> None:
        self.requests: dict[str, asyncio.Event] = {}
        self.responses: dict[str, list[EntityRecord]] = {}

    def respond(self, query: str, records: list[EntityRecord]) -> None:
        self.responses[query] = records
        self.requests.setdefault(query, asyncio.Event()).set()

    async def search(self, query: str, limit: int) -> list[EntityRecord]:
        event = self.requests.setdefault(query, asyncio.Event())
        await event.wait()
        return self.responses.get(query, [])


@pytest.fixture
def members() -> list[EntityRecord]:
    return [
        make_member("1", "Ahmet", "Yılmaz", tc_identity="11111111110", phone="05550000001"),
        make_member("2", "Mehmet", "Demir", tc_identity="22222222220", phone="05550000002"),
        make_member("3", "Ayşe", "Işık", tc_identity="33333333330", city="İzmir"),
        make_member("4", "Mehmet Ali", "Kaya", tc_identity="44444444440"),
    ]


@pytest.fixture
def catalog() -> FieldCatalog:
    return DEFAULT_MEMBER_FIELDS


@pytest.fixture
def config() -> ComposerConfig:
    return ComposerConfig(debounce_seconds=0.0)


@pytest.fixture
def lookup(members) -> InMemoryEntityLookup:
    return InMemoryEntityLookup(members)


@pytest.fixture
def buffer() -> TextBuffer:
    return TextBuffer("Sayın ilgili, ")


@pytest.fixture
def make_engine(buffer, lookup, config) -> Callable[..., MentionEngine]:
    def _make(gateway: EntityLookupInterface | None = None, **overrides) -> MentionEngine:
        engine_config = config.model_copy(update=overrides) if overrides else config
        return MentionEngine(buffer, gateway or lookup, config=engine_config)

    return _make


@pytest.fixture
def engine(make_engine) -> MentionEngine:
    return make_engine()


@pytest.fixture
def type_text(buffer) -> Callable[[MentionEngine, str], None]:
    """Type ``text`` one character at a time, notifying the engine after each."""

    def _type(engine: MentionEngine, text: str) -> None:
        for ch in text:
            buffer.type_text(ch)
            engine.on_buffer_changed(buffer.content, buffer.cursor)

    return _type
