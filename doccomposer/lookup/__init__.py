"""Entity lookup gateway: interface, adapters and the debouncer."""

from doccomposer.lookup.debounce import DebouncedLookup
from doccomposer.lookup.interfaces import EntityLookupInterface
from doccomposer.lookup.memory import InMemoryEntityLookup
from doccomposer.lookup.postgrest import PostgrestEntityLookup, build_or_filter

__all__ = [
    "EntityLookupInterface",
    "InMemoryEntityLookup",
    "PostgrestEntityLookup",
    "build_or_filter",
    "DebouncedLookup",
]
