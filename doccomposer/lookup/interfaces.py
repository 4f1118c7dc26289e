"""Entity lookup gateway interface."""

from abc import ABC, abstractmethod

from doccomposer.entity import EntityRecord


class EntityLookupInterface(ABC):
    """Keyword search over the backing record store.

    Implementations match ``query`` case-insensitively as a substring of a
    small fixed set of indexed fields. "Not found" is an empty list, never
    an exception. Transport failures may raise (adapters raise
    :class:`~doccomposer.errors.LookupFailedError`); the debouncer turns them
    into empty results before they reach the session.
    """

    @abstractmethod
    async def search(self, query: str, limit: int) -> list[EntityRecord]:
        """Return up to ``limit`` records matching ``query``, best first."""

    async def close(self) -> None:
        """Release connections held by the gateway; no-op by default."""
