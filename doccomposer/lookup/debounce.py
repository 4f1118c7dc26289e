"""Debounced, generation-checked calls to the lookup gateway.

Each keystroke in entity search calls :meth:`DebouncedLookup.schedule`,
which restarts a timer; the gateway is only called once the timer survives
a full quiet period. Every scheduled request carries a monotonically
increasing generation number. Requests already in flight are not
cancelled, but when one completes its generation is compared with the
latest issued and stale results are dropped, so a slow response for an old
query can never overwrite the candidates of a newer one. :meth:`cancel`
bumps the generation too, which discards anything still in flight for a
session that has since been closed.
"""

import asyncio
import logging
from typing import Callable, Sequence

from doccomposer.entity import EntityRecord
from doccomposer.lookup.interfaces import EntityLookupInterface

logger = logging.getLogger(__name__)

ResultCallback = Callable[[int, Sequence[EntityRecord]], None]


class DebouncedLookup:
    """Debounce wrapper around an :class:`EntityLookupInterface`.

    Must be used from code running inside an asyncio event loop; results
    are delivered to ``on_results(generation, records)`` on that loop.

    Example:
        ```python
        debouncer = DebouncedLookup(gateway, on_results=engine_callback, delay=0.5)
        debouncer.schedule("meh")
        debouncer.schedule("mehmet")   # restarts the timer; only "mehmet" is searched
        await debouncer.wait_idle()
        ```
    """

    def __init__(
        self,
        gateway: EntityLookupInterface,
        on_results: ResultCallback,
        delay: float = 0.5,
        limit: int = 20,
    ) -> None:
        self._gateway = gateway
        self._on_results = on_results
        self.delay = delay
        self.limit = limit
        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None
        self._pending_query: str | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        """Generation of the most recently scheduled (or cancelled) request."""
        return self._generation

    @property
    def pending(self) -> bool:
        return self._timer is not None or bool(self._in_flight)

    def schedule(self, query: str) -> int:
        """Restart the debounce timer for ``query`` and return its generation."""
        self._cancel_timer()
        self._generation += 1
        generation = self._generation
        loop = asyncio.get_running_loop()
        self._pending_query = query
        self._timer = loop.call_later(self.delay, self._fire, generation, query)
        return generation

    def cancel(self) -> None:
        """Drop the pending timer and invalidate every in-flight request."""
        self._cancel_timer()
        self._generation += 1

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending_query = None

    def _fire(self, generation: int, query: str) -> None:
        self._timer = None
        self._pending_query = None
        task = asyncio.get_running_loop().create_task(self._run(generation, query))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, generation: int, query: str) -> None:
        try:
            records: Sequence[EntityRecord] = await self._gateway.search(query, self.limit)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Entity lookup for {query!r} failed, showing no results: {e}")
            records = []
        if generation != self._generation:
            logger.debug(f"Discarding stale lookup result for {query!r} (generation {generation} < {self._generation})")
            return
        self._on_results(generation, list(records or []))

    async def flush(self) -> None:
        """Fire a pending timer immediately instead of waiting for the delay."""
        if self._timer is not None and self._pending_query is not None:
            query = self._pending_query
            self._cancel_timer()
            self._fire(self._generation, query)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and every in-flight request finished."""
        while self.pending:
            if self._timer is not None:
                await asyncio.sleep(max(self.delay, 0.001))
                continue
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
