"""Lookup gateway backed by a PostgREST endpoint (e.g. a Supabase project).

Issues one ``GET /rest/v1/<table>`` per search with an ``or=(...)`` filter
of ``ilike`` conditions over the indexed columns, the same shape the
console's member pickers send:

    GET /rest/v1/members?select=*&is_active=eq.true
        &or=(first_name.ilike.*ali*,last_name.ilike.*ali*,tc_identity.ilike.*ali*)
        &limit=20
"""

import logging
import re
from typing import Any, Mapping, Sequence

import httpx

from doccomposer.config import ComposerConfig
from doccomposer.entity import EntityRecord
from doccomposer.errors import LookupFailedError
from doccomposer.fields import FieldKey, MemberField
from doccomposer.lookup.interfaces import EntityLookupInterface

logger = logging.getLogger(__name__)

DEFAULT_INDEXED_COLUMNS: tuple[FieldKey, ...] = (
    MemberField.FIRST_NAME.value,
    MemberField.LAST_NAME.value,
    MemberField.TC_IDENTITY.value,
)

# characters with meaning inside a PostgREST or=(...) filter
_FILTER_RESERVED = re.compile(r"[,()*:\"\\]")


def build_or_filter(query: str, columns: Sequence[FieldKey]) -> str | None:
    """Return the ``or=(...)`` value for ``query``, or None for a blank query."""
    term = _FILTER_RESERVED.sub(" ", query).strip()
    if not term:
        return None
    return "(" + ",".join(f"{column}.ilike.*{term}*" for column in columns) + ")"


class PostgrestEntityLookup(EntityLookupInterface):
    """Search a PostgREST table over HTTP with :mod:`httpx`.

    Args:
        base_url: Project URL, e.g. ``https://xyz.supabase.co``.
        api_key: Anon or service key, sent as ``apikey`` and bearer token.
        table: Table or view to search.
        columns: Indexed columns matched with ``ilike``.
        active_only: Add ``is_active=eq.true`` to every request.
        timeout: Request timeout in seconds.
        client: Pre-built client (tests pass one with a mock transport).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        table: str = "members",
        columns: Sequence[FieldKey] = DEFAULT_INDEXED_COLUMNS,
        active_only: bool = True,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.table = table
        self.columns = tuple(columns)
        self.active_only = active_only
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = headers

    @classmethod
    def from_config(
        cls,
        base_url: str,
        api_key: str | None = None,
        config: ComposerConfig | None = None,
        **kwargs: Any,
    ) -> "PostgrestEntityLookup":
        """Build an adapter whose request timeout is ``config.lookup_timeout``."""
        config = config or ComposerConfig()
        kwargs.setdefault("timeout", config.lookup_timeout)
        return cls(base_url, api_key=api_key, **kwargs)

    def _url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _params(self, query: str, limit: int) -> dict[str, str]:
        params = {"select": "*", "limit": str(limit)}
        if self.active_only:
            params["is_active"] = "eq.true"
        or_filter = build_or_filter(query, self.columns)
        if or_filter is not None:
            params["or"] = or_filter
        return params

    async def search(self, query: str, limit: int) -> list[EntityRecord]:
        """Run one search request.

        Raises:
            LookupFailedError: On transport errors, non-2xx responses or an
                unexpected payload shape.
        """
        try:
            response = await self._client.get(self._url(), params=self._params(query, limit), headers=self._headers)
            response.raise_for_status()
            rows = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"PostgREST lookup failed for {query!r}: {e}")
            raise LookupFailedError(f"Member lookup failed: {e}") from e
        if not isinstance(rows, list):
            raise LookupFailedError(f"Unexpected lookup payload: {type(rows).__name__}")
        return [self._to_record(row) for row in rows if isinstance(row, Mapping) and row.get("id") is not None]

    @staticmethod
    def _to_record(row: Mapping[str, Any]) -> EntityRecord:
        return EntityRecord.from_row(row)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
