"""In-memory lookup gateway for tests, demos and offline development.

Records are kept in insertion order and searched with an O(n) scan, so this
is only suitable for small member lists.
"""

from typing import Iterable, Sequence

from doccomposer.commands import fold_trigger_text
from doccomposer.entity import EntityRecord
from doccomposer.fields import FieldKey, MemberField
from doccomposer.lookup.interfaces import EntityLookupInterface

DEFAULT_SEARCH_FIELDS: tuple[FieldKey, ...] = (
    MemberField.FIRST_NAME.value,
    MemberField.LAST_NAME.value,
    MemberField.TC_IDENTITY.value,
    MemberField.MEMBERSHIP_NUMBER.value,
)


class InMemoryEntityLookup(EntityLookupInterface):
    """Substring search over a fixed list of records.

    Matching folds Turkish letters on both sides, so ``yilmaz`` finds
    ``Yılmaz`` and ``ISIK`` finds ``Işık``. Every word of a multi-word query
    must match one of the search fields (``ahmet yil`` finds Ahmet Yılmaz).

    Example:
        ```python
        lookup = InMemoryEntityLookup([EntityRecord(id="1", fields={"first_name": "Ahmet"})])
        assert [r.id for r in await lookup.search("ahm", limit=10)] == ["1"]
        ```
    """

    def __init__(
        self,
        records: Iterable[EntityRecord] = (),
        search_fields: Sequence[FieldKey] = DEFAULT_SEARCH_FIELDS,
    ) -> None:
        self._records: dict[str, EntityRecord] = {}
        self.search_fields = tuple(search_fields)
        self.queries: list[str] = []
        for record in records:
            self.add(record)

    def add(self, record: EntityRecord) -> None:
        """Store ``record``, replacing any record with the same id."""
        self._records[record.id] = record

    def _matches(self, record: EntityRecord, words: list[str]) -> bool:
        values = [fold_trigger_text(record.value(key)) for key in self.search_fields]
        return all(any(word in value for value in values) for word in words)

    async def search(self, query: str, limit: int) -> list[EntityRecord]:
        self.queries.append(query)
        words = fold_trigger_text(query).split()
        results: list[EntityRecord] = []
        for record in self._records.values():
            if self._matches(record, words):
                results.append(record)
                if len(results) >= limit:
                    break
        return results
