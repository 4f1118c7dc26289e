"""Entity records returned by the lookup gateway.

Records are frozen pydantic models shared read-only between the lookup
gateway, the session's candidate list and its selection. Selection
membership and hashing use the ``id`` field, so a member picked from one
search stays selected when a later search returns it again. Equality also
compares ``fields``, so a refreshed record with changed values is not
equal to the stale copy and still replaces it in the candidate list.
"""

from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator

from doccomposer.fields import FieldCatalog, FieldKey, normalize_field_key

MISSING_VALUE = "-"


class EntityRecord(BaseModel):
    """A backing-store record (e.g. a member) selectable via search.

    Attributes:
        id: Stable identifier in the backing store.
        fields: Attribute values keyed by field key. Values are stored as
            strings; ``None`` from the store becomes an empty string.
        label: Optional display text for the search popup.
    """

    model_config = {"frozen": True}

    id: str = Field(min_length=1, description="Identifier in the backing store.")
    fields: dict[FieldKey, str] = Field(default_factory=dict, description="Attribute values keyed by field key.")
    label: str = Field(default="", description="Display text for the popup; derived from the name fields when empty.")

    @field_validator("fields", mode="before")
    @classmethod
    def stringify_values(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        return {normalize_field_key(k): "" if v is None else str(v) for k, v in value.items()}

    @classmethod
    def from_row(cls, row: Mapping[str, Any], id_field: str = "id") -> "EntityRecord":
        """Build a record from a raw store row, keeping every non-id column."""
        fields = {key: value for key, value in row.items() if key != id_field}
        return cls(id=str(row[id_field]), fields=fields)

    def value(self, key: FieldKey) -> str:
        """Return the stripped value of ``key``, or an empty string when absent."""
        return self.fields.get(normalize_field_key(key), "").strip()

    def checked_value(self, key: FieldKey, catalog: FieldCatalog) -> str:
        """Like :meth:`value` but rejects keys that are not in ``catalog``."""
        catalog.get(key)
        return self.value(key)

    @property
    def display_name(self) -> str:
        if self.label:
            return self.label
        name = " ".join(part for part in (self.value("first_name"), self.value("last_name")) if part)
        return name or self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityRecord):
            return NotImplemented
        return self.id == other.id and self.fields == other.fields
