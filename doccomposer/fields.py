"""Field catalog: which entity attributes may be selected into a table.

The catalog is an ordered list of ``(key, label)`` pairs. Keys are the
attribute names of the backing store (``first_name``, ``tc_identity``...),
labels are what the generated table shows as column headers. Field access
on :class:`~doccomposer.entity.EntityRecord` values and the serializer's
header row are both checked against the catalog, so a typo in a field key
surfaces as :class:`~doccomposer.errors.UnknownFieldError` instead of an
empty column.
"""

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field, model_validator

from doccomposer.errors import UnknownFieldError

FieldKey = str


class MemberField(str, Enum):
    """Field keys of the member records the console searches by default."""

    MEMBERSHIP_NUMBER = "membership_number"
    TC_IDENTITY = "tc_identity"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    PHONE = "phone"
    EMAIL = "email"
    CITY = "city"
    DISTRICT = "district"
    WORKPLACE = "workplace"
    INSTITUTION = "institution"
    POSITION = "position"


class FieldDefinition(BaseModel, frozen=True):
    """One selectable attribute and the column label it renders under."""

    key: FieldKey = Field(min_length=1, description="Attribute name in the backing store.")
    label: str = Field(min_length=1, description="Column header shown in generated tables.")


class FieldCatalog(BaseModel, frozen=True):
    """Ordered, duplicate-free collection of selectable fields."""

    fields: tuple[FieldDefinition, ...] = Field(default=(), description="Selectable fields in display order.")

    @model_validator(mode="after")
    def keys_are_unique(self) -> "FieldCatalog":
        seen: set[str] = set()
        for definition in self.fields:
            if definition.key in seen:
                raise ValueError(f"Duplicate field key in catalog: {definition.key!r}")
            seen.add(definition.key)
        return self

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "FieldCatalog":
        return cls(fields=tuple(FieldDefinition(key=normalize_field_key(key), label=label) for key, label in pairs))

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, key: object) -> bool:
        return any(definition.key == normalize_field_key(key) for definition in self.fields)

    @property
    def keys(self) -> tuple[FieldKey, ...]:
        return tuple(definition.key for definition in self.fields)

    def get(self, key: FieldKey) -> FieldDefinition:
        """Return the definition for ``key``.

        Raises:
            UnknownFieldError: If the key is not in the catalog.
        """
        wanted = normalize_field_key(key)
        for definition in self.fields:
            if definition.key == wanted:
                return definition
        raise UnknownFieldError(wanted)

    def label(self, key: FieldKey) -> str:
        return self.get(key).label

    def index(self, key: FieldKey) -> int:
        wanted = normalize_field_key(key)
        for position, definition in enumerate(self.fields):
            if definition.key == wanted:
                return position
        raise UnknownFieldError(wanted)


def normalize_field_key(key: object) -> str:
    """Return the plain string form of a field key (enum members use their value)."""
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


DEFAULT_MEMBER_FIELDS = FieldCatalog.from_pairs(
    [
        (MemberField.FIRST_NAME, "Ad"),
        (MemberField.LAST_NAME, "Soyad"),
        (MemberField.TC_IDENTITY, "TC Kimlik"),
        (MemberField.MEMBERSHIP_NUMBER, "Üye No"),
        (MemberField.PHONE, "Telefon"),
        (MemberField.EMAIL, "E-posta"),
        (MemberField.CITY, "İl"),
        (MemberField.DISTRICT, "İlçe"),
        (MemberField.WORKPLACE, "İş Yeri"),
        (MemberField.INSTITUTION, "Kurum"),
        (MemberField.POSITION, "Kadro"),
    ]
)
