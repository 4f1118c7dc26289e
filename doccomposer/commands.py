"""Mention commands and Turkish-aware trigger normalization.

A command is the keyword typed right after ``@``: ``@uye`` picks a single
member, ``@uyetablo`` picks several members for one table. Authors type
these with or without Turkish diacritics and in any case, so both the typed
prefix and the command triggers are compared in a folded form: Turkish
lowercasing (``I`` → ``ı``, ``İ`` → ``i``) followed by folding the Turkish
letters to their ASCII base (``ı`` → ``i``, ``ü`` → ``u`` ...).
"""

from typing import Sequence

from pydantic import BaseModel, Field, field_validator

_TURKISH_UPPER = str.maketrans({"I": "ı", "İ": "i"})
_TURKISH_FOLD = str.maketrans(
    {
        "ı": "i",
        "ü": "u",
        "ö": "o",
        "ç": "c",
        "ş": "s",
        "ğ": "g",
        "â": "a",
        "î": "i",
        "û": "u",
    }
)


def turkish_lower(text: str) -> str:
    """Lowercase ``text`` with the Turkish dotted/dotless ``i`` rules."""
    return text.translate(_TURKISH_UPPER).lower()


def fold_trigger_text(text: str) -> str:
    """Return the comparison form of ``text``: Turkish lowercase, ASCII-folded.

    ``str.lower`` turns ``İ`` into ``i`` plus a combining dot; translating
    the two Turkish capitals first keeps the folded text the same length as
    the input, which the scanner relies on when it maps folded offsets back
    to buffer offsets.
    """
    return turkish_lower(text).translate(_TURKISH_FOLD)


class Command(BaseModel, frozen=True):
    """A recognized trigger keyword.

    Attributes:
        trigger: Keyword typed after ``@`` (stored in folded form).
        label: Text shown in the command menu.
        multi_select: Whether the command collects several entities.
        description: Optional hint shown under the label.
    """

    trigger: str = Field(min_length=1, description="Keyword typed after the trigger character")
    label: str = Field(min_length=1, description="Menu label")
    multi_select: bool = Field(default=False, description="Allow selecting more than one entity")
    description: str = Field(default="", description="Menu hint")

    @field_validator("trigger")
    @classmethod
    def trigger_is_folded_word(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError("Command trigger cannot contain whitespace")
        return fold_trigger_text(value)


DEFAULT_COMMANDS: tuple[Command, ...] = (
    Command(trigger="uye", label="Üye", multi_select=False, description="Tek üye seç ve alanlarını tabloya ekle"),
    Command(trigger="uyetablo", label="Üye Tablosu", multi_select=True, description="Birden fazla üye seç"),
)


def by_match_priority(commands: Sequence[Command]) -> tuple[Command, ...]:
    """Order commands longest trigger first.

    A trigger that is a prefix of a longer one (``uye`` / ``uyetablo``) must
    be tested after it, otherwise typing the longer word would be read as
    the shorter command followed by leftover search text. The sort is
    stable, so commands of equal length keep their table order.
    """
    return tuple(sorted(commands, key=lambda command: len(command.trigger), reverse=True))


def match_command(prefix: str, commands: Sequence[Command]) -> Command | None:
    """Return the longest command whose trigger starts ``prefix``."""
    folded = fold_trigger_text(prefix)
    for command in by_match_priority(commands):
        if folded.startswith(command.trigger):
            return command
    return None


def filter_commands(prefix: str, commands: Sequence[Command]) -> tuple[Command, ...]:
    """Return the commands whose trigger contains ``prefix``, in table order."""
    folded = fold_trigger_text(prefix)
    return tuple(command for command in commands if folded in command.trigger)
