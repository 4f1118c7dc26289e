"""Exception types raised inside the composer.

Pure helpers (session transitions, the serializer, buffer splicing) raise
these; :class:`doccomposer.engine.MentionEngine` catches them at the host
boundary and degrades to a well-defined state instead of propagating.
"""


class ComposerError(Exception):
    """Base class for every error raised by the composer."""


class FieldLimitError(ComposerError):
    """Raised when a field toggle would exceed the selectable field cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"At most {limit} fields can be selected for a table")


class UnknownFieldError(ComposerError, KeyError):
    """Raised when a field key is not part of the field catalog."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown field key: {self.key!r}"


class BufferRangeError(ComposerError, IndexError):
    """Raised when a buffer offset or range falls outside the content."""


class LookupFailedError(ComposerError):
    """Raised by lookup adapters when the backing store cannot be reached."""
