"""Result and failure types returned by episode data sources."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class FailureKind(Enum):
    """Kinds of data source failures."""
    LOOKUP_NOT_FOUND = "lookup_not_found"
    LOOKUP_TRANSPORT = "lookup_transport"
    TRANSPORT = "transport"
    MALFORMED = "malformed"

    @property
    def is_lookup(self) -> bool:
        return self in (FailureKind.LOOKUP_NOT_FOUND, FailureKind.LOOKUP_TRANSPORT)


@dataclass(frozen=True)
class SourceFailure:
    """Describes why a data source call did not produce a value."""
    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    """Outcome of a data source call: either a value or a failure."""
    value: Optional[T] = None
    failure: Optional[SourceFailure] = None

    def __post_init__(self):
        """Ensure exactly one of value and failure is set."""
        if (self.value is None) == (self.failure is None):
            raise ValueError("SourceResult requires exactly one of value or failure")

    @property
    def is_ok(self) -> bool:
        return self.failure is None

    @classmethod
    def ok(cls, value: Any) -> "SourceResult":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, message: str) -> "SourceResult":
        return cls(failure=SourceFailure(kind=kind, message=message))
