"""Karma domain types: purposes, lifecycle states, points and status records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum, StrEnum

from src.infra.errors import (
    InvalidKarmaName,
    InvalidKarmaType,
    KarmaAlreadyPersisted,
    InvalidNumericKarmaType,
    UnsupportedStatus,
)

# Free-text labels accepted from the GUI shell. Only "work" is wired up so far.
_PURPOSE_LABELS: dict[str, int] = {"work": 1}


class KarmaType(IntEnum):
    """Purpose of a karma point. The integer value is the wire/storage code."""

    work = 1
    social = 2
    sport = 3
    learning = 4
    sleeping = 5

    @classmethod
    def from_code(cls, code: int) -> KarmaType:
        """Decode a storage code. Raises InvalidNumericKarmaType outside 1-5."""
        try:
            return cls(code)
        except ValueError:
            raise InvalidNumericKarmaType(code) from None

    @classmethod
    def from_label(cls, label: str) -> KarmaType:
        """Parse a purpose label sent by the GUI shell (exact match)."""
        code = _PURPOSE_LABELS.get(label)
        if code is None:
            raise InvalidKarmaType(label)
        return cls(code)


class State(StrEnum):
    active = "active"
    closed = "closed"

    @classmethod
    def parse(cls, value: str) -> State:
        """Lenient parse used for stored rows: anything but 'active' is closed."""
        if value.lower() == "active":
            return cls.active
        return cls.closed

    @classmethod
    def from_wire(cls, value: str) -> State:
        """Strict parse used for command input."""
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedStatus(value) from None


@dataclass(frozen=True)
class KarmaPoint:
    purpose: KarmaType
    name: str
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidKarmaName(self.name)

    @classmethod
    def with_id(cls, id: int, purpose: KarmaType, name: str) -> KarmaPoint:
        return cls(purpose=purpose, name=name, id=id)

    def persisted(self, id: int) -> KarmaPoint:
        """Copy of this point carrying the id assigned by storage."""
        if self.id is not None and self.id != id:
            raise KarmaAlreadyPersisted(self.name, self.id)
        return replace(self, id=id)

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "purpose": self.purpose.name}


@dataclass(frozen=True)
class KarmaStatus:
    """Lifecycle record of a karma point at a point in time.

    closed_with is the purpose the point was actually closed under, which can
    differ from its original purpose. None is stored as the 0 sentinel.
    """

    karma_id: int
    state: State
    timestamp: int
    closed_with: KarmaType | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "karma_id": self.karma_id,
            "state": self.state.value,
            "timestamp": self.timestamp,
            "closed_with": self.closed_with.name if self.closed_with is not None else None,
        }
