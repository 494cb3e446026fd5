"""Value objects shared by the draw session and its persistence format."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import MalformedRecord


@dataclass(frozen=True)
class Participant:
    """A person entered into the draw.

    Attributes
    ----------
    id : str
        Identifier unique within a session.
    name : str
        Display name shown when the participant wins.
    """

    id: str
    name: str

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Participant":
        """Build a participant from its persisted JSON object.

        Raises
        ------
        MalformedRecord
            If ``data`` is not an object with a string ``id``. A missing or
            null ``name`` reads as empty.
        """
        if not isinstance(data, Mapping):
            raise MalformedRecord(f"Participant entry must be an object: {data!r}")
        participant_id = data.get("id")
        if not isinstance(participant_id, str):
            raise MalformedRecord(f"Invalid participant entry: {data!r}")
        return cls(id=participant_id, name=_text(data, "name"))


@dataclass(frozen=True)
class Prize:
    """A prize with ``amount`` winner slots.

    Attributes
    ----------
    no : int
        Prize number, unique within a session.
    name : str
        Prize name.
    amount : int
        Number of winners to draw for this prize.
    desc : str
        Free form description.
    """

    no: int
    name: str
    amount: int
    desc: str

    def to_json(self) -> dict[str, Any]:
        return {
            "no": self.no,
            "name": self.name,
            "amount": self.amount,
            "desc": self.desc,
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Prize":
        """Build a prize from its persisted JSON object.

        Raises
        ------
        MalformedRecord
            If ``data`` is not an object or ``no``/``amount`` are not integers.
        """
        if not isinstance(data, Mapping):
            raise MalformedRecord(f"Prize entry must be an object: {data!r}")
        no = data.get("no")
        amount = data.get("amount", 0)
        # bool is an int subclass but never a valid prize number
        if (
            not isinstance(no, int)
            or isinstance(no, bool)
            or not isinstance(amount, int)
            or isinstance(amount, bool)
        ):
            raise MalformedRecord(f"Invalid prize entry: {data!r}")
        return cls(
            no=no,
            name=_text(data, "name"),
            amount=amount,
            desc=_text(data, "desc"),
        )


def _text(data: Mapping[str, Any], field: str) -> str:
    """Return a string field, reading a missing or null value as empty."""
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecord(f"Field {field!r} must be a string: {data!r}")
    return value


__all__ = ["Participant", "Prize"]
