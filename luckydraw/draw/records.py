"""Parsing of tabular prize and participant records."""

from __future__ import annotations

import csv
import re
from typing import Iterable, Sequence, TextIO

from ..errors import InvalidNumber, MalformedRecord
from .types import Participant, Prize

PRIZE_FIELDS = 4
PARTICIPANT_FIELDS = 2

_INTEGER = re.compile(r"[+-]?[0-9]+")


def read_csv_rows(stream: TextIO) -> list[list[str]]:
    """Read every CSV row from ``stream`` and drop the header row.

    Blank lines are skipped. ``csv.Error`` raised by the reader propagates
    unchanged.
    """
    rows = [row for row in csv.reader(stream) if row]
    return rows[1:]


def _parse_int(value: str, field: str) -> int:
    # int() would also take underscores, tabs and non-ASCII digits
    text = value.strip(" ")
    if not _INTEGER.fullmatch(text):
        raise InvalidNumber(f"Invalid {field}: {value!r}")
    return int(text)


def parse_prize_row(row: Sequence[str]) -> Prize:
    """Convert a ``(no, name, amount, desc)`` row into a :class:`Prize`.

    Raises
    ------
    MalformedRecord
        If the row does not have exactly four fields.
    InvalidNumber
        If ``no`` or ``amount`` is not an integer.
    """
    if len(row) != PRIZE_FIELDS:
        raise MalformedRecord(
            f"Prize row must have {PRIZE_FIELDS} fields, got {len(row)}: {list(row)!r}"
        )
    no = _parse_int(row[0], "prize no")
    amount = _parse_int(row[2], "prize amount")
    return Prize(no=no, name=row[1], amount=amount, desc=row[3])


def parse_participant_row(row: Sequence[str]) -> Participant:
    """Convert an ``(id, name)`` row into a :class:`Participant`."""
    if len(row) != PARTICIPANT_FIELDS:
        raise MalformedRecord(
            f"Participant row must have {PARTICIPANT_FIELDS} fields, "
            f"got {len(row)}: {list(row)!r}"
        )
    return Participant(id=row[0], name=row[1])


def parse_prizes(rows: Iterable[Sequence[str]]) -> dict[int, Prize]:
    """Parse every prize row; later rows overwrite earlier ones with the same no."""
    prizes: dict[int, Prize] = {}
    for row in rows:
        prize = parse_prize_row(row)
        prizes[prize.no] = prize
    return prizes


def parse_participants(rows: Iterable[Sequence[str]]) -> dict[str, Participant]:
    participants: dict[str, Participant] = {}
    for row in rows:
        participant = parse_participant_row(row)
        participants[participant.id] = participant
    return participants


__all__ = [
    "parse_participant_row",
    "parse_participants",
    "parse_prize_row",
    "parse_prizes",
    "read_csv_rows",
]
