"""Checksums and file naming for persisted draw sessions."""

from __future__ import annotations

import hashlib
from typing import Mapping, Sequence

from .types import Participant


def compute_winners_checksum(winners: Mapping[int, Sequence[Participant]]) -> str:
    """Return the uppercase MD5 hex digest of ``winners``.

    Prize numbers are visited in ascending order. For each prize the decimal
    prize number is hashed, followed by the id and then the name of every winner
    in draw order. The digest detects accidental corruption only.
    """
    digest = hashlib.md5()
    for prize_no in sorted(winners):
        digest.update(str(prize_no).encode("utf-8"))
        for winner in winners[prize_no]:
            digest.update(winner.id.encode("utf-8"))
            digest.update(winner.name.encode("utf-8"))
    return digest.hexdigest().upper()


def data_key(name: str) -> str:
    """Return the uppercase MD5 hex digest of a session ``name``."""
    return hashlib.md5(name.encode("utf-8")).hexdigest().upper()


def data_file_name(name: str) -> str:
    """Return the data file name (``<MD5 HEX>.json``) used for session ``name``."""
    return f"{data_key(name)}.json"


__all__ = ["compute_winners_checksum", "data_file_name", "data_key"]
