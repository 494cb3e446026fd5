"""Draw session holding prizes, participants and the winners of each prize."""

from __future__ import annotations

import json
import logging
import random
import threading
from datetime import datetime
from typing import IO, Any, Iterable, Mapping, Optional, Sequence, TextIO, Union

from ..errors import (
    AlreadyDrawn,
    ChecksumMismatch,
    InvalidPrizeAmount,
    MalformedRecord,
    NoAvailableParticipants,
    NoWinnersToRevoke,
    RedrawAmountExceedsCapacity,
    RevokedWinnerMismatch,
    UnknownPrize,
    WinnersNotYetDrawn,
)
from .checksum import compute_winners_checksum
from .records import parse_participants, parse_prizes, read_csv_rows
from .sampling import sample_without_replacement
from .types import Participant, Prize

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class DrawSession:
    """Thread-safe state of one prize draw.

    A prize is *not drawn* until :meth:`draw` succeeds for it. From then on it
    is *drawn*, even when all of its winners are revoked or cleared, until
    :meth:`clear_all_winners` or :meth:`load` replaces the winners map.

    Every public method holds the session lock for its whole duration. Methods
    prefixed with an underscore expect the lock to be held already.
    """

    def __init__(self, name: str, *, rng: Optional[random.Random] = None) -> None:
        """Create an empty draw session.

        Parameters
        ----------
        name : str
            Session name. It also determines the data file name.
        rng : Optional[random.Random], default: None
            Random source used to pick winners. Defaults to a
            :class:`random.SystemRandom`; pass a seeded :class:`random.Random`
            for reproducible draws.
        """

        self.name = name
        self._rng = rng or random.SystemRandom()
        self._prizes: dict[int, Prize] = {}
        self._participants: dict[str, Participant] = {}
        self._winners: dict[int, list[Participant]] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<DrawSession(name={name!r}, prizes={prizes}, participants={participants})>".format(
            name=self.name,
            prizes=len(self._prizes),
            participants=len(self._participants),
        )

    # Prizes and participants

    def set_prize(self, no: int, name: str, amount: int, desc: str) -> None:
        """Insert or overwrite prize ``no``."""
        with self._lock:
            self._prizes[no] = Prize(no=no, name=name, amount=amount, desc=desc)

    def prize(self, no: int) -> Optional[Prize]:
        with self._lock:
            return self._prizes.get(no)

    def prizes(self, descending: bool = False) -> list[Prize]:
        """Return every prize sorted by prize number."""
        with self._lock:
            return [
                self._prizes[no]
                for no in sorted(self._prizes, reverse=descending)
            ]

    def load_prizes(self, records: Iterable[Sequence[str]]) -> None:
        """Replace all prizes with ``(no, name, amount, desc)`` rows.

        The rows are parsed in full before the current prizes are replaced, so
        a :class:`~luckydraw.errors.MalformedRecord` or
        :class:`~luckydraw.errors.InvalidNumber` leaves them untouched.
        """
        with self._lock:
            prizes = parse_prizes(records)
            self._prizes = prizes
        logger.debug("Loaded %d prizes into session %r", len(prizes), self.name)

    def load_prizes_csv(self, stream: TextIO) -> None:
        """Replace all prizes with the rows of a CSV stream whose first row is a header."""
        self.load_prizes(read_csv_rows(stream))

    def participants(self) -> list[Participant]:
        """Return every participant in registration order."""
        with self._lock:
            return list(self._participants.values())

    def load_participants(self, records: Iterable[Sequence[str]]) -> None:
        """Replace all participants with ``(id, name)`` rows.

        Parsing happens before the swap, like :meth:`load_prizes`.
        """
        with self._lock:
            participants = parse_participants(records)
            self._participants = participants
        logger.debug(
            "Loaded %d participants into session %r", len(participants), self.name
        )

    def load_participants_csv(self, stream: TextIO) -> None:
        self.load_participants(read_csv_rows(stream))

    def available_participants(self) -> list[Participant]:
        """Return the participants that have not won any prize yet."""
        with self._lock:
            return self._available_participants()

    def _available_participants(self) -> list[Participant]:
        won = {
            winner.id
            for winners in self._winners.values()
            for winner in winners
        }
        return [p for pid, p in self._participants.items() if pid not in won]

    # Winners

    def winners(self, prize_no: int) -> list[Participant]:
        """Return a copy of the winners of ``prize_no``; empty when not drawn."""
        with self._lock:
            return list(self._winners.get(prize_no, []))

    def all_winners(self) -> dict[int, list[Participant]]:
        """Return a copy of the winners of every drawn prize."""
        with self._lock:
            return {no: list(winners) for no, winners in self._winners.items()}

    def is_drawn(self, prize_no: int) -> bool:
        with self._lock:
            return prize_no in self._winners

    def _require_prize(self, prize_no: int) -> Prize:
        prize = self._prizes.get(prize_no)
        if prize is None:
            raise UnknownPrize(prize_no)
        if prize.amount < 1:
            raise InvalidPrizeAmount(prize_no, prize.amount)
        return prize

    def draw(self, prize_no: int) -> list[Participant]:
        """Draw the winners of ``prize_no``.

        Up to ``prize.amount`` winners are picked among the available
        participants. Fewer are picked when fewer are available.

        Returns
        -------
        list[Participant]
            The winners in draw order.

        Raises
        ------
        UnknownPrize
            If the prize is not registered.
        InvalidPrizeAmount
            If the prize amount is lower than one.
        AlreadyDrawn
            If the prize has been drawn already.
        NoAvailableParticipants
            If every participant has already won.
        """
        with self._lock:
            prize = self._require_prize(prize_no)
            if prize_no in self._winners:
                raise AlreadyDrawn(prize_no)

            available = self._available_participants()
            if not available:
                raise NoAvailableParticipants(prize_no)

            winners = sample_without_replacement(prize.amount, available, self._rng)
            self._winners[prize_no] = winners
            logger.debug("Drew %d winner(s) for prize %d", len(winners), prize_no)
            return list(winners)

    def revoke(
        self,
        prize_no: int,
        revoked: Iterable[Union[Participant, str]],
    ) -> None:
        """Remove ``revoked`` from the winners of ``prize_no``.

        Parameters
        ----------
        prize_no : int
            Drawn prize to revoke winners from.
        revoked : Iterable[Union[Participant, str]]
            Winners to remove, given as participants or participant ids.

        Raises
        ------
        UnknownPrize
            If the prize is not registered.
        InvalidPrizeAmount
            If the prize amount is lower than one.
        NoWinnersToRevoke
            If the prize has not been drawn.
        RevokedWinnerMismatch
            If any entry is not a current winner of the prize. Nothing is
            removed in that case.
        """
        with self._lock:
            self._require_prize(prize_no)
            if prize_no not in self._winners:
                raise NoWinnersToRevoke(prize_no)

            remaining = {winner.id for winner in self._winners[prize_no]}
            for entry in revoked:
                participant_id = entry.id if isinstance(entry, Participant) else entry
                if participant_id not in remaining:
                    raise RevokedWinnerMismatch(prize_no, participant_id)
                remaining.discard(participant_id)

            before = len(self._winners[prize_no])
            self._winners[prize_no] = [
                winner for winner in self._winners[prize_no] if winner.id in remaining
            ]
            logger.debug(
                "Revoked %d winner(s) of prize %d",
                before - len(self._winners[prize_no]),
                prize_no,
            )

    def redraw(self, prize_no: int, extra_amount: int) -> list[Participant]:
        """Draw up to ``extra_amount`` additional winners for a drawn prize.

        New winners are appended after the existing ones.

        Returns
        -------
        list[Participant]
            Only the newly drawn winners.

        Raises
        ------
        UnknownPrize
            If the prize is not registered.
        InvalidPrizeAmount
            If the prize amount is lower than one.
        WinnersNotYetDrawn
            If the prize has not been drawn.
        RedrawAmountExceedsCapacity
            If ``extra_amount`` exceeds the free slots of the prize.
        NoAvailableParticipants
            If every participant has already won.
        """
        with self._lock:
            prize = self._require_prize(prize_no)
            if prize_no not in self._winners:
                raise WinnersNotYetDrawn(prize_no)

            remaining_slots = prize.amount - len(self._winners[prize_no])
            if extra_amount > remaining_slots:
                raise RedrawAmountExceedsCapacity(prize_no, extra_amount, remaining_slots)

            available = self._available_participants()
            if not available:
                raise NoAvailableParticipants(prize_no)

            drawn = sample_without_replacement(extra_amount, available, self._rng)
            self._winners[prize_no] = self._winners[prize_no] + drawn
            logger.debug("Redrew %d winner(s) for prize %d", len(drawn), prize_no)
            return list(drawn)

    def clear_winners(self, prize_no: int) -> None:
        """Empty the winners of ``prize_no``; the prize stays drawn."""
        with self._lock:
            self._winners[prize_no] = []

    def clear_all_winners(self) -> None:
        """Forget every winner; all prizes become not drawn."""
        with self._lock:
            self._winners = {}

    # Persistence

    def to_record(self) -> dict[str, Any]:
        """Return the persisted record of this session as a plain dict."""
        with self._lock:
            return self._to_record()

    def _to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "prizes": {
                str(no): prize.to_json() for no, prize in self._prizes.items()
            },
            "participants": {
                pid: participant.to_json()
                for pid, participant in self._participants.items()
            },
            "winners": {
                str(no): [winner.to_json() for winner in winners]
                for no, winners in self._winners.items()
            },
            "last_updated": datetime.now().strftime(TIMESTAMP_FORMAT),
            "checksum": compute_winners_checksum(self._winners),
        }

    def save(self, stream: IO[str]) -> None:
        """Write the session as an indented JSON record to ``stream``."""
        with self._lock:
            json.dump(self._to_record(), stream, indent=4, ensure_ascii=False)
            stream.write("\n")
        logger.debug("Saved session %r", self.name)

    def load(self, stream: IO[str]) -> None:
        """Replace the session state with the JSON record read from ``stream``.

        Raises
        ------
        json.JSONDecodeError
            If ``stream`` does not contain valid JSON.
        MalformedRecord
            If an entry of the record has an unexpected shape.
        ChecksumMismatch
            If the stored checksum does not match the stored winners.
        """
        with self._lock:
            self._load_record(json.load(stream))

    def load_record(self, record: Mapping[str, Any]) -> None:
        """Replace the session state with an already decoded record."""
        with self._lock:
            self._load_record(record)

    def _load_record(self, record: Mapping[str, Any]) -> None:
        if not isinstance(record, Mapping):
            raise MalformedRecord("Session record must be a JSON object")

        prizes = {
            _int_key(key): Prize.from_json(value)
            for key, value in _mapping(record, "prizes").items()
        }
        participants = {
            str(key): Participant.from_json(value)
            for key, value in _mapping(record, "participants").items()
        }
        winners: dict[int, list[Participant]] = {}
        for key, entries in _mapping(record, "winners").items():
            if entries is None:
                entries = []
            if not isinstance(entries, list):
                raise MalformedRecord(f"Winners of prize {key} must be a list")
            winners[_int_key(key)] = [Participant.from_json(entry) for entry in entries]

        stored = record.get("checksum")
        computed = compute_winners_checksum(winners)
        if stored != computed:
            logger.warning(
                "Rejected record for session %r: checksum mismatch", self.name
            )
            raise ChecksumMismatch(str(stored), computed)

        self._prizes = prizes
        self._participants = participants
        self._winners = winners
        logger.debug(
            "Loaded session %r (%d prizes, %d participants, %d drawn)",
            self.name,
            len(prizes),
            len(participants),
            len(winners),
        )


def _mapping(record: Mapping[str, Any], field: str) -> Mapping[str, Any]:
    value = record.get(field)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise MalformedRecord(f"Field {field!r} must be an object")
    return value


def _int_key(key: Any) -> int:
    try:
        return int(key)
    except (TypeError, ValueError) as exc:
        raise MalformedRecord(f"Invalid prize number key: {key!r}") from exc


__all__ = ["DrawSession", "TIMESTAMP_FORMAT"]
