"""Exceptions raised by draw sessions."""

from __future__ import annotations


class LuckyDrawError(ValueError):
    """Base class for every error raised by a draw session."""


class MalformedRecord(LuckyDrawError):
    """A bulk-load row or persisted entry does not have the expected shape."""


class InvalidNumber(LuckyDrawError):
    """A numeric field of a bulk-load row could not be parsed."""


class UnknownPrize(LuckyDrawError):
    """The referenced prize number is not registered."""

    def __init__(self, prize_no: int) -> None:
        super().__init__(f"Prize {prize_no} is not registered")
        self.prize_no = prize_no


class InvalidPrizeAmount(LuckyDrawError):
    """The prize has fewer than one winner slot."""

    def __init__(self, prize_no: int, amount: int) -> None:
        super().__init__(f"Prize {prize_no} has an invalid amount: {amount}")
        self.prize_no = prize_no
        self.amount = amount


class AlreadyDrawn(LuckyDrawError):
    """Winners already exist for the prize."""

    def __init__(self, prize_no: int) -> None:
        super().__init__(f"Winners of prize {prize_no} have already been drawn")
        self.prize_no = prize_no


class NoAvailableParticipants(LuckyDrawError):
    """Every registered participant has already won a prize."""

    def __init__(self, prize_no: int) -> None:
        super().__init__(f"No available participants to draw for prize {prize_no}")
        self.prize_no = prize_no


class NoWinnersToRevoke(LuckyDrawError):
    """Revoke was called before the prize was drawn."""

    def __init__(self, prize_no: int) -> None:
        super().__init__(f"Prize {prize_no} has not been drawn, nothing to revoke")
        self.prize_no = prize_no


class WinnersNotYetDrawn(LuckyDrawError):
    """Redraw was called before the prize was drawn."""

    def __init__(self, prize_no: int) -> None:
        super().__init__(f"Prize {prize_no} must be drawn before it can be redrawn")
        self.prize_no = prize_no


class RevokedWinnerMismatch(LuckyDrawError):
    """A revoke target is not a current winner of the prize."""

    def __init__(self, prize_no: int, participant_id: str) -> None:
        super().__init__(
            f"Participant {participant_id!r} is not a winner of prize {prize_no}"
        )
        self.prize_no = prize_no
        self.participant_id = participant_id


class RedrawAmountExceedsCapacity(LuckyDrawError):
    """The requested extra winners would exceed the prize amount."""

    def __init__(self, prize_no: int, requested: int, remaining: int) -> None:
        super().__init__(
            f"Cannot redraw {requested} winner(s) for prize {prize_no}: "
            f"only {remaining} slot(s) remain"
        )
        self.prize_no = prize_no
        self.requested = requested
        self.remaining = remaining


class ChecksumMismatch(LuckyDrawError):
    """The stored checksum does not match the persisted winners."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"Winners checksum mismatch: stored {expected!r}, computed {actual!r}"
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "LuckyDrawError",
    "MalformedRecord",
    "InvalidNumber",
    "UnknownPrize",
    "InvalidPrizeAmount",
    "AlreadyDrawn",
    "NoAvailableParticipants",
    "NoWinnersToRevoke",
    "WinnersNotYetDrawn",
    "RevokedWinnerMismatch",
    "RedrawAmountExceedsCapacity",
    "ChecksumMismatch",
]
