"""Uniform sampling of winners without replacement."""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

_SYSTEM_RANDOM = random.SystemRandom()


def sample_without_replacement(
    k: int,
    candidates: Sequence[T],
    rng: Optional[random.Random] = None,
) -> list[T]:
    """Pick ``min(k, len(candidates))`` distinct candidates uniformly at random.

    Each pick draws an index into the remaining pool and removes the picked
    candidate by swapping the last element into its place, so every pick is
    O(1). The remaining pool's order is not preserved.

    Parameters
    ----------
    k : int
        Number of candidates requested. Non-positive values yield an empty list.
    candidates : Sequence[T]
        Pool to sample from. It is copied and never mutated.
    rng : Optional[random.Random], default: None
        Random source. Defaults to a process-wide :class:`random.SystemRandom`.

    Returns
    -------
    list[T]
        Picked candidates in draw order.
    """

    if k <= 0 or not candidates:
        return []

    rng = rng or _SYSTEM_RANDOM
    pool = list(candidates)
    picked: list[T] = []
    for _ in range(min(k, len(pool))):
        index = rng.randrange(len(pool))
        picked.append(pool[index])
        pool[index] = pool[-1]
        pool.pop()
    return picked


__all__ = ["sample_without_replacement"]
