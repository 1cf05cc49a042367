"""Winner selection strategies for the draw engine."""

from __future__ import annotations

import random
import secrets
from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")

Chooser = Callable[[Sequence[T]], T]
"""Callable that picks one element of a non-empty sequence."""

_SYSTEM_RANDOM = secrets.SystemRandom()


def choose_uniform(pool: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Return one element of ``pool``, each with probability ``1 / len(pool)``.

    Parameters
    ----------
    pool : Sequence[T]
        Candidates to pick from. Must not be empty.
    rng : Optional[random.Random], default: None
        Random source to use. When omitted the OS CSPRNG is used, so earlier
        draws observed by the audience say nothing about the next one.

    Raises
    ------
    ValueError
        If ``pool`` is empty.
    """
    if not pool:
        raise ValueError("cannot choose from an empty pool")
    source = rng if rng is not None else _SYSTEM_RANDOM
    return pool[source.randrange(len(pool))]


def seeded_chooser(seed: int) -> Chooser:
    """Return a reproducible uniform chooser driven by ``random.Random(seed)``.

    Intended for tests and rehearsals, never for a live audience.
    """
    rng = random.Random(seed)

    def _choose(pool):
        return choose_uniform(pool, rng)

    return _choose


def scripted_chooser(indices: Sequence[int]) -> Chooser:
    """Return a chooser that picks ``pool[i]`` for each ``i`` of ``indices`` in turn.

    Raises ``IndexError`` once the script is exhausted or an index is out of range.
    """
    remaining = list(indices)

    def _choose(pool):
        if not remaining:
            raise IndexError("scripted chooser has no picks left")
        return pool[remaining.pop(0)]

    return _choose


__all__ = ["Chooser", "choose_uniform", "scripted_chooser", "seeded_chooser"]
