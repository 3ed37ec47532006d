"""Dice rolling and random selection utilities for Healing Surge Server."""

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


def roll_die(sides: int, rng: random.Random | None = None) -> int:
    """Roll a single die with the given number of faces.

    Args:
        sides: Face count (e.g. 8 for a d8).
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        An integer in [1, sides], uniformly distributed.

    Raises:
        ValueError: If sides is less than 1.
    """
    if sides < 1:
        raise ValueError(f"Invalid die size: {sides}")
    rng = rng or random.Random()
    return rng.randint(1, sides)


def pick_random(options: Sequence[T], rng: random.Random | None = None) -> T:
    """Pick one entry uniformly at random.

    Args:
        options: Non-empty sequence to choose from.
        rng: Optional Random instance for seeded/testing picks.

    Raises:
        ValueError: If options is empty.
    """
    if not options:
        raise ValueError("Cannot pick from an empty sequence")
    rng = rng or random.Random()
    return rng.choice(options)
