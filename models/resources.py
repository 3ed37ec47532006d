"""Healing surge resource models for Healing Surge Server."""

from enum import Enum

from pydantic import BaseModel


class SurgeState(str, Enum):
    """Whether a character's healing surge can be used."""
    READY = "ready"
    NOT_READY = "not_ready"         # Exhausted until the next short rest


class HealResult(BaseModel):
    """Outcome of spending one hit die."""
    roll: int                       # Face rolled on the hit die
    con_mod: int
    amount: int                     # roll + con_mod, never floored
    hp: int                         # Hit points after healing
    hit_dice: int                   # Hit dice left after spending
