"""Healing surge and hit dice economy for a single character.

A CharacterResource is built fresh from the sheet for every command and
thrown away afterwards. Each mutating step writes its field back to the
store straight away; nothing is batched.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from config import (
    ATTR_CONSTITUTION,
    ATTR_HEALING_SURGE,
    ATTR_HIT_DICE,
    ATTR_HIT_DIE_SIZE,
    ATTR_HP,
    ATTR_LEVEL,
    EXHAUST_FLAVOR,
)
from engine.dice import pick_random, roll_die
from engine.errors import ErrorKind, SurgeError
from models.resources import HealResult, SurgeState

if TYPE_CHECKING:
    from engine.messaging import Messenger
    from engine.store import AttributeKind, AttributeStore
    from models.characters import CharacterRef

logger = logging.getLogger(__name__)


def calculate_ability_modifier(score: int) -> int:
    """Calculate ability modifier from a score using the 5e formula.

    Args:
        score: The ability score (e.g. 16).

    Returns:
        The modifier (e.g. +3 for score 16).
    """
    return (score - 10) // 2


def _read_int(
    store: AttributeStore,
    character_id: str,
    name: str,
    kind: AttributeKind = "current",
) -> int:
    value = store.read_attribute(character_id, name, kind)
    if value is None or not value.strip():
        raise SurgeError(
            ErrorKind.ATTRIBUTE_MISSING,
            name if kind == "current" else f"{name}_max",
        )
    return int(value)


class CharacterResource:
    """In-memory projection of one character's healing attributes."""

    def __init__(
        self,
        character: CharacterRef,
        store: AttributeStore,
        messenger: Messenger,
        *,
        hp: int,
        max_hp: int,
        hit_dice: int,
        max_hit_dice: int,
        hit_die_size: int,
        con_mod: int,
        level: int,
        healing_surge: SurgeState = SurgeState.READY,
        rng: random.Random | None = None,
    ) -> None:
        self.character = character
        self.store = store
        self.messenger = messenger
        self.hp = hp
        self.max_hp = max_hp
        self.hit_dice = hit_dice
        self.max_hit_dice = max_hit_dice
        self.hit_die_size = hit_die_size
        self.con_mod = con_mod
        self.level = level
        self.healing_surge = healing_surge
        self.rng = rng

    @property
    def character_id(self) -> str:
        return self.character.id

    @classmethod
    def load(
        cls,
        character: CharacterRef,
        store: AttributeStore,
        messenger: Messenger,
        rng: random.Random | None = None,
    ) -> CharacterResource:
        """Read a character's healing attributes from the sheet.

        A missing ``healing_surge`` attribute means the character has never
        used the script: it is created as READY rather than treated as an
        error.

        Raises:
            SurgeError(ATTRIBUTE_MISSING): If a required attribute is absent
                or empty.
        """
        cid = character.id
        hp = _read_int(store, cid, ATTR_HP)
        max_hp = _read_int(store, cid, ATTR_HP, "max")
        hit_dice = _read_int(store, cid, ATTR_HIT_DICE)
        max_hit_dice = _read_int(store, cid, ATTR_HIT_DICE, "max")
        hit_die_size = _read_int(store, cid, ATTR_HIT_DIE_SIZE)
        level = _read_int(store, cid, ATTR_LEVEL)
        constitution = _read_int(store, cid, ATTR_CONSTITUTION)

        surge_value = store.read_attribute(cid, ATTR_HEALING_SURGE)
        if not surge_value:
            logger.info("Creating %s attribute for %s", ATTR_HEALING_SURGE, character.name)
            store.write_attribute(cid, ATTR_HEALING_SURGE, SurgeState.READY.value)
            healing_surge = SurgeState.READY
        else:
            healing_surge = SurgeState(surge_value)

        return cls(
            character,
            store,
            messenger,
            hp=hp,
            max_hp=max_hp,
            hit_dice=hit_dice,
            max_hit_dice=max_hit_dice,
            hit_die_size=hit_die_size,
            con_mod=calculate_ability_modifier(constitution),
            level=level,
            healing_surge=healing_surge,
            rng=rng,
        )

    # -- eligibility -------------------------------------------------------

    def is_healing_surge_ready(self) -> bool:
        return self.healing_surge == SurgeState.READY

    def is_hit_dice_ready(self) -> bool:
        return self.hit_dice > 0

    def is_hurt(self) -> bool:
        return self.hp < self.max_hp

    # -- persistence -------------------------------------------------------

    def _set_hit_dice(self, value: int) -> None:
        self.hit_dice = value
        self.store.write_attribute(self.character_id, ATTR_HIT_DICE, value)

    def _set_healing_surge(self, state: SurgeState) -> None:
        self.healing_surge = state
        self.store.write_attribute(self.character_id, ATTR_HEALING_SURGE, state.value)

    def update_hp(self, heal_amount: int) -> int:
        """Apply healing, capped at max HP. Negative amounts lower HP."""
        self.hp = min(heal_amount + self.hp, self.max_hp)
        self.store.write_attribute(self.character_id, ATTR_HP, self.hp)
        return self.hp

    # -- operations --------------------------------------------------------

    def spend_hit_die_to_heal(self, sender: str | None = None) -> HealResult:
        """Spend one hit die and heal by a roll plus the constitution modifier.

        Checks run in order and the first failure wins; nothing is written
        before a failing check.

        Args:
            sender: Who to whisper the result to.

        Raises:
            SurgeError(HEALING_SURGE_UNUSABLE): The surge is exhausted.
            SurgeError(FULL_HEALTH): HP is already at max.
            SurgeError(NO_HIT_DICE_REMAINING): No hit dice left.
        """
        if not self.is_healing_surge_ready():
            raise SurgeError(ErrorKind.HEALING_SURGE_UNUSABLE)
        if not self.is_hurt():
            raise SurgeError(ErrorKind.FULL_HEALTH)
        if not self.is_hit_dice_ready():
            raise SurgeError(ErrorKind.NO_HIT_DICE_REMAINING)

        self._set_hit_dice(self.hit_dice - 1)

        roll = roll_die(self.hit_die_size, self.rng)
        amount = roll + self.con_mod
        self.update_hp(amount)

        sign = "-" if self.con_mod < 0 else "+"
        self.messenger.send_feedback(
            f"Healed up to [[{roll} [hit die] {sign} {abs(self.con_mod)} [con]]] hp",
            sender,
        )
        logger.info(
            "%s spent a d%d: %d%+d, hp %d/%d, %d hit dice left",
            self.character.name, self.hit_die_size, roll, self.con_mod,
            self.hp, self.max_hp, self.hit_dice,
        )
        return HealResult(
            roll=roll,
            con_mod=self.con_mod,
            amount=amount,
            hp=self.hp,
            hit_dice=self.hit_dice,
        )

    def exhaust(self) -> None:
        """Use up the healing surge until the next short rest."""
        self._set_healing_surge(SurgeState.NOT_READY)
        self.messenger.emote_as(self.character, pick_random(EXHAUST_FLAVOR, self.rng))

    def renew_healing_surge(self) -> None:
        self._set_healing_surge(SurgeState.READY)

    def do_short_rest(self) -> None:
        """Recover a quarter of the character's level in hit dice (at least one).

        When the pool is already full nothing changes, and the surge is left
        as it was.
        """
        self._notify_invigorated()
        if self.hit_dice == self.max_hit_dice:
            return

        recovery = max(1, self.level // 4)
        self._set_hit_dice(min(self.hit_dice + recovery, self.max_hit_dice))
        self.renew_healing_surge()

    def do_long_rest(self) -> None:
        """Recover every hit die and renew the surge."""
        if self.hit_dice != self.max_hit_dice:
            self._set_hit_dice(self.max_hit_dice)
        self.renew_healing_surge()
        self._notify_invigorated()

    def _notify_invigorated(self) -> None:
        self.messenger.send_feedback(f"{self.character.name} feels invigorated.", None)
