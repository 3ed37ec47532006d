"""Error kinds surfaced to players while handling a command."""

from enum import Enum


class ErrorKind(str, Enum):
    """Every failure the command boundary knows how to report."""
    # Validation errors
    ATTRIBUTE_MISSING = "attribute_missing"
    SELECTION_INVALID = "selection_invalid"
    RESTRICTED_ACCESS = "restricted_access"
    UNKNOWN_COMMAND = "unknown_command"
    # Domain gates
    HEALING_SURGE_UNUSABLE = "healing_surge_unusable"
    FULL_HEALTH = "full_health"
    NO_HIT_DICE_REMAINING = "no_hit_dice_remaining"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_validation(self) -> bool:
        return self in _VALIDATION_KINDS


_LABELS = {
    ErrorKind.ATTRIBUTE_MISSING: "Attribute Missing",
    ErrorKind.SELECTION_INVALID: "Invalid Selection",
    ErrorKind.RESTRICTED_ACCESS: "Restricted Access",
    ErrorKind.UNKNOWN_COMMAND: "Unknown Command",
    ErrorKind.HEALING_SURGE_UNUSABLE: "Healing Surge Unusable",
    ErrorKind.FULL_HEALTH: "Full Health",
    ErrorKind.NO_HIT_DICE_REMAINING: "No Hit Dice Remaining",
}

_VALIDATION_KINDS = frozenset({
    ErrorKind.ATTRIBUTE_MISSING,
    ErrorKind.SELECTION_INVALID,
    ErrorKind.RESTRICTED_ACCESS,
    ErrorKind.UNKNOWN_COMMAND,
})


class SurgeError(Exception):
    """A known, player-facing failure.

    Callers switch on ``kind``. ``detail`` carries the payload for kinds that
    have one: the attribute name for ATTRIBUTE_MISSING and the flag given for
    UNKNOWN_COMMAND.
    """

    def __init__(self, kind: ErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.kind == ErrorKind.ATTRIBUTE_MISSING:
            return f"The character sheet has no value for '{self.detail}'."
        if self.kind == ErrorKind.SELECTION_INVALID:
            return "A token must be selected before using this script."
        if self.kind == ErrorKind.RESTRICTED_ACCESS:
            return "Only the GM can use this command."
        if self.kind == ErrorKind.UNKNOWN_COMMAND:
            return (
                f"Unrecognized command '{self.detail or ''}'. "
                "Use -surge, -short, -long, -exhaust or -initialize."
            )
        if self.kind == ErrorKind.HEALING_SURGE_UNUSABLE:
            return "Your healing surge is exhausted until you finish a short rest."
        if self.kind == ErrorKind.FULL_HEALTH:
            return "You are already at full health."
        if self.kind == ErrorKind.NO_HIT_DICE_REMAINING:
            return "You are all out of hit dice to spend."
        return self.kind.value

    def __str__(self) -> str:
        return f"{self.kind.label}: {self.message}"
