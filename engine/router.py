"""Chat command routing: parse, resolve the character, dispatch, report."""

from __future__ import annotations

import logging
import random

import config
from config import API_INVOKE
from engine.characters import resolve_character
from engine.errors import ErrorKind, SurgeError
from engine.locks import character_guard
from engine.macros import provision_macros
from engine.messaging import Messenger
from engine.resource import CharacterResource
from engine.store import AttributeStore
from models.chat import ChatEvent, CommandResponse
from models.table import TableState

logger = logging.getLogger(__name__)

PREFIX = f"!{API_INVOKE}"
SURGE_COMMAND = f"{PREFIX} -surge"
EXHAUST_COMMAND = f"{PREFIX} -exhaust"

FLAG_INITIALIZE = "-initialize"
FLAG_SURGE = "-surge"
FLAG_SHORT = "-short"
FLAG_LONG = "-long"
FLAG_EXHAUST = "-exhaust"
CHARACTER_FLAGS = (FLAG_SURGE, FLAG_SHORT, FLAG_LONG, FLAG_EXHAUST)


def parse_command(content: str) -> str | None:
    """Return the flag following the invocation prefix.

    Returns:
        The flag (possibly empty), or None if the message is not addressed
        to this script.
    """
    content = content.strip()
    if not content.startswith(PREFIX):
        return None
    rest = content[len(PREFIX):]
    if rest and not rest[0].isspace():
        return None  # e.g. "!ihsfoo"
    args = rest.split()
    return args[0] if args else ""


def continuation_prompt() -> str:
    """Ask whether to spend another hit die, as two chat buttons."""
    return (
        "Spend another hit die? "
        f"[Yes]({SURGE_COMMAND}) [No]({EXHAUST_COMMAND})"
    )


def surge(resource: CharacterResource, messenger: Messenger, sender: str) -> None:
    """Heal once, then offer another die or exhaust the surge."""
    resource.spend_hit_die_to_heal(sender)
    if resource.is_hurt() and resource.is_hit_dice_ready():
        messenger.send_feedback(continuation_prompt(), sender)
    else:
        resource.exhaust()


def handle_input(
    event: ChatEvent,
    table: TableState,
    path: str | None = None,
    rng: random.Random | None = None,
) -> CommandResponse:
    """Handle one inbound chat event.

    Known failures are whispered to the sender. Anything else is logged and
    the command ends without further effect.

    Args:
        event: The chat event from the host.
        table: Table state to read and write.
        path: If set, attribute writes are flushed to this file immediately.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        CommandResponse with the messages emitted.
    """
    if event.type != "api":
        return CommandResponse(handled=False)

    flag = parse_command(event.content)
    if flag is None:
        return CommandResponse(handled=False)

    # Throw away the GM tag because that breaks whispers
    sender = event.who.replace(" (GM)", "")
    messenger = Messenger(table)

    try:
        if flag == FLAG_INITIALIZE:
            if not event.is_gm:
                raise SurgeError(ErrorKind.RESTRICTED_ACCESS)
            created = provision_macros(table, event.player_id)
            names = ", ".join(m.name for m in created) or "none (already present)"
            messenger.send_feedback(f"Macros created: {names}", sender)
        elif flag in CHARACTER_FLAGS:
            character = resolve_character(
                event.selected, table, event.player_id, is_gm=event.is_gm,
            )
            store = AttributeStore(table, path)
            with character_guard(character.id, config.SERIALIZE_PER_CHARACTER):
                resource = CharacterResource.load(character, store, messenger, rng)
                if flag == FLAG_SURGE:
                    surge(resource, messenger, sender)
                elif flag == FLAG_SHORT:
                    resource.do_short_rest()
                elif flag == FLAG_LONG:
                    resource.do_long_rest()
                else:
                    resource.exhaust()
        else:
            raise SurgeError(ErrorKind.UNKNOWN_COMMAND, flag)
    except SurgeError as e:
        log = logger.warning if e.kind.is_validation else logger.info
        log("Command %r from %s failed: %s", event.content, sender, e)
        messenger.send_error(str(e), sender)
    except Exception:
        logger.exception("Unexpected error handling %r from %s", event.content, sender)

    return CommandResponse(handled=True, messages=messenger.sent)
