"""Token-to-character resolution."""

from __future__ import annotations

from config import ATTR_NAME, ATTR_NPC
from engine.errors import ErrorKind, SurgeError
from engine.store import AttributeStore
from models.characters import CharacterRef, Graphic
from models.table import TableState


def get_token(selection: list[str], table: TableState) -> Graphic:
    """Return the single selected token.

    Raises:
        SurgeError(SELECTION_INVALID): Unless exactly one graphic is selected
            and it is a token, not a drawing.
    """
    if not selection or len(selection) != 1:
        raise SurgeError(ErrorKind.SELECTION_INVALID)
    graphic = table.graphics.get(selection[0])
    if graphic is None or graphic.subtype != "token" or graphic.is_drawing:
        raise SurgeError(ErrorKind.SELECTION_INVALID)
    return graphic


def resolve_character(
    selection: list[str],
    table: TableState,
    player_id: str,
    is_gm: bool = False,
) -> CharacterRef:
    """Resolve the selected token to the character journal it represents.

    The sheet's ``name`` attribute takes precedence over the journal name,
    and ``npc == "1"`` marks the character as an NPC. Players may only act
    through journals they control; the GM may act through any.

    Raises:
        SurgeError(SELECTION_INVALID): If the selection is not a single token
            representing a known journal the player controls.
    """
    token = get_token(selection, table)
    journal = table.journals.get(token.represents) if token.represents else None
    if journal is None:
        raise SurgeError(ErrorKind.SELECTION_INVALID)
    if not is_gm and player_id not in journal.controlled_by:
        raise SurgeError(ErrorKind.SELECTION_INVALID)

    store = AttributeStore(table)
    name = store.read_attribute(journal.id, ATTR_NAME) or journal.name
    is_npc = store.read_attribute(journal.id, ATTR_NPC) == "1"
    return CharacterRef(id=journal.id, name=name, is_npc=is_npc)
