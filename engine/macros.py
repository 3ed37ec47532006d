"""Convenience macro provisioning."""

from __future__ import annotations

import logging

from config import API_INVOKE
from models.table import Macro, TableState

logger = logging.getLogger(__name__)

DEFAULT_MACROS = {
    "HealingSurge": f"!{API_INVOKE} -surge",
    "ShortRest": f"!{API_INVOKE} -short",
    "LongRest": f"!{API_INVOKE} -long",
}


def create_macro_if_absent(
    table: TableState,
    name: str,
    action: str,
    owner_id: str,
    visible_to: str = "all",
) -> Macro | None:
    """Create a token-action macro unless one with the same name exists.

    Returns:
        The new Macro, or None if it already existed.
    """
    if name in table.macros:
        return None
    macro = Macro(name=name, action=action, owner_id=owner_id, visible_to=visible_to)
    table.macros[name] = macro
    logger.info("Created macro %s -> %s", name, action)
    return macro


def provision_macros(table: TableState, owner_id: str) -> list[Macro]:
    """Create the surge and rest macros. Returns the ones newly created."""
    created = []
    for name, action in DEFAULT_MACROS.items():
        macro = create_macro_if_absent(table, name, action, owner_id)
        if macro is not None:
            created.append(macro)
    return created
