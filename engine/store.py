"""Sheet attribute storage and table state persistence."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Literal

from models.characters import Attribute
from models.table import TableState

AttributeKind = Literal["current", "max"]

# Serializes saves across request threads
_save_lock = threading.Lock()


class AttributeStore:
    """Reads and writes character sheet attributes held in the table state.

    Writes land in the table immediately. When ``path`` is set, every write
    is also flushed to disk, so a later failure in the same command does not
    lose the steps that already completed.
    """

    def __init__(self, table: TableState, path: str | None = None) -> None:
        self.table = table
        self.path = path

    def read_attribute(
        self,
        character_id: str,
        name: str,
        kind: AttributeKind = "current",
    ) -> str | None:
        """Return the attribute value, or None if the attribute does not exist."""
        attribute = self.table.attributes.get(character_id, {}).get(name)
        if attribute is None:
            return None
        return attribute.current if kind == "current" else attribute.max

    def write_attribute(
        self,
        character_id: str,
        name: str,
        current: str | int,
        max: str | int | None = None,
    ) -> Attribute:
        """Set an attribute, creating it if it does not exist.

        Args:
            character_id: Journal id owning the attribute.
            name: Attribute name.
            current: New current value.
            max: New max value. Left untouched when None.

        Returns:
            The stored attribute.
        """
        sheet = self.table.attributes.setdefault(character_id, {})
        attribute = sheet.get(name)
        if attribute is None:
            attribute = Attribute(name=name)
            sheet[name] = attribute
        attribute.current = str(current)
        if max is not None:
            attribute.max = str(max)
        if self.path is not None:
            save_table(self.table, self.path)
        return attribute


def save_table(table: TableState, path: str) -> None:
    """Persist table state to a JSON file.

    Writes to a uniquely named temporary file in the same directory, then
    renames it over the target. Concurrent saves are serialized.

    Args:
        table: The table state to save.
        path: File path to write to.
    """
    directory = os.path.dirname(os.path.abspath(path))
    with _save_lock:
        data = table.model_dump(mode="json")
        with tempfile.NamedTemporaryFile(
            "w", dir=directory, prefix=".table-", suffix=".tmp", delete=False,
        ) as f:
            json.dump(data, f)
            tmp_path = f.name
        try:
            os.replace(tmp_path, path)
        except OSError:
            os.unlink(tmp_path)
            raise


def load_table(path: str) -> TableState | None:
    """Load table state from a JSON file.

    Returns:
        The loaded TableState, or None if the file doesn't exist.
    """
    if not Path(path).exists():
        return None
    with open(path) as f:
        data = json.load(f)
    return TableState.model_validate(data)
