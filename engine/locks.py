"""Optional per-character serialization of commands."""

from __future__ import annotations

import threading
from contextlib import contextmanager, nullcontext
from typing import Iterator

_registry_lock = threading.Lock()
_character_locks: dict[str, threading.Lock] = {}


def get_character_lock(character_id: str) -> threading.Lock:
    """Return the lock for a character, creating it on first use."""
    with _registry_lock:
        lock = _character_locks.get(character_id)
        if lock is None:
            lock = threading.Lock()
            _character_locks[character_id] = lock
        return lock


@contextmanager
def character_guard(character_id: str, enabled: bool) -> Iterator[None]:
    """Hold the character's lock for the block when ``enabled``.

    Without it, two commands for the same character can both read the same
    hit dice count before either writes it back.
    """
    with get_character_lock(character_id) if enabled else nullcontext():
        yield
