"""API key authentication for Healing Surge Server."""

import json
import os
import secrets
from pathlib import Path

from fastapi import HTTPException, Request
from pydantic import BaseModel

from config import TOKENS_FILE


class User(BaseModel):
    """A registered player or GM."""
    owner_id: str
    name: str                       # Display name used as the chat sender
    is_gm: bool = False


# In-memory token store: api_key -> User
_tokens: dict[str, User] = {}


def load_tokens(path: str = TOKENS_FILE) -> dict[str, User]:
    """Load token store from JSON file.

    Returns:
        Dict mapping API keys to User objects.
    """
    _tokens.clear()
    if not Path(path).exists():
        return _tokens
    with open(path) as f:
        data = json.load(f)
    _tokens.update({key: User(**value) for key, value in data.items()})
    return _tokens


def save_tokens(path: str | None = None) -> None:
    """Persist token store to JSON file (atomic write)."""
    path = path or TOKENS_FILE
    tmp_path = path + ".tmp"
    data = {key: user.model_dump() for key, user in _tokens.items()}
    with open(tmp_path, "w") as f:
        json.dump(data, f, indent=2)
    os.replace(tmp_path, path)


def create_token(owner_id: str, name: str, is_gm: bool = False) -> str:
    """Generate a new API key for a user and persist it.

    Raises:
        ValueError: If owner_id is already registered.
    """
    for user in _tokens.values():
        if user.owner_id == owner_id:
            raise ValueError(f"owner_id '{owner_id}' is already registered")

    api_key = "sk_" + secrets.token_hex(32)
    _tokens[api_key] = User(owner_id=owner_id, name=name, is_gm=is_gm)
    save_tokens()
    return api_key


def get_current_user(request: Request) -> User:
    """FastAPI dependency: extract and validate Bearer token.

    Raises:
        HTTPException 401: If token is missing or invalid.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = auth_header[len("Bearer "):]
    user = _tokens.get(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid API key")

    return user


def delete_token(owner_id: str) -> bool:
    """Remove a user and their API key from the token store.

    Returns:
        True if the user was found and deleted, False if not found.
    """
    key_to_delete = None
    for key, user in _tokens.items():
        if user.owner_id == owner_id:
            key_to_delete = key
            break
    if key_to_delete is None:
        return False
    del _tokens[key_to_delete]
    save_tokens()
    return True
