"""Inbound chat event and command response models."""

from pydantic import BaseModel

from models.table import ChatMessage


class ChatEvent(BaseModel):
    """A chat message delivered by the host to the add-on."""
    type: str = "api"               # Only "api" messages are handled
    content: str
    who: str                        # Display name of the sender
    player_id: str
    is_gm: bool = False
    selected: list[str] = []        # Selected graphic ids


class ChatCommand(BaseModel):
    """Request body for submitting a chat command over HTTP."""
    content: str
    type: str = "api"
    selected: list[str] = []


class CommandResponse(BaseModel):
    """Messages produced while handling one chat event."""
    handled: bool
    messages: list[ChatMessage] = []
