"""Tabletop state, chat, and macro models for Healing Surge Server."""

from pydantic import BaseModel

from models.characters import Attribute, Graphic, Journal


class Macro(BaseModel):
    """A convenience macro shown to players."""
    name: str
    action: str                     # Command string the macro runs
    owner_id: str
    visible_to: str = "all"
    is_token_action: bool = True


class ChatMessage(BaseModel):
    """A message sent to the tabletop chat."""
    speaker: str
    content: str
    whisper_to: str | None = None   # None = broadcast
    is_emote: bool = False

    def render(self) -> str:
        """Render the message the way the host chat expects it."""
        if self.is_emote:
            return f"/em {self.content}"
        if self.whisper_to is not None:
            return f'/w "{self.whisper_to}" {self.content}'
        return self.content


class TableState(BaseModel):
    """The full state of the tabletop the add-on reads and writes."""
    journals: dict[str, Journal] = {}        # journal_id -> Journal
    graphics: dict[str, Graphic] = {}        # graphic_id -> Graphic
    attributes: dict[str, dict[str, Attribute]] = {}  # journal_id -> name -> Attribute
    macros: dict[str, Macro] = {}            # macro name -> Macro
    chat_log: list[ChatMessage] = []
