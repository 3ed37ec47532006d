"""Journal, token, and sheet attribute models for Healing Surge Server."""

from pydantic import BaseModel


class Journal(BaseModel):
    """A character journal entry on the tabletop."""
    id: str                         # Unique identifier
    name: str
    controlled_by: list[str] = []   # owner_ids allowed to act as this character


class Graphic(BaseModel):
    """A graphic placed on the tabletop page."""
    id: str
    subtype: str = "token"          # "token" or "card"
    is_drawing: bool = False
    represents: str | None = None   # Journal id this token stands for


class Attribute(BaseModel):
    """A single sheet attribute. Values are stored as text, like the host does."""
    name: str                       # e.g., "hit_dice"
    current: str = ""
    max: str = ""


class CharacterRef(BaseModel):
    """The acting character resolved from a token selection."""
    id: str
    name: str
    is_npc: bool = False
