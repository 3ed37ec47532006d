"""Admin endpoints for users, journals, tokens, and sheet attributes."""

from uuid import uuid4

from fastapi import APIRouter, HTTPException, Header, Request
from pydantic import BaseModel

from auth import _tokens, create_token, delete_token
import config
from config import save_secret
from engine.store import AttributeStore, save_table
from models.characters import Attribute, Graphic, Journal
from models.table import TableState

router = APIRouter()


class RegisterRequest(BaseModel):
    """Request body for registering a new player or GM."""
    owner_id: str
    name: str
    is_gm: bool = False


class RegisterResponse(BaseModel):
    """Response after registering a new user."""
    api_key: str
    owner_id: str


class DeleteUserResponse(BaseModel):
    """Response after deleting a user."""
    message: str
    journals_released: int


class ChangeSecretRequest(BaseModel):
    """Request body for changing the admin secret."""
    new_secret: str


class ChangeSecretResponse(BaseModel):
    """Response after changing the admin secret."""
    message: str


class CreateJournalRequest(BaseModel):
    """Request body for creating a character journal."""
    name: str
    controlled_by: list[str] = []
    attributes: dict[str, Attribute] = {}   # Initial sheet values, keyed by name


class CreateTokenRequest(BaseModel):
    """Request body for placing a graphic on the table."""
    represents: str | None = None
    subtype: str = "token"
    is_drawing: bool = False


class SetAttributeRequest(BaseModel):
    """Request body for setting a sheet attribute."""
    current: str
    max: str | None = None


def _get_table(request: Request) -> TableState:
    """Get the singleton table state from app state."""
    return request.app.state.table


@router.put("/secret", response_model=ChangeSecretResponse)
def change_admin_secret(
    body: ChangeSecretRequest,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> ChangeSecretResponse:
    """Change the admin secret at runtime.

    Requires the current X-Admin-Secret header. The new secret takes
    effect immediately.
    """
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    if not body.new_secret or len(body.new_secret) < 8:
        raise HTTPException(
            status_code=400,
            detail="New secret must be at least 8 characters",
        )

    config.ADMIN_SECRET = body.new_secret
    save_secret()
    return ChangeSecretResponse(message="Admin secret updated")


@router.post("/register", response_model=RegisterResponse)
def register_user(
    body: RegisterRequest,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> RegisterResponse:
    """Register a new player (or GM) and return an API key."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    try:
        api_key = create_token(body.owner_id, body.name, is_gm=body.is_gm)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return RegisterResponse(api_key=api_key, owner_id=body.owner_id)


@router.get("/users")
def list_users(
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> list[dict]:
    """List all registered users. Does not expose API keys."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    return [
        {"owner_id": user.owner_id, "name": user.name, "is_gm": user.is_gm}
        for user in _tokens.values()
    ]


@router.delete("/users/{owner_id}", response_model=DeleteUserResponse)
def delete_user(
    owner_id: str,
    request: Request,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> DeleteUserResponse:
    """Delete a user and release any journals they control."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    deleted = delete_token(owner_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"owner_id '{owner_id}' not found")

    table = _get_table(request)
    released = 0
    for journal in table.journals.values():
        if owner_id in journal.controlled_by:
            journal.controlled_by.remove(owner_id)
            released += 1
    if released:
        save_table(table, config.TABLE_FILE)

    return DeleteUserResponse(
        message=f"User '{owner_id}' deleted",
        journals_released=released,
    )


@router.post("/journals", response_model=Journal)
def create_journal(
    body: CreateJournalRequest,
    request: Request,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> Journal:
    """Create a character journal with optional initial sheet attributes."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    table = _get_table(request)
    journal = Journal(id=str(uuid4()), name=body.name, controlled_by=body.controlled_by)
    table.journals[journal.id] = journal

    store = AttributeStore(table)
    for name, attribute in body.attributes.items():
        store.write_attribute(journal.id, name, attribute.current, attribute.max)

    save_table(table, config.TABLE_FILE)
    return journal


@router.get("/journals/{journal_id}")
def get_journal(
    journal_id: str,
    request: Request,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> dict:
    """Get a journal and its sheet attributes."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    table = _get_table(request)
    journal = table.journals.get(journal_id)
    if journal is None:
        raise HTTPException(status_code=404, detail=f"Journal '{journal_id}' not found")

    attributes = table.attributes.get(journal_id, {})
    return {
        **journal.model_dump(),
        "attributes": {name: a.model_dump() for name, a in attributes.items()},
    }


@router.put("/journals/{journal_id}/attributes/{name}", response_model=Attribute)
def set_attribute(
    journal_id: str,
    name: str,
    body: SetAttributeRequest,
    request: Request,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> Attribute:
    """Create or update one sheet attribute."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    table = _get_table(request)
    if journal_id not in table.journals:
        raise HTTPException(status_code=404, detail=f"Journal '{journal_id}' not found")

    attribute = AttributeStore(table).write_attribute(journal_id, name, body.current, body.max)
    save_table(table, config.TABLE_FILE)
    return attribute


@router.post("/tokens", response_model=Graphic)
def create_token_graphic(
    body: CreateTokenRequest,
    request: Request,
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
) -> Graphic:
    """Place a graphic on the table, usually a token representing a journal."""
    if x_admin_secret != config.ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    table = _get_table(request)
    if body.represents is not None and body.represents not in table.journals:
        raise HTTPException(status_code=404, detail=f"Journal '{body.represents}' not found")

    graphic = Graphic(
        id=str(uuid4()),
        subtype=body.subtype,
        is_drawing=body.is_drawing,
        represents=body.represents,
    )
    table.graphics[graphic.id] = graphic
    save_table(table, config.TABLE_FILE)
    return graphic
