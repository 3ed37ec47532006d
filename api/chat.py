"""Chat command submission and chat log endpoints."""

from fastapi import APIRouter, Depends, Query, Request

import config
from auth import User, get_current_user
from engine.router import handle_input
from engine.store import save_table
from models.chat import ChatCommand, ChatEvent, CommandResponse
from models.table import TableState

router = APIRouter()


def _get_table(request: Request) -> TableState:
    """Get the singleton table state from app state."""
    return request.app.state.table


@router.post("", response_model=CommandResponse)
def submit_chat(
    body: ChatCommand,
    request: Request,
    user: User = Depends(get_current_user),
) -> CommandResponse:
    """Submit a chat message as the authenticated user.

    The sender name and GM privilege come from the user's API key, not the
    request body.
    """
    table = _get_table(request)
    event = ChatEvent(
        type=body.type,
        content=body.content,
        who=f"{user.name} (GM)" if user.is_gm else user.name,
        player_id=user.owner_id,
        is_gm=user.is_gm,
        selected=body.selected,
    )
    response = handle_input(event, table, path=config.TABLE_FILE)
    if response.handled:
        save_table(table, config.TABLE_FILE)
    return response


@router.get("/log")
def get_chat_log(
    request: Request,
    limit: int = Query(50, ge=1, le=config.CHAT_LOG_LIMIT),
) -> list[dict]:
    """Get the most recent chat messages, oldest first."""
    table = _get_table(request)
    return [
        {**message.model_dump(), "rendered": message.render()}
        for message in table.chat_log[-limit:]
    ]
