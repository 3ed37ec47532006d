"""Outbound chat: feedback whispers, error alerts, and character emotes."""

from __future__ import annotations

from config import CHAT_LOG_LIMIT, FEEDBACK_NAME
from models.characters import CharacterRef
from models.table import ChatMessage, TableState

GM = "gm"


class Messenger:
    """Collects messages produced while handling a command.

    Every message is kept in ``sent`` for the caller and appended to the
    table's chat log, which is trimmed to the most recent entries.
    """

    def __init__(self, table: TableState, speaker: str = FEEDBACK_NAME) -> None:
        self.table = table
        self.speaker = speaker
        self.sent: list[ChatMessage] = []

    def _send(self, message: ChatMessage) -> ChatMessage:
        self.sent.append(message)
        self.table.chat_log.append(message)
        if len(self.table.chat_log) > CHAT_LOG_LIMIT:
            del self.table.chat_log[:-CHAT_LOG_LIMIT]
        return message

    def send_feedback(self, msg: str, name: str | None = GM) -> ChatMessage:
        """Send feedback to the chat.

        Args:
            msg: The message to send.
            name: Who to whisper. Defaults to the GM; None broadcasts to everyone.
        """
        return self._send(ChatMessage(speaker=self.speaker, content=msg, whisper_to=name))

    def send_error(self, msg: str, name: str | None = GM) -> ChatMessage:
        """Whisper an error, highlighted, to the sender (or the GM)."""
        content = f'<span style="color: red; font-weight: bold;">{msg}</span>'
        return self.send_feedback(content, name or GM)

    def emote_as(self, character: CharacterRef, text: str) -> ChatMessage:
        """Emote a line as the character, visible to everyone."""
        return self._send(ChatMessage(
            speaker=character.name,
            content=text,
            is_emote=True,
        ))
