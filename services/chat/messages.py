"""Per-user chat transcript and the non-deck chat that writes to it."""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from models.database import Deck, Message, Slide
from services.decks.repository import require_identity
from shared.models import Identity, MessageRole
from shared.utils import setup_logging

logger = setup_logging("chat-messages")

MESSAGE_LIST_LIMIT = 100


class MessageLog:
    """Append-only message log scoped to one identity."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, identity: Identity | None, role: MessageRole, content: str) -> Message:
        identity = require_identity(identity)
        message = Message(user_id=identity.subject, role=MessageRole(role).value, content=content)
        self.session.add(message)
        self.session.commit()
        self.session.refresh(message)
        return message

    def list_messages(self, identity: Identity | None, limit: int = MESSAGE_LIST_LIMIT) -> list[Message]:
        """Newest first."""
        if identity is None:
            return []
        result = self.session.execute(
            select(Message)
            .where(Message.user_id == identity.subject)
            .order_by(Message.id.desc())
            .limit(limit)
        )
        return list(result.scalars())

    def clear(self, identity: Identity | None) -> int:
        identity = require_identity(identity)
        result = self.session.execute(delete(Message).where(Message.user_id == identity.subject))
        self.session.commit()
        logger.info("Cleared %d messages for %s", result.rowcount, identity.subject)
        return result.rowcount


class SimpleChat:
    """Chat that is not bound to a deck; both turns are logged."""

    def __init__(self, session: Session):
        self.session = session
        self.log = MessageLog(session)

    def _slide_count(self, identity: Identity) -> int:
        return self.session.execute(
            select(func.count(Slide.id)).join(Deck, Slide.deck_id == Deck.id).where(
                Deck.user_id == identity.subject
            )
        ).scalar_one()

    def chat(self, identity: Identity | None, message: str) -> str:
        identity = require_identity(identity)
        self.log.add(identity, MessageRole.USER, message)

        slide_count = self._slide_count(identity)
        if slide_count == 0:
            status = "Let's create your first slide!"
        else:
            status = f"You currently have {slide_count} slide(s)."
        response = (
            f'I understand you want to: "{message}".\n\n'
            f"{status}\n\n"
            "I can describe the changes your request would make once a planner is connected."
        )

        self.log.add(identity, MessageRole.ASSISTANT, response)
        return response
