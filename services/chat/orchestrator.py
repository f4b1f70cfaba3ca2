"""
Deck-scoped chat.

``chat`` answers with a fixed template plus two signals the UI acts on:
``needs_google_auth`` and ``can_execute``. A planner that emits Slides API
requests would replace ``compose_response`` and hand its output to
``execute_slides_update``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from sqlalchemy.orm import Session

from models.database import Deck, GoogleToken, Slide
from services.decks.repository import SlideRepository, require_identity, require_owned_deck
from services.google_slides.gateway import GoogleOAuthClient, GoogleSlidesGateway
from services.google_slides.token_store import TokenStore, resolve_credential
from shared.errors import DeckNotLinkedError, SlideNotFoundError
from shared.models import Identity
from shared.utils import setup_logging

logger = setup_logging("chat-orchestrator")


class ChatResult(BaseModel):
    response: str
    needs_google_auth: bool
    can_execute: bool


def compose_response(
    message: str,
    deck: Deck,
    slide_count: int,
    slide: Slide | None,
    credential_valid: bool,
) -> str:
    lines = [f'I understand you want to: "{message}".', ""]

    if slide is not None:
        label = slide.title or f"Slide {slide.slide_index + 1}"
        lines.append(f'This request is about slide {slide.slide_index + 1} ("{label}") of "{deck.name}".')
    elif slide_count == 0:
        lines.append(f'"{deck.name}" has no slides yet. Let\'s create your first slide!')
    else:
        lines.append(f'"{deck.name}" currently has {slide_count} slide(s).')

    if not deck.google_slides_id:
        lines.append("Connect this deck to Google Slides so changes can be applied.")
    elif not credential_valid:
        lines.append("Your Google connection has expired. Reconnect your Google account to apply changes.")
    else:
        lines.append("Changes can be applied to the linked Google Slides presentation.")

    return "\n".join(lines)


class ChatOrchestrator:
    def __init__(
        self,
        session: Session,
        gateway: GoogleSlidesGateway | None = None,
        oauth_client: GoogleOAuthClient | None = None,
    ) -> None:
        self.session = session
        self.gateway = gateway or GoogleSlidesGateway()
        self.oauth_client = oauth_client
        self.token_store = TokenStore(session)
        self.slides = SlideRepository(session)

    def _credential_valid(self, credential: GoogleToken | None) -> bool:
        return credential is not None and not self.token_store.is_expired(credential)

    async def chat(
        self,
        identity: Identity | None,
        deck_id: str,
        message: str,
        slide_id: str | None = None,
    ) -> ChatResult:
        identity = require_identity(identity)
        deck = require_owned_deck(self.session, identity, deck_id)
        credential = self.token_store.get_token(identity.subject)

        slides = self.slides.list_slides(identity, deck.id)
        slide = None
        if slide_id is not None:
            slide = next((s for s in slides if s.id == slide_id), None)
            if slide is None:
                raise SlideNotFoundError()

        linked = bool(deck.google_slides_id)
        return ChatResult(
            response=compose_response(
                message, deck, len(slides), slide, self._credential_valid(credential)
            ),
            needs_google_auth=not linked,
            can_execute=linked,
        )

    async def execute_slides_update(
        self,
        identity: Identity | None,
        deck_id: str,
        requests: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Forward caller-built Slides requests to the deck's presentation.

        The request objects are not validated here.
        """
        deck = require_owned_deck(self.session, identity, deck_id)
        if not deck.google_slides_id:
            raise DeckNotLinkedError()
        credential = await resolve_credential(self.token_store, identity, self.oauth_client)

        logger.info("Executing %d requests on deck %s", len(requests), deck_id)
        return await self.gateway.batch_update(
            credential.access_token, deck.google_slides_id, requests
        )
