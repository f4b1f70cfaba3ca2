"""Google Slides operations exposed to the UI, and the deck connect/link/import flows."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from models.database import Deck, GoogleToken
from services.decks.repository import DeckRepository, require_identity, require_owned_deck
from services.google_slides.gateway import GoogleOAuthClient, GoogleSlidesGateway
from services.google_slides.sync import SlideSyncEngine, SyncResult
from services.google_slides.token_store import TokenStore, resolve_credential
from shared.errors import ExternalAuthRequiredError, InvalidPresentationReferenceError
from shared.models import Identity, Presentation
from shared.utils import extract_google_slides_id, now_ms, setup_logging

logger = setup_logging("google-slides-service")

IMPORTED_DECK_NAME = "Imported Deck"


class GoogleSlidesService:
    """Credential-checked Google Slides calls bound to one request's session."""

    def __init__(
        self,
        session: Session,
        gateway: GoogleSlidesGateway | None = None,
        oauth_client: GoogleOAuthClient | None = None,
    ) -> None:
        self.session = session
        self.gateway = gateway or GoogleSlidesGateway()
        self.oauth_client = oauth_client or GoogleOAuthClient()
        self.token_store = TokenStore(session)
        self.decks = DeckRepository(session)
        self.sync_engine = SlideSyncEngine(session, self.gateway, self.oauth_client)

    async def _access_token(self, identity: Identity | None) -> str:
        credential = await resolve_credential(self.token_store, identity, self.oauth_client)
        return credential.access_token

    # Credentials

    def store_token(
        self,
        identity: Identity | None,
        access_token: str,
        expires_at: int,
        refresh_token: str | None = None,
    ) -> str:
        identity = require_identity(identity)
        return self.token_store.store_token(
            identity.subject, access_token, expires_at, refresh_token=refresh_token
        )

    def get_token(self, identity: Identity | None) -> GoogleToken | None:
        if identity is None:
            return None
        return self.token_store.get_token(identity.subject)

    def complete_oauth(
        self,
        identity: Identity | None,
        access_token: str | None,
        expires_in: int | None,
        refresh_token: str | None = None,
        error: str | None = None,
    ) -> str:
        """Store the token returned by Google's consent redirect."""
        identity = require_identity(identity)
        if error:
            raise ExternalAuthRequiredError(f"OAuth error: {error}")
        if not access_token or not expires_in:
            raise ExternalAuthRequiredError("No access token received")
        expires_at = now_ms() + int(expires_in) * 1000
        return self.token_store.store_token(
            identity.subject, access_token, expires_at, refresh_token=refresh_token
        )

    # Pass-through Slides operations

    async def create_presentation(self, identity: Identity | None, title: str) -> Presentation:
        access_token = await self._access_token(require_identity(identity))
        return await self.gateway.create_presentation(access_token, title)

    async def get_presentation(self, identity: Identity | None, presentation_id: str) -> Presentation:
        access_token = await self._access_token(require_identity(identity))
        return await self.gateway.get_presentation(access_token, presentation_id)

    async def update_slide(
        self,
        identity: Identity | None,
        presentation_id: str,
        slide_id: str,
        requests: list[dict[str, Any]],
    ) -> dict[str, Any]:
        access_token = await self._access_token(require_identity(identity))
        logger.info("Applying %d requests to slide %s of %s", len(requests), slide_id, presentation_id)
        return await self.gateway.batch_update(access_token, presentation_id, requests)

    async def add_slide(
        self, identity: Identity | None, presentation_id: str, insertion_index: int | None = None
    ) -> dict[str, Any]:
        access_token = await self._access_token(require_identity(identity))
        return await self.gateway.add_slide(access_token, presentation_id, insertion_index)

    async def link_existing_presentation(
        self, identity: Identity | None, presentation_id: str
    ) -> Presentation:
        access_token = await self._access_token(require_identity(identity))
        return await self.gateway.link_existing(access_token, presentation_id)

    async def sync_slides(
        self, identity: Identity | None, deck_id: str, presentation_id: str
    ) -> SyncResult:
        return await self.sync_engine.sync_slides(identity, deck_id, presentation_id)

    # Deck workflows

    @staticmethod
    def parse_presentation_reference(reference: str) -> str:
        presentation_id = extract_google_slides_id(reference)
        if presentation_id is None:
            raise InvalidPresentationReferenceError()
        return presentation_id

    async def connect_deck(self, identity: Identity | None, deck_id: str) -> Deck:
        """Create a new Google presentation named after the deck and link it."""
        deck = require_owned_deck(self.session, identity, deck_id)
        presentation = await self.create_presentation(identity, deck.name)
        return self.decks.update_deck(
            identity, deck_id, google_slides_id=presentation.presentation_id
        )

    async def link_deck(
        self, identity: Identity | None, deck_id: str, reference: str
    ) -> tuple[Deck, SyncResult]:
        """Point an existing deck at a Google presentation and pull its slides."""
        presentation_id = self.parse_presentation_reference(reference)
        deck = require_owned_deck(self.session, identity, deck_id)
        presentation = await self.link_existing_presentation(identity, presentation_id)

        deck = self.decks.update_deck(
            identity,
            deck_id,
            google_slides_id=presentation_id,
            name=presentation.title or deck.name,
        )
        result = await self.sync_slides(identity, deck_id, presentation_id)
        return deck, result

    async def import_presentation(
        self, identity: Identity | None, reference: str
    ) -> tuple[Deck, SyncResult]:
        """Create a deck from an existing Google presentation."""
        presentation_id = self.parse_presentation_reference(reference)
        presentation = await self.link_existing_presentation(identity, presentation_id)

        deck = self.decks.create_deck(
            identity,
            name=presentation.title or IMPORTED_DECK_NAME,
            google_slides_id=presentation_id,
        )
        result = await self.sync_slides(identity, deck.id, presentation_id)
        return deck, result
