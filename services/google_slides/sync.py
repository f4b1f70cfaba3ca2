"""Rebuild a deck's local slides from its Google Slides presentation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from sqlalchemy.orm import Session

from services.decks.repository import SlideRepository, SlideSnapshot, require_owned_deck
from services.google_slides.gateway import GoogleOAuthClient, GoogleSlidesGateway
from services.google_slides.token_store import TokenStore, resolve_credential
from shared.models import Identity
from shared.utils import setup_logging, validate_text_length

logger = setup_logging("slide-sync")

TITLE_MAX_LENGTH = 100
CONTENT_MAX_LENGTH = 500


class SyncResult(BaseModel):
    slide_count: int
    presentation_title: str | None = None
    slide_ids: list[str]


def extract_slide_text(slide: dict[str, Any]) -> str:
    """Concatenate every text run on a slide in API element order.

    Text from separate shapes is joined with no separator. Elements without a
    text-bearing shape (images, tables, lines) are skipped.
    """
    parts: list[str] = []
    for element in slide.get("pageElements") or []:
        shape = element.get("shape") or {}
        text = shape.get("text") or {}
        for text_element in text.get("textElements") or []:
            content = (text_element.get("textRun") or {}).get("content")
            if content:
                parts.append(content)
    return "".join(parts)


def snapshot_from_remote(index: int, slide: dict[str, Any]) -> SlideSnapshot:
    text = extract_slide_text(slide)
    return SlideSnapshot(
        slide_index=index,
        google_slide_id=slide.get("objectId"),
        title=validate_text_length(text, TITLE_MAX_LENGTH) or f"Slide {index + 1}",
        content=validate_text_length(text, CONTENT_MAX_LENGTH),
    )


class SlideSyncEngine:
    """Destructive reconciliation of local slides against Google Slides.

    Every sync wipes the deck's slides and recreates one row per remote slide.
    There is no diffing and no reuse of rows by Google object id.
    """

    def __init__(
        self,
        session: Session,
        gateway: GoogleSlidesGateway,
        oauth_client: GoogleOAuthClient | None = None,
    ) -> None:
        self.session = session
        self.gateway = gateway
        self.oauth_client = oauth_client
        self.token_store = TokenStore(session)
        self.slides = SlideRepository(session)

    async def sync_slides(
        self, identity: Identity | None, deck_id: str, presentation_id: str
    ) -> SyncResult:
        deck = require_owned_deck(self.session, identity, deck_id)
        credential = await resolve_credential(self.token_store, identity, self.oauth_client)

        presentation = await self.gateway.get_presentation(credential.access_token, presentation_id)
        remote_slides = presentation.slides or []

        snapshots = [snapshot_from_remote(i, slide) for i, slide in enumerate(remote_slides)]
        created = self.slides.replace_slides(deck, snapshots)

        logger.info(
            "Synced deck %s from presentation %s: %d slides",
            deck_id,
            presentation_id,
            len(remote_slides),
        )
        return SyncResult(
            slide_count=len(remote_slides),
            presentation_title=presentation.title,
            slide_ids=[slide.id for slide in created],
        )
