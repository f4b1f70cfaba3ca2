"""Owner-scoped persistence for decks and their slides."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from models.database import Deck, Slide
from shared.errors import (
    DeckNotFoundError,
    SlideNotFoundError,
    UnauthenticatedError,
    UnauthorizedError,
)
from shared.models import Identity
from shared.utils import setup_logging

logger = setup_logging("deck-repository")

DECK_PATCH_FIELDS = ("name", "description", "google_slides_id")
SLIDE_PATCH_FIELDS = ("slide_index", "google_slide_id", "title", "content")


@dataclass
class SlideSnapshot:
    """Values for one slide row written by a bulk replace."""

    slide_index: int
    google_slide_id: str | None
    title: str | None
    content: str | None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise UnauthenticatedError()
    return identity


def require_owned_deck(session: Session, identity: Identity | None, deck_id: str) -> Deck:
    """Load a deck and check that the caller owns it.

    Raises UnauthenticatedError, DeckNotFoundError or UnauthorizedError.
    """
    identity = require_identity(identity)
    deck = session.get(Deck, deck_id)
    if deck is None:
        raise DeckNotFoundError()
    if deck.user_id != identity.subject:
        logger.info("Denied deck %s to %s", deck_id, identity.subject)
        raise UnauthorizedError()
    return deck


def require_owned_slide(session: Session, identity: Identity | None, slide_id: str) -> Slide:
    """Load a slide and check ownership through its parent deck."""
    identity = require_identity(identity)
    slide = session.get(Slide, slide_id)
    if slide is None:
        raise SlideNotFoundError()
    require_owned_deck(session, identity, slide.deck_id)
    return slide


class DeckRepository:
    """CRUD over decks, always scoped to the calling identity."""

    def __init__(self, session: Session):
        self.session = session

    def create_deck(
        self,
        identity: Identity | None,
        name: str,
        google_slides_id: str | None = None,
        description: str | None = None,
    ) -> Deck:
        identity = require_identity(identity)
        now = _utc_now()
        deck = Deck(
            user_id=identity.subject,
            name=name,
            description=description,
            google_slides_id=google_slides_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(deck)
        self.session.commit()
        self.session.refresh(deck)
        logger.info("Created deck %s for %s", deck.id, identity.subject)
        return deck

    def get_deck(self, identity: Identity | None, deck_id: str) -> Deck | None:
        """Return the caller's deck; anonymous callers get None."""
        if identity is None:
            return None
        return require_owned_deck(self.session, identity, deck_id)

    def list_decks(self, identity: Identity | None) -> list[Deck]:
        if identity is None:
            return []
        result = self.session.execute(
            select(Deck).where(Deck.user_id == identity.subject).order_by(Deck.updated_at.desc())
        )
        return list(result.scalars())

    def update_deck(self, identity: Identity | None, deck_id: str, **changes: Any) -> Deck:
        """Apply a sparse patch; keys absent from ``changes`` are left alone."""
        deck = require_owned_deck(self.session, identity, deck_id)
        for field, value in changes.items():
            if field not in DECK_PATCH_FIELDS:
                raise ValueError(f"Unknown deck field: {field}")
            setattr(deck, field, value)
        deck.updated_at = _utc_now()
        self.session.commit()
        self.session.refresh(deck)
        return deck

    def delete_deck(self, identity: Identity | None, deck_id: str) -> None:
        deck = require_owned_deck(self.session, identity, deck_id)
        slides = self.session.scalars(select(Slide).where(Slide.deck_id == deck.id)).all()
        for slide in slides:
            self.session.delete(slide)
        self.session.delete(deck)
        self.session.commit()
        logger.info("Deleted deck %s", deck_id)


class SlideRepository:
    """CRUD over slides; ownership is checked through the parent deck."""

    def __init__(self, session: Session):
        self.session = session

    def list_slides(self, identity: Identity | None, deck_id: str) -> list[Slide]:
        if identity is None:
            return []
        deck = require_owned_deck(self.session, identity, deck_id)
        result = self.session.execute(
            select(Slide).where(Slide.deck_id == deck.id).order_by(Slide.slide_index)
        )
        return list(result.scalars())

    def get_slide(self, identity: Identity | None, slide_id: str) -> Slide | None:
        if identity is None:
            return None
        return require_owned_slide(self.session, identity, slide_id)

    def create_slide(
        self,
        identity: Identity | None,
        deck_id: str,
        slide_index: int,
        google_slide_id: str | None = None,
        title: str | None = None,
        content: str | None = None,
    ) -> Slide:
        deck = require_owned_deck(self.session, identity, deck_id)
        now = _utc_now()
        slide = Slide(
            deck_id=deck.id,
            slide_index=slide_index,
            google_slide_id=google_slide_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.session.add(slide)
        self.session.commit()
        self.session.refresh(slide)
        return slide

    def update_slide(self, identity: Identity | None, slide_id: str, **changes: Any) -> Slide:
        slide = require_owned_slide(self.session, identity, slide_id)
        for field, value in changes.items():
            if field not in SLIDE_PATCH_FIELDS:
                raise ValueError(f"Unknown slide field: {field}")
            setattr(slide, field, value)
        slide.updated_at = _utc_now()
        self.session.commit()
        self.session.refresh(slide)
        return slide

    def delete_slide(self, identity: Identity | None, slide_id: str) -> None:
        slide = require_owned_slide(self.session, identity, slide_id)
        self.session.delete(slide)
        self.session.commit()

    def replace_slides(self, deck: Deck, snapshots: list[SlideSnapshot]) -> list[Slide]:
        """Delete every slide of ``deck`` and insert ``snapshots`` in one commit.

        The caller must already have checked ownership of ``deck``.
        """
        self.session.execute(delete(Slide).where(Slide.deck_id == deck.id))
        now = _utc_now()
        slides = [
            Slide(
                deck_id=deck.id,
                slide_index=snapshot.slide_index,
                google_slide_id=snapshot.google_slide_id,
                title=snapshot.title,
                content=snapshot.content,
                created_at=now,
                updated_at=now,
            )
            for snapshot in snapshots
        ]
        self.session.add_all(slides)
        self.session.commit()
        return slides
