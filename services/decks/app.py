"""Deck and slide CRUD routes."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from database import get_db
from services.auth import get_current_identity, get_optional_identity
from services.decks.repository import DeckRepository, SlideRepository
from shared.errors import DeckNotFoundError, SlideNotFoundError
from shared.models import (
    DeckCreateRequest,
    DeckResponse,
    DeckUpdateRequest,
    Identity,
    SlideCreateRequest,
    SlideResponse,
    SlideUpdateRequest,
)

router = APIRouter()


@router.get("/decks", response_model=list[DeckResponse])
async def list_decks(
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> list[DeckResponse]:
    """List the caller's decks (empty for anonymous callers)."""
    return DeckRepository(db).list_decks(identity)


@router.post("/decks", response_model=DeckResponse, status_code=201)
async def create_deck(
    request: DeckCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> DeckResponse:
    return DeckRepository(db).create_deck(
        identity,
        name=request.name,
        google_slides_id=request.google_slides_id,
        description=request.description,
    )


@router.get("/decks/{deck_id}", response_model=DeckResponse)
async def get_deck(
    deck_id: str,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> DeckResponse:
    deck = DeckRepository(db).get_deck(identity, deck_id)
    if deck is None:
        raise DeckNotFoundError()
    return deck


@router.patch("/decks/{deck_id}", response_model=DeckResponse)
async def update_deck(
    deck_id: str,
    request: DeckUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> DeckResponse:
    """Apply only the fields present in the request body."""
    changes = request.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)
    return DeckRepository(db).update_deck(identity, deck_id, **changes)


@router.delete("/decks/{deck_id}", status_code=204)
async def delete_deck(
    deck_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Response:
    DeckRepository(db).delete_deck(identity, deck_id)
    return Response(status_code=204)


@router.get("/decks/{deck_id}/slides", response_model=list[SlideResponse])
async def list_slides(
    deck_id: str,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> list[SlideResponse]:
    return SlideRepository(db).list_slides(identity, deck_id)


@router.post("/decks/{deck_id}/slides", response_model=SlideResponse, status_code=201)
async def create_slide(
    deck_id: str,
    request: SlideCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> SlideResponse:
    return SlideRepository(db).create_slide(identity, deck_id, **request.model_dump())


@router.get("/slides/{slide_id}", response_model=SlideResponse)
async def get_slide(
    slide_id: str,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> SlideResponse:
    slide = SlideRepository(db).get_slide(identity, slide_id)
    if slide is None:
        raise SlideNotFoundError()
    return slide


@router.patch("/slides/{slide_id}", response_model=SlideResponse)
async def update_slide(
    slide_id: str,
    request: SlideUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> SlideResponse:
    changes = request.model_dump(exclude_unset=True)
    if changes.get("slide_index") is None:
        changes.pop("slide_index", None)
    return SlideRepository(db).update_slide(identity, slide_id, **changes)


@router.delete("/slides/{slide_id}", status_code=204)
async def delete_slide(
    slide_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Response:
    SlideRepository(db).delete_slide(identity, slide_id)
    return Response(status_code=204)
