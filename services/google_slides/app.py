"""Google credential, Slides pass-through and deck linking routes."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from services.auth import get_current_identity, get_optional_identity
from services.google_slides.gateway import (
    GoogleOAuthClient,
    GoogleSlidesGateway,
    get_gateway,
    get_oauth_client,
)
from services.google_slides.service import GoogleSlidesService
from shared.models import (
    AddSlideRequest,
    BatchUpdateRequest,
    CreatePresentationRequest,
    DeckResponse,
    Identity,
    LinkDeckResponse,
    LinkPresentationRequest,
    OAuthCallbackRequest,
    OAuthUrlResponse,
    SyncRequest,
    SyncResponse,
    TokenResponse,
    TokenStoreRequest,
    TokenStoreResponse,
)
from shared.utils import config

router = APIRouter(prefix="/google")


def get_google_slides_service(
    db: Session = Depends(get_db),
    gateway: GoogleSlidesGateway = Depends(get_gateway),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> GoogleSlidesService:
    return GoogleSlidesService(db, gateway=gateway, oauth_client=oauth_client)


@router.post("/token", response_model=TokenStoreResponse)
async def store_token(
    request: TokenStoreRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> TokenStoreResponse:
    """Store (or replace) the caller's Google credential."""
    token_id = service.store_token(
        identity,
        access_token=request.access_token,
        expires_at=request.expires_at,
        refresh_token=request.refresh_token,
    )
    return TokenStoreResponse(id=token_id)


@router.get("/token", response_model=TokenResponse | None)
async def get_token(
    identity: Identity | None = Depends(get_optional_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
):
    """Return the caller's Google credential, or null. Expiry is not checked."""
    return service.get_token(identity)


@router.get("/oauth/url", response_model=OAuthUrlResponse)
async def oauth_url(
    redirect_uri: str | None = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> OAuthUrlResponse:
    """Build the Google consent URL for Slides access."""
    target = redirect_uri or config.get("google_oauth_redirect_uri")
    return OAuthUrlResponse(authorization_url=oauth_client.authorization_url(target))


@router.post("/oauth/callback", response_model=TokenStoreResponse)
async def oauth_callback(
    request: OAuthCallbackRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> TokenStoreResponse:
    """Store the token delivered to the consent redirect."""
    token_id = service.complete_oauth(
        identity,
        access_token=request.access_token,
        expires_in=request.expires_in,
        refresh_token=request.refresh_token,
        error=request.error,
    )
    return TokenStoreResponse(id=token_id)


@router.post("/presentations")
async def create_presentation(
    request: CreatePresentationRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> dict[str, Any]:
    presentation = await service.create_presentation(identity, request.title)
    return presentation.model_dump(by_alias=True, exclude_none=True)


@router.post("/presentations/link")
async def link_existing_presentation(
    request: LinkPresentationRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> dict[str, Any]:
    """Validate access to an existing presentation given its URL or id."""
    presentation_id = service.parse_presentation_reference(request.presentation)
    presentation = await service.link_existing_presentation(identity, presentation_id)
    return presentation.model_dump(by_alias=True, exclude_none=True)


@router.get("/presentations/{presentation_id}")
async def get_presentation(
    presentation_id: str,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> dict[str, Any]:
    presentation = await service.get_presentation(identity, presentation_id)
    return presentation.model_dump(by_alias=True, exclude_none=True)


@router.post("/presentations/{presentation_id}/slides/{slide_id}/update")
async def update_slide(
    presentation_id: str,
    slide_id: str,
    request: BatchUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> dict[str, Any]:
    return await service.update_slide(identity, presentation_id, slide_id, request.requests)


@router.post("/presentations/{presentation_id}/slides")
async def add_slide(
    presentation_id: str,
    request: AddSlideRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> dict[str, Any]:
    return await service.add_slide(identity, presentation_id, request.insertion_index)


@router.post("/sync", response_model=SyncResponse)
async def sync_slides(
    request: SyncRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> SyncResponse:
    """Replace the deck's local slides with the presentation's current slides."""
    result = await service.sync_slides(identity, request.deck_id, request.presentation_id)
    return SyncResponse(**result.model_dump())


@router.post("/decks/{deck_id}/connect", response_model=DeckResponse)
async def connect_deck(
    deck_id: str,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> DeckResponse:
    """Create a Google presentation for the deck and link it."""
    return await service.connect_deck(identity, deck_id)


@router.post("/decks/{deck_id}/link", response_model=LinkDeckResponse)
async def link_deck(
    deck_id: str,
    request: LinkPresentationRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> LinkDeckResponse:
    deck, result = await service.link_deck(identity, deck_id, request.presentation)
    return LinkDeckResponse(
        deck=DeckResponse.model_validate(deck), sync=SyncResponse(**result.model_dump())
    )


@router.post("/import", response_model=LinkDeckResponse, status_code=201)
async def import_presentation(
    request: LinkPresentationRequest,
    identity: Identity = Depends(get_current_identity),
    service: GoogleSlidesService = Depends(get_google_slides_service),
) -> LinkDeckResponse:
    """Create a deck from an existing Google presentation and pull its slides."""
    deck, result = await service.import_presentation(identity, request.presentation)
    return LinkDeckResponse(
        deck=DeckResponse.model_validate(deck), sync=SyncResponse(**result.model_dump())
    )
