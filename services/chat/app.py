"""Chat routes: deck-scoped chat, Slides execution and the message log."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from services.auth import get_current_identity, get_optional_identity
from services.chat.messages import MESSAGE_LIST_LIMIT, MessageLog, SimpleChat
from services.chat.orchestrator import ChatOrchestrator
from services.google_slides.gateway import (
    GoogleOAuthClient,
    GoogleSlidesGateway,
    get_gateway,
    get_oauth_client,
)
from shared.models import (
    ChatRequest,
    ChatResponse,
    ExecuteSlidesUpdateRequest,
    Identity,
    MessageRequest,
    MessageResponse,
    SimpleChatResponse,
)

router = APIRouter(prefix="/chat")


def get_orchestrator(
    db: Session = Depends(get_db),
    gateway: GoogleSlidesGateway = Depends(get_gateway),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> ChatOrchestrator:
    return ChatOrchestrator(db, gateway=gateway, oauth_client=oauth_client)


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    identity: Identity = Depends(get_current_identity),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Answer a message about one of the caller's decks."""
    result = await orchestrator.chat(
        identity, request.deck_id, request.message, slide_id=request.slide_id
    )
    return ChatResponse(**result.model_dump())


@router.post("/execute")
async def execute_slides_update(
    request: ExecuteSlidesUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Forward Slides API requests to the deck's linked presentation."""
    return await orchestrator.execute_slides_update(identity, request.deck_id, request.requests)


@router.get("/messages", response_model=list[MessageResponse])
async def list_messages(
    limit: int = Query(default=MESSAGE_LIST_LIMIT, ge=1, le=MESSAGE_LIST_LIMIT),
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> list[MessageResponse]:
    return MessageLog(db).list_messages(identity, limit=limit)


@router.post("/messages", response_model=SimpleChatResponse)
async def send_message(
    request: MessageRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> SimpleChatResponse:
    return SimpleChatResponse(response=SimpleChat(db).chat(identity, request.message))


@router.delete("/messages")
async def clear_messages(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> dict[str, int]:
    return {"deleted": MessageLog(db).clear(identity)}
