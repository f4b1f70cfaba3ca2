from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Identity(BaseModel):
    """Verified caller identity issued by the identity provider."""

    subject: str
    claims: dict[str, Any] = {}


# Deck / Slide models
class DeckCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Deck display name")
    description: str | None = Field(None, description="Optional deck description")
    google_slides_id: str | None = Field(None, description="Linked Google Slides presentation id")


class DeckUpdateRequest(BaseModel):
    """Sparse patch: only fields present in the request body are applied."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    google_slides_id: str | None = None


class DeckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: str | None = None
    google_slides_id: str | None = None
    created_at: datetime
    updated_at: datetime


class SlideCreateRequest(BaseModel):
    slide_index: int = Field(..., ge=0, description="Zero-based position in the deck")
    google_slide_id: str | None = None
    title: str | None = Field(None, max_length=500)
    content: str | None = None


class SlideUpdateRequest(BaseModel):
    slide_index: int | None = Field(None, ge=0)
    google_slide_id: str | None = None
    title: str | None = Field(None, max_length=500)
    content: str | None = None


class SlideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    deck_id: str
    slide_index: int
    google_slide_id: str | None = None
    title: str | None = None
    content: str | None = None
    updated_at: datetime


# Google credential models
class TokenStoreRequest(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: int = Field(..., description="Absolute expiry as epoch milliseconds")


class TokenStoreResponse(BaseModel):
    id: str


class TokenResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    access_token: str
    refresh_token: str | None = None
    expires_at: int


class OAuthUrlResponse(BaseModel):
    authorization_url: str


class OAuthCallbackRequest(BaseModel):
    """Fragment parameters returned by Google's implicit grant redirect."""

    access_token: str | None = None
    expires_in: int | None = Field(None, description="Lifetime in seconds")
    refresh_token: str | None = None
    error: str | None = None


# Google Slides payloads
class Presentation(BaseModel):
    """Subset of the Slides API presentation resource used by this service."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    presentation_id: str = Field(alias="presentationId")
    title: str | None = None
    slides: list[dict[str, Any]] | None = None


class CreatePresentationRequest(BaseModel):
    title: str = Field(..., min_length=1)


class BatchUpdateRequest(BaseModel):
    """Slides API request objects, forwarded without validation."""

    requests: list[dict[str, Any]]


class AddSlideRequest(BaseModel):
    insertion_index: int | None = Field(None, ge=0)


class LinkPresentationRequest(BaseModel):
    presentation: str = Field(..., description="Google Slides URL or presentation id")


class SyncRequest(BaseModel):
    deck_id: str
    presentation_id: str


class SyncResponse(BaseModel):
    slide_count: int
    presentation_title: str | None = None
    slide_ids: list[str]


class LinkDeckResponse(BaseModel):
    deck: DeckResponse
    sync: SyncResponse


# Chat models
class ChatRequest(BaseModel):
    deck_id: str
    message: str = Field(..., min_length=1, max_length=10000)
    slide_id: str | None = None


class ChatResponse(BaseModel):
    response: str
    needs_google_auth: bool
    can_execute: bool


class ExecuteSlidesUpdateRequest(BaseModel):
    deck_id: str
    requests: list[dict[str, Any]]


class MessageRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=10000)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: MessageRole
    content: str
    created_at: datetime


class SimpleChatResponse(BaseModel):
    response: str
