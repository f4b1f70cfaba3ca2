import os
import sys
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Configuration is read once at import time, so the test environment must be
# in place before any project module loads.
TEST_JWT_SECRET = "easydeck-test-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["AUTH_JWT_ALGORITHMS"] = "HS256"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["GOOGLE_OAUTH_REDIRECT_URI"] = "http://localhost:3000/auth/google/callback"
os.environ.pop("AUTH_JWT_AUDIENCE", None)
os.environ.pop("AUTH_JWT_ISSUER", None)
os.environ.pop("AUTH_JWT_PUBLIC_KEY", None)

from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

import models.database  # noqa: E402,F401
from app import app  # noqa: E402
from database import Base, get_db  # noqa: E402
from services.google_slides.gateway import get_gateway  # noqa: E402
from services.google_slides.token_store import TokenStore  # noqa: E402
from shared.errors import PresentationNotFoundError  # noqa: E402
from shared.models import Identity, Presentation  # noqa: E402
from shared.utils import now_ms  # noqa: E402

GOOGLE_ACCESS_TOKEN = "ya29.test-access-token"
ONE_HOUR_MS = 3600 * 1000


class FakeSlidesGateway:
    """In-memory stand-in for GoogleSlidesGateway that records every call."""

    def __init__(self) -> None:
        self.presentations: dict[str, dict[str, Any]] = {}
        self.link_errors: dict[str, Exception] = {}
        self.created_titles: list[str] = []
        self.batch_updates: list[tuple[str, str, list[dict[str, Any]]]] = []
        self.added_slides: list[tuple[str, str, int | None]] = []

    def add_presentation(
        self,
        presentation_id: str,
        title: str | None = None,
        slides: list[dict[str, Any]] | None = None,
    ) -> None:
        self.presentations[presentation_id] = {
            "presentationId": presentation_id,
            "title": title,
            "slides": slides or [],
        }

    async def create_presentation(self, access_token: str, title: str) -> Presentation:
        presentation_id = f"created-{len(self.created_titles) + 1}"
        self.created_titles.append(title)
        self.add_presentation(presentation_id, title=title)
        return Presentation.model_validate(self.presentations[presentation_id])

    async def get_presentation(self, access_token: str, presentation_id: str) -> Presentation:
        if presentation_id not in self.presentations:
            raise PresentationNotFoundError(status=404, body="not found")
        return Presentation.model_validate(self.presentations[presentation_id])

    async def link_existing(self, access_token: str, presentation_id: str) -> Presentation:
        if presentation_id in self.link_errors:
            raise self.link_errors[presentation_id]
        return await self.get_presentation(access_token, presentation_id)

    async def batch_update(
        self, access_token: str, presentation_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        self.batch_updates.append((access_token, presentation_id, requests))
        return {"presentationId": presentation_id, "replies": [{} for _ in requests]}

    async def add_slide(
        self, access_token: str, presentation_id: str, insertion_index: int | None = None
    ) -> dict[str, Any]:
        self.added_slides.append((access_token, presentation_id, insertion_index))
        return {"presentationId": presentation_id, "replies": [{"createSlide": {"objectId": "new"}}]}


def remote_slide(object_id: str, *runs: str) -> dict[str, Any]:
    """Build a Slides API page with one text box holding ``runs``."""
    return {
        "objectId": object_id,
        "pageElements": [
            {
                "objectId": f"{object_id}-box",
                "shape": {
                    "text": {"textElements": [{"textRun": {"content": run}} for run in runs]}
                },
            }
        ],
    }


@pytest.fixture
def session_factory(tmp_path: Path) -> Generator[sessionmaker, None, None]:
    """Create a SQLite session factory backed by a fresh file per test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'easydeck.db'}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    finally:
        engine.dispose()


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def owner() -> Identity:
    return Identity(subject="user-owner")


@pytest.fixture
def stranger() -> Identity:
    return Identity(subject="user-stranger")


@pytest.fixture
def make_remote_slide() -> Callable[..., dict[str, Any]]:
    return remote_slide


@pytest.fixture
def fake_gateway() -> FakeSlidesGateway:
    return FakeSlidesGateway()


@pytest.fixture
def google_credential(db_session: Session, owner: Identity) -> str:
    """Store a Google credential for ``owner`` that is valid for an hour."""
    TokenStore(db_session).store_token(
        owner.subject, GOOGLE_ACCESS_TOKEN, now_ms() + ONE_HOUR_MS, refresh_token="refresh-1"
    )
    return GOOGLE_ACCESS_TOKEN


@pytest.fixture
def make_bearer() -> Callable[[str], dict[str, str]]:
    """Mint identity-provider style bearer headers for a subject."""

    def _make(subject: str) -> dict[str, str]:
        claims = {"sub": subject, "email": f"{subject}@example.com"}
        token = jwt.encode(claims, TEST_JWT_SECRET, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def client(
    session_factory: sessionmaker, fake_gateway: FakeSlidesGateway
) -> Generator[TestClient, None, None]:
    """TestClient wired to the per-test database and the fake Slides gateway."""

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_gateway, None)
