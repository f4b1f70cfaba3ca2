"""Deck connect / link / import flows through GoogleSlidesService."""

import pytest
from sqlalchemy.orm import Session

from services.decks.repository import DeckRepository, SlideRepository
from services.google_slides.service import GoogleSlidesService
from shared.errors import (
    ExternalAuthRequiredError,
    InvalidPresentationReferenceError,
    PresentationAccessDeniedError,
    UnauthorizedError,
)
from shared.models import Identity
from shared.utils import now_ms


@pytest.fixture
def service(db_session: Session, fake_gateway) -> GoogleSlidesService:
    return GoogleSlidesService(db_session, gateway=fake_gateway)


class TestLinkDeck:
    @pytest.mark.asyncio
    async def test_link_without_credential_leaves_deck_untouched(
        self, db_session: Session, owner: Identity, fake_gateway, service: GoogleSlidesService
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Draft")
        fake_gateway.add_presentation("XYZ", title="Remote")

        with pytest.raises(ExternalAuthRequiredError):
            await service.link_deck(owner, deck.id, "XYZ")

        db_session.expire_all()
        reloaded = DeckRepository(db_session).get_deck(owner, deck.id)
        assert reloaded.google_slides_id is None
        assert reloaded.name == "Draft"

    @pytest.mark.asyncio
    async def test_link_by_url_renames_and_syncs(
        self,
        db_session: Session,
        owner: Identity,
        google_credential: str,
        fake_gateway,
        make_remote_slide,
        service: GoogleSlidesService,
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Draft")
        fake_gateway.add_presentation(
            "1AbC_def",
            title="Board Update",
            slides=[make_remote_slide("g-1", "Agenda"), make_remote_slide("g-2", "Numbers")],
        )

        linked, result = await service.link_deck(
            owner, deck.id, "https://docs.google.com/presentation/d/1AbC_def/edit"
        )

        assert linked.google_slides_id == "1AbC_def"
        assert linked.name == "Board Update"
        assert result.slide_count == 2
        titles = [s.title for s in SlideRepository(db_session).list_slides(owner, deck.id)]
        assert titles == ["Agenda", "Numbers"]

    @pytest.mark.asyncio
    async def test_link_untitled_presentation_keeps_deck_name(
        self, db_session: Session, owner: Identity, google_credential: str, fake_gateway, service
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Draft")
        fake_gateway.add_presentation("p-1", title=None)

        linked, _ = await service.link_deck(owner, deck.id, "p-1")

        assert linked.name == "Draft"

    @pytest.mark.asyncio
    async def test_invalid_reference(
        self, db_session: Session, owner: Identity, google_credential: str, service
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Draft")

        with pytest.raises(InvalidPresentationReferenceError):
            await service.link_deck(owner, deck.id, "not a presentation!")

    @pytest.mark.asyncio
    async def test_access_denied_leaves_deck_untouched(
        self, db_session: Session, owner: Identity, google_credential: str, fake_gateway, service
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Draft")
        fake_gateway.link_errors["locked"] = PresentationAccessDeniedError(status=403)

        with pytest.raises(PresentationAccessDeniedError):
            await service.link_deck(owner, deck.id, "locked")

        assert DeckRepository(db_session).get_deck(owner, deck.id).google_slides_id is None

    @pytest.mark.asyncio
    async def test_link_foreign_deck(
        self,
        db_session: Session,
        owner: Identity,
        stranger: Identity,
        google_credential: str,
        fake_gateway,
        service,
    ) -> None:
        deck = DeckRepository(db_session).create_deck(stranger, name="Theirs")
        fake_gateway.add_presentation("p-1", title="Remote")

        with pytest.raises(UnauthorizedError):
            await service.link_deck(owner, deck.id, "p-1")


class TestImportAndConnect:
    @pytest.mark.asyncio
    async def test_import_creates_linked_deck(
        self,
        db_session: Session,
        owner: Identity,
        google_credential: str,
        fake_gateway,
        make_remote_slide,
        service: GoogleSlidesService,
    ) -> None:
        fake_gateway.add_presentation("p-9", title="Keynote", slides=[make_remote_slide("g-1", "Hi")])

        deck, result = await service.import_presentation(owner, "p-9")

        assert deck.user_id == owner.subject
        assert deck.name == "Keynote"
        assert deck.google_slides_id == "p-9"
        assert result.slide_count == 1

    @pytest.mark.asyncio
    async def test_import_untitled_presentation(
        self, owner: Identity, google_credential: str, fake_gateway, service
    ) -> None:
        fake_gateway.add_presentation("p-9", title=None)

        deck, _ = await service.import_presentation(owner, "p-9")

        assert deck.name == "Imported Deck"

    @pytest.mark.asyncio
    async def test_import_without_credential_creates_nothing(
        self, db_session: Session, owner: Identity, fake_gateway, service
    ) -> None:
        fake_gateway.add_presentation("p-9", title="Keynote")

        with pytest.raises(ExternalAuthRequiredError):
            await service.import_presentation(owner, "p-9")

        assert DeckRepository(db_session).list_decks(owner) == []

    @pytest.mark.asyncio
    async def test_connect_creates_presentation_named_after_deck(
        self, db_session: Session, owner: Identity, google_credential: str, fake_gateway, service
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Launch Plan")

        connected = await service.connect_deck(owner, deck.id)

        assert fake_gateway.created_titles == ["Launch Plan"]
        assert connected.google_slides_id == "created-1"


class TestCredentials:
    def test_complete_oauth_stores_expiry_in_ms(
        self, owner: Identity, service: GoogleSlidesService
    ) -> None:
        before = now_ms()
        service.complete_oauth(owner, access_token="ya29.new", expires_in=3600)
        after = now_ms()

        token = service.get_token(owner)
        assert token.access_token == "ya29.new"
        assert before + 3_600_000 <= token.expires_at <= after + 3_600_000

    def test_complete_oauth_with_error(self, owner: Identity, service: GoogleSlidesService) -> None:
        with pytest.raises(ExternalAuthRequiredError, match="access_denied"):
            service.complete_oauth(owner, access_token=None, expires_in=None, error="access_denied")
        assert service.get_token(owner) is None

    def test_get_token_for_anonymous(self, service: GoogleSlidesService) -> None:
        assert service.get_token(None) is None

    @pytest.mark.asyncio
    async def test_update_slide_forwards_batch(
        self, owner: Identity, google_credential: str, fake_gateway, service
    ) -> None:
        requests = [{"insertText": {"objectId": "box", "text": "Hi"}}]

        await service.update_slide(owner, "p-1", "slide-1", requests)

        assert fake_gateway.batch_updates == [(google_credential, "p-1", requests)]

    @pytest.mark.asyncio
    async def test_add_slide(self, owner: Identity, google_credential: str, fake_gateway, service) -> None:
        await service.add_slide(owner, "p-1", insertion_index=3)

        assert fake_gateway.added_slides == [(google_credential, "p-1", 3)]
