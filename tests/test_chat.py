import pytest
from sqlalchemy.orm import Session

from services.chat.messages import MessageLog, SimpleChat
from services.chat.orchestrator import ChatOrchestrator
from services.decks.repository import DeckRepository, SlideRepository
from services.google_slides.token_store import TokenStore
from shared.errors import (
    DeckNotLinkedError,
    ExternalAuthRequiredError,
    SlideNotFoundError,
    UnauthorizedError,
)
from shared.models import Identity, MessageRole


class TestChatOrchestrator:
    @pytest.mark.asyncio
    async def test_unlinked_deck_needs_google_auth(
        self, db_session: Session, owner: Identity, fake_gateway
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo")

        result = await ChatOrchestrator(db_session, fake_gateway).chat(
            owner, deck.id, "Add a title slide"
        )

        assert result.needs_google_auth is True
        assert result.can_execute is False
        assert result.response.startswith('I understand you want to: "Add a title slide".')
        assert "Let's create your first slide!" in result.response
        assert "Connect this deck to Google Slides" in result.response

    @pytest.mark.asyncio
    async def test_linked_deck_can_execute(
        self, db_session: Session, owner: Identity, google_credential: str, fake_gateway
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo", google_slides_id="p-1")
        SlideRepository(db_session).create_slide(owner, deck.id, slide_index=0, title="Intro")

        result = await ChatOrchestrator(db_session, fake_gateway).chat(owner, deck.id, "Shorten it")

        assert result.needs_google_auth is False
        assert result.can_execute is True
        assert '"Demo" currently has 1 slide(s).' in result.response
        assert "Changes can be applied" in result.response

    @pytest.mark.asyncio
    async def test_expired_credential_is_mentioned(
        self, db_session: Session, owner: Identity, fake_gateway
    ) -> None:
        TokenStore(db_session).store_token(owner.subject, "old", 1)
        deck = DeckRepository(db_session).create_deck(owner, name="Demo", google_slides_id="p-1")

        result = await ChatOrchestrator(db_session, fake_gateway).chat(owner, deck.id, "Hi")

        assert result.can_execute is True
        assert "expired" in result.response

    @pytest.mark.asyncio
    async def test_focused_slide(self, db_session: Session, owner: Identity, fake_gateway) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo")
        slide = SlideRepository(db_session).create_slide(owner, deck.id, slide_index=1, title="Ask")

        result = await ChatOrchestrator(db_session, fake_gateway).chat(
            owner, deck.id, "Bigger font", slide_id=slide.id
        )

        assert 'slide 2 ("Ask")' in result.response

    @pytest.mark.asyncio
    async def test_slide_from_another_deck(
        self, db_session: Session, owner: Identity, fake_gateway
    ) -> None:
        decks = DeckRepository(db_session)
        deck = decks.create_deck(owner, name="Demo")
        other = decks.create_deck(owner, name="Other")
        slide = SlideRepository(db_session).create_slide(owner, other.id, slide_index=0)

        with pytest.raises(SlideNotFoundError):
            await ChatOrchestrator(db_session, fake_gateway).chat(
                owner, deck.id, "Hi", slide_id=slide.id
            )

    @pytest.mark.asyncio
    async def test_chat_on_foreign_deck(
        self, db_session: Session, owner: Identity, stranger: Identity, fake_gateway
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo")

        with pytest.raises(UnauthorizedError):
            await ChatOrchestrator(db_session, fake_gateway).chat(stranger, deck.id, "Hi")

    @pytest.mark.asyncio
    async def test_execute_forwards_requests_verbatim(
        self, db_session: Session, owner: Identity, google_credential: str, fake_gateway
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo", google_slides_id="p-1")
        requests = [
            {"insertText": {"objectId": "box", "text": "Q3"}},
            {"unknownRequest": {"anything": True}},
        ]

        result = await ChatOrchestrator(db_session, fake_gateway).execute_slides_update(
            owner, deck.id, requests
        )

        assert fake_gateway.batch_updates == [(google_credential, "p-1", requests)]
        assert result["presentationId"] == "p-1"

    @pytest.mark.asyncio
    async def test_execute_on_unlinked_deck(
        self, db_session: Session, owner: Identity, google_credential: str, fake_gateway
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo")

        with pytest.raises(DeckNotLinkedError):
            await ChatOrchestrator(db_session, fake_gateway).execute_slides_update(
                owner, deck.id, [{"deleteObject": {"objectId": "x"}}]
            )
        assert fake_gateway.batch_updates == []

    @pytest.mark.asyncio
    async def test_execute_without_credential(
        self, db_session: Session, owner: Identity, fake_gateway
    ) -> None:
        deck = DeckRepository(db_session).create_deck(owner, name="Demo", google_slides_id="p-1")

        with pytest.raises(ExternalAuthRequiredError):
            await ChatOrchestrator(db_session, fake_gateway).execute_slides_update(owner, deck.id, [])
        assert fake_gateway.batch_updates == []


class TestMessageLog:
    def test_simple_chat_logs_both_turns(self, db_session: Session, owner: Identity) -> None:
        response = SimpleChat(db_session).chat(owner, "Make me a deck")

        messages = MessageLog(db_session).list_messages(owner)
        assert [m.role for m in messages] == [MessageRole.ASSISTANT.value, MessageRole.USER.value]
        assert messages[0].content == response
        assert messages[1].content == "Make me a deck"
        assert "Let's create your first slide!" in response

    def test_simple_chat_counts_owned_slides(
        self, db_session: Session, owner: Identity, stranger: Identity
    ) -> None:
        decks = DeckRepository(db_session)
        slides = SlideRepository(db_session)
        mine = decks.create_deck(owner, name="Mine")
        theirs = decks.create_deck(stranger, name="Theirs")
        slides.create_slide(owner, mine.id, slide_index=0)
        slides.create_slide(owner, mine.id, slide_index=1)
        slides.create_slide(stranger, theirs.id, slide_index=0)

        response = SimpleChat(db_session).chat(owner, "Status?")

        assert "You currently have 2 slide(s)." in response

    def test_messages_are_per_user(
        self, db_session: Session, owner: Identity, stranger: Identity
    ) -> None:
        log = MessageLog(db_session)
        log.add(owner, MessageRole.USER, "mine")
        log.add(stranger, MessageRole.USER, "theirs")

        assert [m.content for m in log.list_messages(owner)] == ["mine"]
        assert log.list_messages(None) == []

    def test_clear(self, db_session: Session, owner: Identity, stranger: Identity) -> None:
        log = MessageLog(db_session)
        log.add(owner, MessageRole.USER, "one")
        log.add(owner, MessageRole.ASSISTANT, "two")
        log.add(stranger, MessageRole.USER, "keep")

        assert log.clear(owner) == 2
        assert log.list_messages(owner) == []
        assert len(log.list_messages(stranger)) == 1
