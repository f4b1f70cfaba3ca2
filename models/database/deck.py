"""
Deck model - one presentation owned by one user
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Deck(Base):
    """Deck owned by a single identity, optionally linked to Google Slides"""

    __tablename__ = "decks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    google_slides_id = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    slides = relationship(
        "Slide",
        back_populates="deck",
        order_by="Slide.slide_index",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Deck(id={self.id}, name={self.name}, google_slides_id={self.google_slides_id})>"
