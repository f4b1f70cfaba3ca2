"""
Slide model - local mirror of one slide in a deck's Google presentation
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Slide(Base):
    """Slide text snapshot keyed by deck and zero-based position"""

    __tablename__ = "slides"
    __table_args__ = (Index("ix_slides_deck_id_slide_index", "deck_id", "slide_index"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    deck_id = Column(String(36), ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True)
    slide_index = Column(Integer, nullable=False)  # 0-based
    google_slide_id = Column(String(255), nullable=True)
    title = Column(String(500), nullable=True)
    content = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    deck = relationship("Deck", back_populates="slides")
