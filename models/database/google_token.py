"""
Google OAuth credential - one row per user
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import BigInteger, Column, DateTime, String, Text

from database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GoogleToken(Base):
    """OAuth bearer credential for the Google Slides API.

    ``expires_at`` is an absolute epoch timestamp in milliseconds.
    """

    __tablename__ = "google_tokens"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now)

    def __repr__(self) -> str:
        return f"<GoogleToken(user_id={self.user_id}, expires_at={self.expires_at})>"
