"""
Chat message log
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, String, Text

from database import Base


class Message(Base):
    """Append-only chat transcript entry"""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    role = Column(Enum("user", "assistant", "system", name="messagerole"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
