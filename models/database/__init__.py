"""
Database models package - SQLAlchemy ORM models
"""

from .deck import Deck
from .google_token import GoogleToken
from .message import Message
from .slide import Slide

__all__ = [
    "Deck",
    "GoogleToken",
    "Message",
    "Slide",
]
