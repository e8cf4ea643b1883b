# src/staylink/models/__init__.py
"""SQLAlchemy models for the StayLink messaging relay."""

from .listing import Listing
from .message import Message
from .user import User

__all__ = [
    "Listing",
    "Message",
    "User",
]
