"""Pydantic schemas for the StayLink API."""

from .frames import AuthFrame, DeliveryFrame, SendFrame, parse_frame
from .message import MessageCreate, MessageRead, UserSummary

__all__ = [
    "AuthFrame",
    "DeliveryFrame",
    "SendFrame",
    "parse_frame",
    "MessageCreate",
    "MessageRead",
    "UserSummary",
]
