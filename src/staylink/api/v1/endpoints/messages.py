# src/staylink/api/v1/endpoints/messages.py
"""Message endpoints for the StayLink API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from staylink.schemas.message import MessageCreate, MessageRead

from ..dependencies import CurrentUserDep, MessagingServiceDep

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=MessageRead)
def send_message(
    message_data: MessageCreate,
    current_user: CurrentUserDep,
    service: MessagingServiceDep,
) -> MessageRead:
    """Send a message to the owner or a guest of a listing."""
    return service.send_message(
        current_user,
        recipient_id=message_data.recipient,
        content=message_data.content,
        listing_id=message_data.listing,
    )


@router.get("/conversation/{user_id}", response_model=list[MessageRead])
def get_conversation(
    user_id: int,
    current_user: CurrentUserDep,
    service: MessagingServiceDep,
    listing: int | None = Query(None, description="Optionally restrict to one listing"),
) -> list[MessageRead]:
    """Get the conversation with a specific user, oldest first."""
    return service.get_conversation(current_user, user_id, listing)


@router.get("/listing/{listing_id}", response_model=list[MessageRead])
def get_listing_messages(
    listing_id: int,
    current_user: CurrentUserDep,
    service: MessagingServiceDep,
) -> list[MessageRead]:
    """Get the listing messages the current user sent or received."""
    return service.get_listing_messages(current_user, listing_id)


@router.get("/listing/{listing_id}/owner", response_model=list[MessageRead])
def get_owner_conversations(
    listing_id: int,
    current_user: CurrentUserDep,
    service: MessagingServiceDep,
    guest_id: int | None = Query(None, description="Restrict to one guest conversation"),
) -> list[MessageRead]:
    """Get the listing owner's inbox, optionally filtered to one guest."""
    return service.get_owner_conversations(current_user, listing_id, guest_id)
