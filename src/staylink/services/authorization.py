"""Listing-scoped authorization rules for conversations."""

from __future__ import annotations

from sqlalchemy.orm import Session

from staylink.core.errors import ForbiddenError, NotFoundError
from staylink.models import Listing


def get_listing(db: Session, listing_id: int) -> Listing:
    """Return a listing by id.

    Raises:
        NotFoundError: If the listing does not exist.
    """
    listing = db.get(Listing, listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    return listing


def can_participate(actor_id: int, listing: Listing, counterpart_id: int) -> bool:
    """Return True if one of the two participants owns the listing.

    Owners may message any guest and guests may message the owner; two
    non-owners may not converse on the same listing.
    """
    owner_id = listing.owner_id
    return actor_id == owner_id or counterpart_id == owner_id


def ensure_can_participate(actor_id: int, listing: Listing, counterpart_id: int) -> None:
    """Raise ForbiddenError unless the pair may converse on the listing."""
    if not can_participate(actor_id, listing, counterpart_id):
        raise ForbiddenError("Not authorized to send message")


def ensure_listing_owner(actor_id: int, listing: Listing) -> None:
    """Raise ForbiddenError unless the actor owns the listing."""
    if listing.owner_id != actor_id:
        raise ForbiddenError()
