# tests/services/test_authorization.py
"""Tests for listing-scoped authorization rules."""

import pytest

from staylink.core.errors import ForbiddenError, NotFoundError
from staylink.models import Listing
from staylink.services.authorization import (
    can_participate,
    ensure_can_participate,
    ensure_listing_owner,
    get_listing,
)


def test_owner_and_guest_may_converse_both_ways(listing, owner, guest) -> None:
    assert can_participate(owner.id, listing, guest.id) is True
    assert can_participate(guest.id, listing, owner.id) is True


def test_two_guests_may_not_converse(listing, guest, other_guest) -> None:
    assert can_participate(guest.id, listing, other_guest.id) is False
    assert can_participate(other_guest.id, listing, guest.id) is False


def test_rule_only_depends_on_owner_id() -> None:
    listing = Listing(id=1, owner_id=10, title="detached")
    assert can_participate(10, listing, 11)
    assert can_participate(11, listing, 10)
    assert not can_participate(11, listing, 12)


def test_ensure_can_participate_raises_forbidden(listing, guest, other_guest) -> None:
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_can_participate(guest.id, listing, other_guest.id)
    assert exc_info.value.status_code == 403


def test_ensure_listing_owner(listing, owner, guest) -> None:
    ensure_listing_owner(owner.id, listing)
    with pytest.raises(ForbiddenError):
        ensure_listing_owner(guest.id, listing)


def test_get_listing(db_session, listing) -> None:
    assert get_listing(db_session, listing.id).id == listing.id
    with pytest.raises(NotFoundError) as exc_info:
        get_listing(db_session, listing.id + 1000)
    assert exc_info.value.detail == "Listing not found"


def test_forbidden_is_distinct_from_not_found() -> None:
    assert not issubclass(ForbiddenError, NotFoundError)
    assert not issubclass(NotFoundError, ForbiddenError)
