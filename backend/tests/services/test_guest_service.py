"""Tests for hotelpms.services.guest_service"""
import pytest

from hotelpms.models.events import EventType
from hotelpms.models.ontology import GuestTier
from hotelpms.models.schemas import GuestCreate, GuestUpdate
from hotelpms.services.errors import NotFoundError


def _guest_data(**overrides):
    values = dict(first_name="Ravi", last_name="Menon", email="Ravi.Menon@Example.com", phone="+919811111111")
    values.update(overrides)
    return GuestCreate(**values)


class TestCreateGuest:
    def test_email_lowercased(self, guest_service):
        guest = guest_service.create_guest(_guest_data())
        assert guest.email == "ravi.menon@example.com"
        assert guest.tier == GuestTier.BRONZE
        assert guest.loyalty_points == 0
        assert guest.total_bookings == 0

    def test_duplicate_email(self, guest_service):
        guest_service.create_guest(_guest_data())
        with pytest.raises(ValueError, match="already exists"):
            guest_service.create_guest(_guest_data(email="ravi.menon@example.com"))


class TestQueries:
    def test_search(self, guest_service, guest_factory):
        guest_factory("asha.rao@example.com")
        guest_factory("ravi@example.com", first_name="Ravi", last_name="Menon")
        assert [g.first_name for g in guest_service.get_guests(search="Men")] == ["Ravi"]
        assert len(guest_service.get_guests()) == 2

    def test_filter_by_tier(self, guest_service, guest_factory):
        guest_factory("a@example.com")
        guest_factory("b@example.com", tier=GuestTier.GOLD, loyalty_points=6000)
        assert [g.email for g in guest_service.get_guests(tier=GuestTier.GOLD)] == ["b@example.com"]

    def test_unknown_guest(self, guest_service):
        with pytest.raises(NotFoundError):
            guest_service.require_guest(404)


class TestUpdates:
    def test_update_profile(self, guest_service, sample_guest):
        guest = guest_service.update_guest(sample_guest.id, GuestUpdate(is_vip=True, preferences="high floor"))
        assert guest.is_vip is True
        assert guest.preferences == "high floor"

    def test_loyalty_upgrade_publishes_event(self, guest_service, sample_guest, published_events):
        guest = guest_service.add_loyalty_points(sample_guest.id, 2500)
        assert guest.loyalty_points == 2500
        assert guest.tier == GuestTier.SILVER

        assert len(published_events) == 1
        event = published_events[0]
        assert event.event_type == EventType.GUEST_TIER_CHANGED
        assert event.data["old_tier"] == "bronze"
        assert event.data["new_tier"] == "silver"

    def test_no_event_without_upgrade(self, guest_service, sample_guest, published_events):
        guest_service.add_loyalty_points(sample_guest.id, 10)
        assert published_events == []
