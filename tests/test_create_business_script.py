"""Tests for the business bootstrap script."""

from datetime import timedelta

from app.models import AvailabilityRule, User
from app.scripts.create_business import create_business_with_hours
from app.utils.time_utils import business_today


class TestCreateBusiness:
    def test_creates_bookable_business(self, session_factory, services):
        created = create_business_with_hours(session_factory, "Barber Shop", "barber", "owner@example.com", "77")

        session = session_factory()
        owner = session.get(User, created["owner_id"])
        rules = session.query(AvailabilityRule).filter(
            AvailabilityRule.business_id == created["business_id"]
        ).all()
        session.close()

        assert owner.business_id == created["business_id"]
        assert len(rules) == 7
        assert len(created["service_ids"]) == 3

        today = business_today()
        saturday = today + timedelta(days=(5 - today.weekday()) % 7 or 7)
        sunday = saturday + timedelta(days=1)
        haircut = created["service_ids"][0]

        slots = services.availability.get_available_slots(created["business_id"], haircut, saturday)
        assert slots[0] == "09:00"
        assert slots[-1] == "12:30"
        assert services.availability.get_available_slots(created["business_id"], haircut, sunday) == []
