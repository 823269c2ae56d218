"""Tests for the availability resolver and bookable slot listing."""

import random

import pytest

from conftest import (
    add_appointment,
    add_dated,
    add_exception,
    add_service,
    add_weekly_rule,
    future_day,
    seed_business,
)
from app.core.exceptions import InactiveError, InvalidArgumentError, NotFoundError
from app.models import AppointmentStatus
from app.utils.time_utils import add_duration, overlaps


@pytest.fixture
def shop(session_factory):
    business_id = seed_business(session_factory)
    service_id = add_service(session_factory, business_id, duration=60)
    return business_id, service_id


class TestResolveSchedule:
    def test_weekly_rule_for_weekday(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_weekly_rule(session_factory, business_id, day.weekday(), [("09:00", "11:00")])

        slots = services.availability.get_available_slots(business_id, service_id, day)
        assert slots == ["09:00", "09:30", "10:00"]

    def test_unavailable_weekday_is_closed(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_weekly_rule(session_factory, business_id, day.weekday(), [("09:00", "11:00")], is_available=False)

        assert services.availability.get_available_slots(business_id, service_id, day) == []

    def test_no_configuration_is_closed(self, services, shop):
        business_id, service_id = shop
        assert services.availability.get_available_slots(business_id, service_id, future_day(3)) == []

    def test_dated_entry_wins_over_weekly_rule(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_weekly_rule(session_factory, business_id, day.weekday(), [("09:00", "18:00")])
        add_dated(session_factory, business_id, day, [("14:00", "15:00")], interval=15)

        slots = services.availability.get_available_slots(business_id, service_id, day)
        assert slots == ["14:00"]

    def test_dated_entry_only_applies_to_its_date(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_dated(session_factory, business_id, day, [("14:00", "15:00")])

        assert services.availability.get_available_slots(business_id, service_id, future_day(8)) == []

    def test_blocked_exception_closes_the_day(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_weekly_rule(session_factory, business_id, day.weekday(), [("09:00", "18:00")])
        add_exception(session_factory, business_id, day, "blocked")

        assert services.availability.get_available_slots(business_id, service_id, day) == []

    def test_custom_exception_replaces_windows(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_weekly_rule(session_factory, business_id, day.weekday(), [("09:00", "18:00")], interval=60)
        add_exception(session_factory, business_id, day, "custom", windows=[("10:00", "12:00")])

        slots = services.availability.get_available_slots(business_id, service_id, day)
        assert slots == ["10:00", "11:00"]

    def test_custom_exception_without_source_uses_default_interval(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_exception(session_factory, business_id, day, "custom", windows=[("10:00", "11:30")])

        slots = services.availability.get_available_slots(business_id, service_id, day)
        assert slots == ["10:00", "10:30"]


class TestBookedSlots:
    def test_reference_scenario(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_dated(session_factory, business_id, day, [("09:00", "12:00")], interval=30)
        add_appointment(session_factory, business_id, service_id, day, "10:00", duration=60)

        slots = services.availability.get_available_slots(business_id, service_id, day)
        assert slots == ["09:00", "11:00"]

    def test_only_confirmed_appointments_block(self, services, session_factory, shop):
        business_id, service_id = shop
        day = future_day(7)
        add_dated(session_factory, business_id, day, [("09:00", "11:00")])
        for status in (AppointmentStatus.CANCELLED, AppointmentStatus.EXPIRED,
                       AppointmentStatus.COMPLETED_NO_SHOW):
            add_appointment(session_factory, business_id, service_id, day, "09:00", status=status)

        slots = services.availability.get_available_slots(business_id, service_id, day)
        assert slots == ["09:00", "09:30", "10:00"]

    def test_random_bookings_never_overlap_returned_slots(self, services, session_factory, shop):
        business_id, service_id = shop
        rng = random.Random(20240125)

        for offset in range(1, 16):
            day = future_day(offset)
            add_dated(session_factory, business_id, day, [("08:00", "13:00"), ("14:00", "19:00")], interval=15)

            booked = []
            for _ in range(rng.randint(0, 6)):
                start = f"{rng.randint(8, 18):02d}:{rng.choice([0, 15, 30, 45]):02d}"
                duration = rng.choice([15, 30, 45, 60])
                add_appointment(session_factory, business_id, service_id, day, start, duration=duration)
                booked.append((start, add_duration(start, duration)))

            for slot in services.availability.get_available_slots(business_id, service_id, day):
                slot_end = add_duration(slot, 60)
                assert not any(overlaps(slot, slot_end, b_start, b_end) for b_start, b_end in booked)


class TestServiceChecks:
    def test_unknown_service(self, services, shop):
        business_id, _ = shop
        with pytest.raises(NotFoundError):
            services.availability.get_available_slots(business_id, "missing", future_day())

    def test_service_of_another_business(self, services, session_factory, shop):
        _, service_id = shop
        other_business = seed_business(session_factory)
        with pytest.raises(NotFoundError):
            services.availability.get_available_slots(other_business, service_id, future_day())

    def test_inactive_service(self, services, session_factory, shop):
        business_id, _ = shop
        inactive = add_service(session_factory, business_id, is_active=False)
        with pytest.raises(InactiveError):
            services.availability.get_available_slots(business_id, inactive, future_day())

    def test_bad_date(self, services, shop):
        business_id, service_id = shop
        with pytest.raises(InvalidArgumentError):
            services.availability.get_available_slots(business_id, service_id, "next tuesday")
