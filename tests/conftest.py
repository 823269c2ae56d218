"""Shared test fixtures and helpers."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./unused-test.db")
os.environ.setdefault("PUBLIC_RATE_LIMIT_PER_SECOND", "1000")
os.environ.setdefault("TX_RETRY_BACKOFF_SECONDS", "0.01")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "test-token")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import date, timedelta
from typing import List, Optional

import pytest

from app.config.database import create_db_engine, create_session_factory, create_tables
from app.config.settings import get_settings
from app.models import (
    Appointment,
    AppointmentStatus,
    AvailabilityDate,
    AvailabilityRule,
    Business,
    CalendarException,
    Service,
    User,
)
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.registry import build_services
from app.utils.time_utils import add_duration, business_today


class RecordingDispatcher(NotificationDispatcher):
    """Keeps payloads instead of enqueueing them"""

    def __init__(self):
        self.payloads = []

    def dispatch(self, payload) -> bool:
        self.payloads.append(payload)
        return True


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'booking.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def services(session_factory, dispatcher):
    return build_services(session_factory, dispatcher)


@pytest.fixture
def business(session_factory):
    """Business open every weekday 09:00-18:00 on a 30 minute grid, with a 60 minute service."""
    business_id = seed_business(session_factory, chat_id="1001")
    service_id = add_service(session_factory, business_id, duration=60)
    for weekday in range(7):
        add_weekly_rule(session_factory, business_id, weekday, [("09:00", "18:00")])
    return {"business_id": business_id, "service_id": service_id}


def future_day(days: int = 7) -> date:
    return business_today() + timedelta(days=days)


def _save(session_factory, *objects):
    session = session_factory()
    try:
        with session.begin():
            session.add_all(objects)
        return objects[0].id if hasattr(objects[0], "id") else None
    finally:
        session.close()


def seed_business(session_factory, chat_id: Optional[str] = None, slug: Optional[str] = None) -> str:
    business = Business(name="Barber Shop", public_slug=slug or f"shop-{os.urandom(4).hex()}",
                        telegram_chat_id=chat_id)
    return _save(session_factory, business)


def seed_owner(session_factory, business_id: Optional[str], is_active: bool = True) -> str:
    user = User(email=f"owner-{os.urandom(4).hex()}@example.com", business_id=business_id,
                is_active=is_active)
    return _save(session_factory, user)


def add_service(session_factory, business_id: str, duration: int = 60, is_active: bool = True,
                name: str = "Haircut") -> str:
    service = Service(business_id=business_id, name=name, duration_minutes=duration, is_active=is_active)
    return _save(session_factory, service)


def _windows(windows) -> List[dict]:
    return [{"start": start, "end": end} for start, end in windows]


def add_weekly_rule(session_factory, business_id: str, weekday: int, windows, interval: int = 30,
                    is_available: bool = True) -> str:
    rule = AvailabilityRule(business_id=business_id, day_of_week=weekday, is_available=is_available,
                            time_windows=_windows(windows), slot_interval_minutes=interval)
    return _save(session_factory, rule)


def add_dated(session_factory, business_id: str, day: date, windows, interval: int = 30) -> str:
    dated = AvailabilityDate(business_id=business_id, date=day, time_windows=_windows(windows),
                             slot_interval_minutes=interval)
    return _save(session_factory, dated)


def add_exception(session_factory, business_id: str, day: date, type_: str, windows=None,
                  reason: str = "Holiday") -> str:
    exception = CalendarException(business_id=business_id, date=day, type=type_, reason=reason,
                                  time_windows=_windows(windows) if windows else None)
    return _save(session_factory, exception)


def add_appointment(session_factory, business_id: str, service_id: str, day: date, start: str,
                    duration: int = 60, phone: str = "099123456", status: str = AppointmentStatus.CONFIRMED,
                    name: str = "Existing Client") -> str:
    appointment = Appointment(
        business_id=business_id,
        service_id=service_id,
        service_name="Haircut",
        duration_minutes=duration,
        date=day,
        start_time=start,
        end_time=add_duration(start, duration),
        client_name=name,
        client_phone=phone,
        status=status,
        notifications_sent=[],
    )
    return _save(session_factory, appointment)


def book(services, business: dict, day: date, start: str, session_id: str = "sess-1",
         phone: str = "099111222", name: str = "Ana Pérez") -> str:
    """Join the queue (position 1 on an empty queue) and book."""
    services.queue.join_queue(business["business_id"], session_id)
    return services.appointments.create_appointment(
        business_id=business["business_id"],
        service_id=business["service_id"],
        date=day,
        start_time=start,
        client_name=name,
        client_phone=phone,
        session_id=session_id,
    )
