#!/usr/bin/env python3
"""
Script to create a business with its owner, services and weekly hours
Usage: python -m app.scripts.create_business "Barber Shop" barber-shop owner@example.com [telegram_chat_id]
"""
import sys
from typing import Optional

from sqlalchemy.orm import sessionmaker

from app.api.dependencies import create_access_token
from app.config.database import create_tables, get_worker_session_factory
from app.models import AvailabilityRule, Business, Service, User

DEFAULT_SERVICES = [
    ("Haircut", 30),
    ("Haircut and beard", 60),
    ("Coloring", 90),
]

# Monday-Friday split shift, Saturday morning, Sunday closed
DEFAULT_WEEK = {
    0: [{"start": "09:00", "end": "13:00"}, {"start": "14:00", "end": "19:00"}],
    1: [{"start": "09:00", "end": "13:00"}, {"start": "14:00", "end": "19:00"}],
    2: [{"start": "09:00", "end": "13:00"}, {"start": "14:00", "end": "19:00"}],
    3: [{"start": "09:00", "end": "13:00"}, {"start": "14:00", "end": "19:00"}],
    4: [{"start": "09:00", "end": "13:00"}, {"start": "14:00", "end": "19:00"}],
    5: [{"start": "09:00", "end": "13:00"}],
    6: [],
}


def create_business_with_hours(
        session_factory: sessionmaker,
        name: str,
        slug: str,
        owner_email: str,
        telegram_chat_id: Optional[str] = None,
        slot_interval_minutes: int = 30
) -> dict:
    """Create the business, its owner, default services and weekly template in one transaction"""
    session = session_factory()
    try:
        with session.begin():
            business = Business(name=name, public_slug=slug, telegram_chat_id=telegram_chat_id)
            session.add(business)
            session.flush()

            owner = User(email=owner_email, business_id=business.id)
            services = [
                Service(business_id=business.id, name=service_name, duration_minutes=duration,
                        display_order=order)
                for order, (service_name, duration) in enumerate(DEFAULT_SERVICES)
            ]
            rules = [
                AvailabilityRule(business_id=business.id, day_of_week=day, is_available=bool(windows),
                                 time_windows=windows, slot_interval_minutes=slot_interval_minutes)
                for day, windows in DEFAULT_WEEK.items()
            ]
            session.add_all([owner] + services + rules)
            session.flush()

            return {
                "business_id": business.id,
                "owner_id": owner.id,
                "service_ids": [service.id for service in services],
            }
    finally:
        session.close()


def main(argv):
    if len(argv) < 4:
        print(__doc__)
        return 1

    session_factory = get_worker_session_factory()
    create_tables(session_factory.kw["bind"])

    created = create_business_with_hours(
        session_factory,
        name=argv[1],
        slug=argv[2],
        owner_email=argv[3],
        telegram_chat_id=argv[4] if len(argv) > 4 else None,
    )

    print(f"✅ Created business {created['business_id']} ({argv[2]})")
    print(f"   Services: {', '.join(created['service_ids'])}")
    print(f"   Owner token: {create_access_token({'sub': created['owner_id']})}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
