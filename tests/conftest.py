"""
Shared fixtures for booking tests.

Every test gets a fresh in-memory SQLite database with the full schema. The
environment is set before the package is imported because configuration is
read at import time.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ALLOWED_ORIGINS", "*")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, insert  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from retreat_booking.models.base import Base  # noqa: E402
from retreat_booking.models.communications import GuestCommunication  # noqa: E402,F401
from retreat_booking.models.guests import Guest  # noqa: E402
from retreat_booking.models.ledger import LedgerEntry  # noqa: E402,F401
from retreat_booking.models.loyalty import LoyaltyTransaction  # noqa: E402,F401
from retreat_booking.models.reservations import Reservation  # noqa: E402,F401
from retreat_booking.models.retreats import Retreat, ScheduleActivity  # noqa: E402
from retreat_booking.models.waitlist import WaitlistEntry  # noqa: E402,F401


def build_sqlite_engine(url: str = "sqlite+pysqlite:///:memory:") -> Engine:
    """Create a SQLite engine with every booking table."""
    if url.endswith(":memory:"):
        test_engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        test_engine = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})
    Base.metadata.create_all(test_engine)
    return test_engine


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test."""
    test_engine = build_sqlite_engine()
    yield test_engine
    test_engine.dispose()


def seed_retreat(engine: Engine, **overrides: Any) -> int:
    values: dict[str, Any] = {
        "title": "Desert Silence",
        "capacity": 20,
        "start_date": date(2026, 3, 1),
        "end_date": date(2026, 3, 10),
        "instructor": "Amina Haddad",
        "location": "Dune Hall",
        "price": Decimal("100.00"),
        "status": "ACTIVE",
    }
    values.update(overrides)
    with engine.begin() as conn:
        return int(conn.execute(insert(Retreat).values(**values)).inserted_primary_key[0])


def seed_guest(engine: Engine, **overrides: Any) -> int:
    values: dict[str, Any] = {
        "first_name": "Lina",
        "last_name": "Farouk",
        "email": "lina@example.com",
        "loyalty_points": 0,
        "loyalty_tier": "BRONZE",
        "loyalty_program_active": True,
    }
    values.update(overrides)
    with engine.begin() as conn:
        return int(conn.execute(insert(Guest).values(**values)).inserted_primary_key[0])


def seed_activity(engine: Engine, retreat_id: int, **overrides: Any) -> int:
    values: dict[str, Any] = {
        "retreat_id": retreat_id,
        "day": 1,
        "time": "09:00",
        "name": "Sunrise Yoga",
        "duration_minutes": 60,
        "instructor": "Amina Haddad",
        "location": "Dune Hall",
        "capacity": 20,
    }
    values.update(overrides)
    with engine.begin() as conn:
        return int(conn.execute(insert(ScheduleActivity).values(**values)).inserted_primary_key[0])


@pytest.fixture
def make_retreat(engine: Engine) -> Callable[..., int]:
    """Factory inserting a retreat (capacity 20, 2026-03-01..10 by default)."""
    return lambda **overrides: seed_retreat(engine, **overrides)


@pytest.fixture
def make_guest(engine: Engine) -> Callable[..., int]:
    """Factory inserting a guest enrolled in the loyalty program by default."""
    return lambda **overrides: seed_guest(engine, **overrides)


@pytest.fixture
def make_activity(engine: Engine) -> Callable[..., int]:
    return lambda retreat_id, **overrides: seed_activity(engine, retreat_id, **overrides)


@pytest.fixture
def engine_factory() -> Callable[[str], Engine]:
    """Builder for engines on other SQLite URLs (e.g. file databases for threading tests)."""
    return build_sqlite_engine
