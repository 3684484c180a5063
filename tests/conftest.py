import os

# Must be set before `db` / `main` are imported anywhere in the test session.
os.environ.setdefault("TEST_SQLITE", "1")
os.environ.setdefault("CATALOG_REFRESH_SECONDS", "0")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.core.clock import utcnow  # noqa: E402
from app.models.user import Base  # noqa: E402
from db import SessionLocal, engine  # noqa: E402


@pytest.fixture
def client():
    # Import the app here so the environment above is in place first.
    from main import app

    return TestClient(app)


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine.

    The session is exposed through ``db._TEST_SESSION`` so request handlers
    run against the same session the test uses.
    """
    import db as dbmod

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    dbmod._TEST_SESSION = session
    try:
        yield session
    finally:
        dbmod._TEST_SESSION = None
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def admin_user(db_session):
    from app.services.auth import create_admin

    return create_admin(db_session, "admin", "admin@example.com", "S3cret!pass")


@pytest.fixture
def admin_headers(admin_user):
    from app.services.auth import issue_admin_token

    return {"Authorization": f"Bearer {issue_admin_token(admin_user)}"}


def _make_event(db, year=2026, current=True, **overrides):
    from app.models.event import Event

    now = utcnow()
    fields = dict(
        Name=f"Tango Festival {year}",
        Year=year,
        StartDate=now + timedelta(days=60),
        EndDate=now + timedelta(days=64),
        RegistrationOpenDate=now - timedelta(days=30),
        RegistrationCloseDate=now + timedelta(days=50),
        Venue="Dubai",
        IsActive=True,
        IsCurrent=current,
        FullPackageStandardPrice=Decimal("1000"),
        EveningPackageStandardPrice=Decimal("600"),
        Accommodation4NightsSinglePrice=Decimal("3000"),
        Accommodation4NightsDoublePrice=Decimal("5000"),
        Accommodation3NightsSinglePrice=Decimal("2500"),
        Accommodation3NightsDoublePrice=Decimal("4200"),
        WorkshopStandardPrice=Decimal("0"),
    )
    fields.update(overrides)
    event = Event(**fields)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture
def make_event(db_session):
    def factory(year=2026, current=True, **overrides):
        return _make_event(db_session, year=year, current=current, **overrides)

    return factory


@pytest.fixture
def current_event(make_event):
    return make_event()


@pytest.fixture
def catalog(db_session, current_event):
    """Current event with two tables, a simple, sized and transport add-on and workshops."""
    from app.models.addons import Addon
    from app.models.gala import GalaTable
    from app.models.workshop import Milonga, Workshop

    now = utcnow()
    eid = current_event.EventID
    db_session.add_all(
        [
            GalaTable(
                EventID=eid,
                TableNumber=5,
                TotalSeats=6,
                OccupiedSeats=0,
                Price=Decimal("500"),
                EarlyBirdPrice=Decimal("400"),
                EarlyBirdEndDate=now + timedelta(days=10),
            ),
            GalaTable(EventID=eid, TableNumber=7, TotalSeats=6, OccupiedSeats=5, Price=Decimal("300")),
            Addon(EventID=eid, Code="mug", Name="Festival Mug", Price=Decimal("20"), Category="merchandise"),
            Addon(
                EventID=eid,
                Code="tshirt",
                Name="Festival T-Shirt",
                Price=Decimal("35"),
                Options={"sizes": ["S", "M", "L"]},
            ),
            Addon(
                EventID=eid,
                Code="desert-transport",
                Name="Desert Transport",
                Price=Decimal("75"),
                Category="transportation",
            ),
            Workshop(
                EventID=eid,
                Title="Musicality",
                Instructor="A",
                Level="intermediate",
                Date=now + timedelta(days=61),
                Time="10:00",
                Price=Decimal("150"),
                Capacity=20,
            ),
            Workshop(
                EventID=eid,
                Title="Close Embrace",
                Instructor="B",
                Level="advanced",
                Date=now + timedelta(days=61),
                Time="10:00",
                Price=Decimal("150"),
                Capacity=20,
            ),
            Workshop(
                EventID=eid,
                Title="Full Class",
                Instructor="C",
                Level="beginner",
                Date=now + timedelta(days=62),
                Time="12:00",
                Price=Decimal("150"),
                Capacity=1,
                Enrolled=1,
            ),
            Milonga(
                EventID=eid,
                Name="Opening Milonga",
                Date=now + timedelta(days=60),
                Time="21:00",
                Venue="Ballroom",
                Price=Decimal("80"),
                Capacity=200,
            ),
        ]
    )
    db_session.commit()
    return current_event
