import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.settings import settings

# Tests opt into an in-memory SQLite DB by setting TEST_SQLITE=1 before this
# module is imported.
if os.getenv("TEST_SQLITE") == "1":
    # Use StaticPool so the same in-memory DB is reused across connections.
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    url = settings.DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Set by the test suite so in-process request handlers (TestClient) share the
# test's session.
_TEST_SESSION = None


def get_db():
    if _TEST_SESSION is not None:
        yield _TEST_SESSION
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
