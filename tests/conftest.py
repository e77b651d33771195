import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tinylink.api.deps import get_cache, get_db
from tinylink.db.base import Base
from tinylink.main import app
from tinylink.models.url import URL  # noqa: F401


# -------------------------------
# Database fixtures
# -------------------------------


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several threads can share one database."""
    _engine = create_engine(
        f"sqlite:///{tmp_path / 'tinylink_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=_engine)
    yield _engine
    _engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# -------------------------------
# API fixtures
# -------------------------------


@pytest.fixture
def client(session_factory):
    """TestClient wired to the test database, with the cache disabled."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()
