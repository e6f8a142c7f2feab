import os

import pytest

# Keep the module-level app in gsd.main off the on-disk development database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402

from gsd.database import create_db_and_tables  # noqa: E402
from gsd.main import create_app  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    """A fresh SQLite database file per test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    app = create_app(engine=engine)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def api(client):
    """Prefix helper for routes mounted under API_URL_BASE."""
    base = client.app.state.settings.API_URL_BASE
    return lambda path: f"{base}{path}"
