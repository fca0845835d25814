"""
LPAR Inventory Test Suite — Shared Fixtures

Everything runs in-process against a fresh in-memory SQLite database per
test: service tests take the ``db`` session, API tests the ``client``.

Usage:
    pip install -e ".[test]"
    pytest -v --tb=short
"""

import os
import sys
from pathlib import Path

# Settings are read at import time; point them at throwaway defaults first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.db import build_engine, get_db, init_db


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture()
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    from core.app import create_app
    return create_app(init_database=False)


@pytest.fixture()
def client(app, session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeded inventory
# ---------------------------------------------------------------------------

@pytest.fixture()
def mainframe(db):
    """IBM catalog (CICS, DB2), one customer with one LPAR and a package."""
    from helpers import seed_mainframe
    return seed_mainframe(db)
