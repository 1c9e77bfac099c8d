"""Shared test fixtures and configuration."""
import os

# The app builds its engine at import time; point it at SQLite first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ADMIN_PASSWORD", "adminpass")

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reelvote.api.deps import get_db
from reelvote.client.store import HttpStore
from reelvote.core.cache import global_cache
from reelvote.core.rate_limit import limiter
from reelvote.core.security import create_access_token
from reelvote.db.base import Base
from reelvote.db.models import Reel, Token, Voter
from reelvote.main import app
from reelvote.realtime.hub import BroadcastHub

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
API_BASE = "http://testserver/api/v1"


@pytest.fixture(autouse=True)
def rate_limiting(request):
    """Rate limits only apply to tests marked ``rate_limit``."""
    limiter.reset()
    limiter.enabled = "rate_limit" in request.keywords
    yield
    limiter.enabled = True
    limiter.reset()


@pytest.fixture(autouse=True)
def clear_global_cache():
    global_cache.clear()
    yield
    global_cache.clear()


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def override_db(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield db_session
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(override_db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_token():
    return create_access_token({"is_admin": True})


@pytest.fixture
def admin_client(client, admin_token):
    client.cookies.set("admin_token", admin_token)
    return client


@pytest_asyncio.fixture
async def http_client(override_db):
    """httpx client talking to the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def store(http_client):
    return HttpStore(API_BASE, client=http_client)


@pytest.fixture
def hub():
    """A private broadcast fabric per test."""
    return BroadcastHub()


@pytest.fixture
def reels(db_session):
    """Two categories, two reels each, in screening order."""
    rows = [
        Reel(id="doc-1", reel_number=1, contestant_name="Ana Ruiz", category="Documentary", duration_seconds=180),
        Reel(id="doc-2", reel_number=2, contestant_name="Ben Cole", category="Documentary", duration_seconds=200),
        Reel(id="fic-1", reel_number=1, contestant_name="Chen Li", category="Fiction", duration_seconds=240),
        Reel(id="fic-2", reel_number=2, contestant_name="Dara Okafor", category="Fiction", duration_seconds=150),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def audience_token(db_session):
    token = Token(token="AUD123", token_type="audience", person_name="Maya Lin", category="Fiction")
    db_session.add(token)
    db_session.commit()
    db_session.refresh(token)
    return token


@pytest.fixture
def judge_token(db_session):
    token = Token(token="JDG456", token_type="judge", person_name="Judge Rao")
    db_session.add(token)
    db_session.commit()
    db_session.refresh(token)
    return token


@pytest.fixture
def voter(db_session):
    row = Voter(device_id="device-fixture", device_type="desktop")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row
