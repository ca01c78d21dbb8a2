from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_api import models  # noqa: F401
from booking_api.database import Base, get_db
from booking_api.main import app
from booking_api.services.tokens import InMemoryTokenStore, get_token_store


class FakeClock:
    """Reloj monótono manual para probar vencimientos."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_store(clock):
    return InMemoryTokenStore(ttl=timedelta(minutes=15), length=8, clock=clock)


@pytest.fixture
def client(session_factory, token_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_store] = lambda: token_store
    # Sin `with`: no corre el startup (ni init_db real ni el scheduler)
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
