# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from contextlib import nullcontext

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-signing-secret")
os.environ.setdefault("MESSAGE_SECRET", "test-message-passphrase")
# Keep scrypt cheap under test; production uses the configured default.
os.environ.setdefault("MESSAGE_KDF_N", "1024")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from staylink.api.v1.dependencies import get_relay_service  # noqa: E402
from staylink.db.session import Base, enable_sqlite_foreign_keys  # noqa: E402
from staylink.db.session import get_db as app_get_session  # noqa: E402
from staylink.main import app as fastapi_app  # noqa: E402
from staylink.models import Listing, User  # noqa: E402
from staylink.services.cipher import ContentCipher, get_content_cipher  # noqa: E402
from staylink.services.registry import ConnectionRegistry  # noqa: E402
from staylink.services.relay import RelayService  # noqa: E402

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture(scope="session")
def cipher() -> ContentCipher:
    """The process-wide cipher, shared with the REST dependency."""
    return get_content_cipher()


@pytest.fixture()
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture()
def relay(registry: ConnectionRegistry, cipher: ContentCipher, db_session: Session) -> RelayService:
    """Relay wired to the test session instead of opening its own."""
    return RelayService(registry, cipher, lambda: nullcontext(db_session))


@pytest.fixture()
def relay_override(app: FastAPI, relay: RelayService) -> Iterator[RelayService]:
    app.dependency_overrides[get_relay_service] = lambda: relay
    try:
        yield relay
    finally:
        app.dependency_overrides.pop(get_relay_service, None)


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make_user(name: str, avatar: str | None = None) -> User:
        user = User(name=name, avatar=avatar)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def owner(make_user: Callable[..., User]) -> User:
    """Owner of the default listing."""
    return make_user("Olivia Owner", "https://img.example/olivia.png")


@pytest.fixture()
def guest(make_user: Callable[..., User]) -> User:
    return make_user("Gabe Guest")


@pytest.fixture()
def other_guest(make_user: Callable[..., User]) -> User:
    return make_user("Grace Guest")


@pytest.fixture()
def listing(db_session: Session, owner: User) -> Listing:
    listing = Listing(owner_id=owner.id, title="Lakeside cabin")
    db_session.add(listing)
    db_session.commit()
    db_session.refresh(listing)
    return listing

