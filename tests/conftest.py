"""Shared fixtures: settings on a temp SQLite file, a controllable clock, the app."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import SecretStr

from notive.application.services.password_hasher import PasswordHasher
from notive.application.services.token_issuer import TokenIssuer
from notive.config import (
    AuthSettings,
    ClientSettings,
    DatabaseSettings,
    ObservabilitySettings,
    Settings,
    StorageSettings,
)
from notive.main import create_app
from tests.helpers import TEST_SECRET, FakeClock, FakeCompletion


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every file at tmp_path, with a fast bcrypt cost."""
    return Settings(
        debug=False,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path}/test.db"),
        auth=AuthSettings(jwt_secret=SecretStr(TEST_SECRET), bcrypt_rounds=4),
        client=ClientSettings(credential_db_path=tmp_path / "credentials.db"),
        observability=ObservabilitySettings(log_level="WARNING"),
        storage=StorageSettings(upload_dir=tmp_path / "uploads"),
    )


@pytest.fixture
def token_issuer(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, clock=clock)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def app(
    settings: Settings, token_issuer: TokenIssuer, completion: FakeCompletion
) -> FastAPI:
    return create_app(settings, token_issuer=token_issuer, completion_provider=completion)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """TestClient with the lifespan running (tables created, hasher on app.state)."""
    with TestClient(app) as test_client:
        yield test_client


# Hey future me - httpx.ASGITransport does NOT run the lifespan, so async tests enter it
# themselves. Everything then lives on the test's event loop, which is what lets them
# touch app.state.db directly.
@pytest.fixture
async def running_app(app: FastAPI) -> AsyncGenerator[FastAPI, None]:
    async with app.router.lifespan_context(app):
        yield app
