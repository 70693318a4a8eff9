"""Tests for AuthSessionController against a fake server on httpx.MockTransport."""

import json

import httpx
import pytest

from notive.application.services.auth_session_service import (
    SAVE_FAILED_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    AuthSessionController,
)
from notive.domain.entities import AuthSnapshot, AuthState, ErrorKind, UserIdentity
from notive.domain.exceptions import ApiError
from notive.infrastructure.integrations.auth_api_client import AuthApiClient
from notive.infrastructure.integrations.session_client import SessionClient
from notive.infrastructure.persistence.credential_store import (
    TOKEN_KEY,
    USER_KEY,
    CredentialStore,
    InMemoryKeyValueStorage,
)

ALICE = UserIdentity(id=1, name="Alice", email="alice@example.com")
OLD_TOKEN = "old.token.value"
NEW_TOKEN = "new.token.value"


def _json(status: int, body: dict) -> httpx.Response:
    return httpx.Response(status, json=body)


def _error(status: int, message: str, code: str) -> httpx.Response:
    return _json(status, {"success": False, "error": message, "code": code})


class FakeServer:
    """Just enough of the API: one account, one valid token at a time."""

    def __init__(self) -> None:
        self.valid_token = NEW_TOKEN
        self.user = ALICE
        self.refresh_status = 200
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        bearer = request.headers.get("Authorization", "").removeprefix("Bearer ")

        if path == "/login":
            body = json.loads(request.content)
            if body.get("password") != "secret1":
                return _error(401, "Invalid credentials", "INVALID_CREDENTIALS")
            return _json(200, {"success": True, "token": NEW_TOKEN, "user": self.user.to_dict()})

        if path == "/refresh-token":
            if self.refresh_status != 200:
                return _error(self.refresh_status, "Invalid token", "INVALID_TOKEN")
            return _json(200, {"success": True, "token": NEW_TOKEN, "user": self.user.to_dict()})

        if bearer != self.valid_token:
            return _error(403, "Token expired", "TOKEN_EXPIRED")
        if path == "/profile" and request.method == "PUT":
            body = json.loads(request.content)
            self.user = UserIdentity(id=1, name=body["name"], email=body["email"])
            return _json(200, {"success": True, "user": self.user.to_dict()})
        if path == "/profile":
            return _json(200, self.user.to_dict())
        return _error(404, "Resource not found", "NOT_FOUND")


class ReadOnlyStorage(InMemoryKeyValueStorage):
    """Storage that can be read but never written, like a full disk."""

    async def multi_set(self, items: dict[str, str]) -> None:
        raise OSError("database or disk is full")


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def controller(server: FakeServer, storage: InMemoryKeyValueStorage) -> AuthSessionController:
    store = CredentialStore(storage)
    session = SessionClient(
        "http://testserver", store, transport=httpx.MockTransport(server)
    )
    return AuthSessionController(store, AuthApiClient(session))


async def _seed(
    storage: InMemoryKeyValueStorage, token: str, user: UserIdentity = ALICE
) -> None:
    await storage.multi_set({TOKEN_KEY: token, USER_KEY: json.dumps(user.to_dict())})


class TestInitialize:
    """Startup restore from the credential store."""

    async def test_starts_initializing(self, controller: AuthSessionController) -> None:
        assert controller.snapshot().state is AuthState.INITIALIZING
        assert controller.snapshot().is_loading

    async def test_empty_store(self, controller: AuthSessionController) -> None:
        seen: list[AuthSnapshot] = []
        controller.subscribe(seen.append)

        snapshot = await controller.initialize()

        assert snapshot.state is AuthState.UNAUTHENTICATED
        assert snapshot.user is None
        assert [s.state for s in seen] == [AuthState.INITIALIZING, AuthState.UNAUTHENTICATED]

    async def test_restores_stored_session(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await _seed(storage, NEW_TOKEN)

        snapshot = await controller.initialize()

        assert snapshot.is_authenticated
        assert snapshot.user == ALICE

    async def test_malformed_token_is_dropped(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await _seed(storage, "not-a-jwt")

        snapshot = await controller.initialize()

        assert snapshot.state is AuthState.UNAUTHENTICATED
        assert storage.data == {}

    async def test_malformed_token_without_user_is_dropped(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await storage.multi_set({TOKEN_KEY: "abc"})

        snapshot = await controller.initialize()

        assert snapshot.state is AuthState.UNAUTHENTICATED
        assert storage.data == {}


class TestLoginLogout:
    async def test_login_persists_session(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await controller.initialize()

        result = await controller.login("alice@example.com", "secret1")

        assert result.token == NEW_TOKEN
        assert controller.snapshot().is_authenticated
        assert controller.snapshot().user == ALICE
        assert storage.data[TOKEN_KEY] == NEW_TOKEN

    async def test_login_failure_keeps_error(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await controller.initialize()

        with pytest.raises(ApiError) as exc_info:
            await controller.login("alice@example.com", "wrong")

        assert exc_info.value.kind is ErrorKind.AUTH
        assert exc_info.value.code == "INVALID_CREDENTIALS"
        snapshot = controller.snapshot()
        assert snapshot.state is AuthState.UNAUTHENTICATED
        assert snapshot.error == "Invalid credentials"
        assert storage.data == {}

    async def test_login_with_unwritable_storage(self, server: FakeServer) -> None:
        store = CredentialStore(ReadOnlyStorage())
        session = SessionClient("http://testserver", store, transport=httpx.MockTransport(server))
        controller = AuthSessionController(store, AuthApiClient(session))

        await controller.login("alice@example.com", "secret1")

        snapshot = controller.snapshot()
        assert snapshot.state is AuthState.UNAUTHENTICATED
        assert snapshot.error == SAVE_FAILED_MESSAGE

    async def test_logout(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await controller.login("alice@example.com", "secret1")

        await controller.logout()

        assert controller.snapshot().state is AuthState.UNAUTHENTICATED
        assert storage.data == {}

    async def test_unsubscribe(self, controller: AuthSessionController) -> None:
        seen: list[AuthSnapshot] = []
        unsubscribe = controller.subscribe(seen.append)
        unsubscribe()

        await controller.initialize()

        assert seen == []


class TestRefresh:
    async def test_transparent_refresh_updates_user(
        self,
        controller: AuthSessionController,
        storage: InMemoryKeyValueStorage,
        server: FakeServer,
    ) -> None:
        await _seed(storage, OLD_TOKEN)
        await controller.initialize()
        server.user = UserIdentity(id=1, name="Alice B.", email="alice@example.com")

        profile = await controller.api.get_profile()

        assert profile.name == "Alice B."
        assert controller.snapshot().user == server.user
        assert storage.data[TOKEN_KEY] == NEW_TOKEN
        assert server.calls == ["/profile", "/refresh-token", "/profile"]

    async def test_rejected_refresh_expires_session(
        self,
        controller: AuthSessionController,
        storage: InMemoryKeyValueStorage,
        server: FakeServer,
    ) -> None:
        await _seed(storage, OLD_TOKEN)
        await controller.initialize()
        server.refresh_status = 401

        with pytest.raises(ApiError) as exc_info:
            await controller.api.get_profile()

        assert exc_info.value.status_code == 403
        snapshot = controller.snapshot()
        assert snapshot.state is AuthState.UNAUTHENTICATED
        assert snapshot.error == SESSION_EXPIRED_MESSAGE
        assert storage.data == {}

    async def test_explicit_refresh(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await _seed(storage, OLD_TOKEN)
        await controller.initialize()

        assert await controller.refresh_auth() is True
        assert storage.data[TOKEN_KEY] == NEW_TOKEN
        assert controller.snapshot().is_authenticated

    async def test_explicit_refresh_failure_logs_out(
        self,
        controller: AuthSessionController,
        storage: InMemoryKeyValueStorage,
        server: FakeServer,
    ) -> None:
        await _seed(storage, OLD_TOKEN)
        await controller.initialize()
        server.refresh_status = 401

        assert await controller.refresh_auth() is False
        assert controller.snapshot().state is AuthState.UNAUTHENTICATED
        assert storage.data == {}


class TestProfile:
    async def test_update_profile_mirrors_locally(
        self, controller: AuthSessionController, storage: InMemoryKeyValueStorage
    ) -> None:
        await controller.login("alice@example.com", "secret1")

        user = await controller.update_profile("Alicia", "alicia@example.com")

        assert user.name == "Alicia"
        assert controller.snapshot().user == user
        assert controller.snapshot().is_authenticated
        assert json.loads(storage.data[USER_KEY])["email"] == "alicia@example.com"
        assert storage.data[TOKEN_KEY] == NEW_TOKEN
