"""Client-side authentication state.

Hey future me - this is the single source of truth for "is somebody signed in on
this device". It's an explicit object you construct and hand around (UI layer,
tests), NOT a module-level singleton. The states are:

    INITIALIZING -> AUTHENTICATED(user) | UNAUTHENTICATED

and nothing else. Profile edits swap the user but keep AUTHENTICATED.

The SessionClient refreshes tokens on its own. We only listen to its hooks so a
refresh updates our cached user, and a dead session drops us to UNAUTHENTICATED
without anyone having to poll.
"""

import logging
from collections.abc import Callable

from notive.domain.entities import (
    AuthResult,
    AuthSnapshot,
    AuthState,
    CredentialRecord,
    UserIdentity,
)
from notive.domain.exceptions import ApiError
from notive.infrastructure.integrations.auth_api_client import AuthApiClient
from notive.infrastructure.persistence.credential_store import AuthCheck, CredentialStore

logger = logging.getLogger(__name__)

Listener = Callable[[AuthSnapshot], None]

SESSION_EXPIRED_MESSAGE = "Session expired. Please sign in again."
SAVE_FAILED_MESSAGE = "Failed to save authentication data"


class AuthSessionController:
    """Owns {state, user, error} and mediates login/logout/refresh.

    Example:
        controller = AuthSessionController(store, AuthApiClient(session))
        await controller.initialize()
        if not controller.snapshot().is_authenticated:
            await controller.login("test1@example.com", "123456")
    """

    def __init__(self, store: CredentialStore, api: AuthApiClient) -> None:
        self.store = store
        self.api = api
        self._state = AuthState.INITIALIZING
        self._user: UserIdentity | None = None
        self._error: str | None = None
        self._listeners: list[Listener] = []

        api.session.on_refreshed = self._on_refreshed
        api.session.on_session_expired = self._on_session_expired

    # =========================================================================
    # State
    # =========================================================================

    def snapshot(self) -> AuthSnapshot:
        """Current immutable view of the session."""
        return AuthSnapshot(state=self._state, user=self._user, error=self._error)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every change.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(
        self, state: AuthState, user: UserIdentity | None = None, error: str | None = None
    ) -> None:
        self._state = state
        self._user = user if state is AuthState.AUTHENTICATED else None
        self._error = error
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _set_error(self, error: str) -> None:
        self._set(self._state, self._user, error)

    # =========================================================================
    # Startup
    # =========================================================================

    async def check_auth(self) -> AuthCheck:
        """Restore the session from the credential store.

        A structurally broken token is dropped by the store and ends UNAUTHENTICATED.
        """
        self._set(AuthState.INITIALIZING)
        result = await self.store.check_auth()
        if result.is_authenticated and result.user is not None:
            logger.info("Restored session for user %s", result.user.id)
            self._set(AuthState.AUTHENTICATED, result.user)
        else:
            self._set(AuthState.UNAUTHENTICATED)
        return result

    async def initialize(self) -> AuthSnapshot:
        """Run the startup restore and return the resulting snapshot."""
        await self.check_auth()
        return self.snapshot()

    # =========================================================================
    # Sign in / out
    # =========================================================================

    # A session that could not be written to the device does not exist: the next request
    # would go out without a token. So a failed save lands in UNAUTHENTICATED.
    async def _establish(self, result: AuthResult) -> AuthResult:
        if not await self.store.save(result.token, result.user):
            self._set(AuthState.UNAUTHENTICATED, error=SAVE_FAILED_MESSAGE)
            return result
        self._set(AuthState.AUTHENTICATED, result.user)
        return result

    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in and persist the new credentials.

        If the credentials cannot be stored the controller ends UNAUTHENTICATED with
        ``error`` set, so check snapshot() rather than the returned result.

        Raises:
            ApiError: The server refused (the message is also kept as ``error``)
            httpx.HTTPError: Transport failure
        """
        try:
            result = await self.api.login(email, password)
        except ApiError as e:
            self._set_error(e.message)
            raise
        logger.info("Signed in as user %s", result.user.id)
        return await self._establish(result)

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account, then behave like a successful login."""
        try:
            result = await self.api.register(name, email, password)
        except ApiError as e:
            self._set_error(e.message)
            raise
        logger.info("Registered user %s", result.user.id)
        return await self._establish(result)

    async def logout(self) -> None:
        """Forget the session locally. Never fails."""
        await self.store.clear()
        self._set(AuthState.UNAUTHENTICATED)
        logger.info("Signed out")

    async def refresh_auth(self) -> bool:
        """Explicitly exchange the stored token for a new one.

        Goes through the session client's shared refresh, so an explicit refresh racing a
        401-triggered one costs a single call to the server.

        Returns:
            True on success. On any failure the session is logged out and False returned.
        """
        record = await self.api.session.refresh()
        if record is None or record.user is None:
            logger.warning("Explicit token refresh failed")
            await self.logout()
            return False

        self._set(AuthState.AUTHENTICATED, record.user)
        return True

    # =========================================================================
    # Profile
    # =========================================================================

    async def update_user(self, user: UserIdentity) -> None:
        """Replace the cached profile, keeping the session authenticated.

        Raises:
            IncompleteCredentialsError: If no session is stored
        """
        if not await self.store.update_user(user):
            self._set(AuthState.UNAUTHENTICATED, error=SAVE_FAILED_MESSAGE)
            return
        self._set(AuthState.AUTHENTICATED, user)

    async def update_profile(self, name: str, email: str) -> UserIdentity:
        """Change name/email on the server and mirror it locally."""
        user = await self.api.update_profile(name, email)
        await self.update_user(user)
        return user

    async def change_password(self, old_password: str, new_password: str) -> None:
        await self.api.change_password(old_password, new_password)

    # =========================================================================
    # Session client hooks
    # =========================================================================

    async def _on_refreshed(self, record: CredentialRecord) -> None:
        if record.user is not None:
            self._set(AuthState.AUTHENTICATED, record.user)

    async def _on_session_expired(self) -> None:
        logger.info("Session expired, switching to unauthenticated")
        self._set(AuthState.UNAUTHENTICATED, error=SESSION_EXPIRED_MESSAGE)
