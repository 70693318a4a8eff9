"""Authenticated HTTP pipeline with transparent token refresh."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from notive.config import ClientSettings
from notive.domain.entities import CredentialRecord, UserIdentity
from notive.infrastructure.persistence.credential_store import CredentialStore

logger = logging.getLogger(__name__)

RefreshedHook = Callable[[CredentialRecord], Awaitable[None]]
ExpiredHook = Callable[[], Awaitable[None]]

AUTH_FAILURE_STATUSES = frozenset({401, 403})


class SessionClient:
    """HTTP client that attaches the stored bearer and refreshes it on 401/403.

    Per call:
    1. attach ``Authorization: Bearer <token>`` if the store has a token
    2. send
    3. anything but 401/403 (or a transport error) goes straight back to the caller
    4. 401/403 from the refresh endpoint itself: clear credentials, return it
    5. 401/403 elsewhere: run ONE shared refresh, then retry the call once with the
       new token. If the refresh fails the credentials are cleared and the ORIGINAL
       401/403 response is returned.

    Hooks (both optional, both awaited):
        on_refreshed(record): a refresh stored a new token
        on_session_expired(): credentials were dropped because the server rejected them
    """

    # Hey future me - the single-flight refresh is the whole point of this class. If five
    # requests come back 401 at once and each runs its own refresh, the server mints five
    # tokens and whichever save() lands last wins, while the other four retries went out
    # with tokens we immediately overwrote. So: the first failure creates ONE task, the
    # others await that same task, and the slot is emptied when it finishes. The lock only
    # guards creating/reading the slot, never the network call itself.
    def __init__(
        self,
        base_url: str,
        store: CredentialStore,
        timeout: float = 30.0,
        refresh_path: str = "/refresh-token",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the session client.

        Args:
            base_url: Server root, e.g. ``http://localhost:3000``
            store: Where the (token, user) pair lives
            timeout: Per-request timeout in seconds
            refresh_path: Path of the token refresh endpoint
            transport: Custom httpx transport (tests use MockTransport/ASGITransport)
        """
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.timeout = timeout
        self.refresh_path = refresh_path
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._refresh_lock = asyncio.Lock()
        self._refresh_task: asyncio.Task[CredentialRecord | None] | None = None
        self.on_refreshed: RefreshedHook | None = None
        self.on_session_expired: ExpiredHook | None = None

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        store: CredentialStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SessionClient":
        """Build a client from client settings (SQLite credential store by default)."""
        return cls(
            base_url=settings.base_url,
            store=store or CredentialStore.from_settings(settings),
            timeout=settings.timeout_seconds,
            refresh_path=settings.refresh_path,
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # =========================================================================
    # Request pipeline
    # =========================================================================

    async def _send(
        self, method: str, url: str, token: str | None, **kwargs: Any
    ) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            headers.pop("Authorization", None)

        client = await self._get_client()
        response = await client.request(method, url, headers=headers, **kwargs)
        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    def _is_refresh_call(self, url: str) -> bool:
        return httpx.URL(url).path.rstrip("/") == self.refresh_path.rstrip("/")

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request through the auth pipeline.

        Args:
            method: HTTP method
            url: Path relative to base_url (or absolute URL)
            **kwargs: Passed to httpx (json, params, headers, ...)

        Returns:
            The final response. 401/403 is only returned when refreshing did not help.

        Raises:
            httpx.HTTPError: Transport failures (including timeouts), unchanged
        """
        record = await self.store.load()
        sent_token = record.token
        response = await self._send(method, url, sent_token, **kwargs)

        if response.status_code not in AUTH_FAILURE_STATUSES:
            return response

        if self._is_refresh_call(url):
            logger.info("Refresh endpoint rejected the token, clearing session")
            await self._expire_session()
            return response

        # Another request may have rotated the token while this one was in flight.
        current = await self.store.load()
        if current.token and current.token != sent_token:
            return await self._send(method, url, current.token, **kwargs)

        refreshed = await self._refresh_single_flight()
        if refreshed is None:
            return response

        # At most one retry per call: a second 401/403 goes back to the caller as-is.
        return await self._send(method, url, refreshed.token, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    # =========================================================================
    # Refresh
    # =========================================================================

    async def refresh(self) -> CredentialRecord | None:
        """Refresh the stored token now, joining any refresh already in flight.

        Returns:
            The new record, or None if the refresh failed (credentials are cleared)
        """
        return await self._refresh_single_flight()

    async def _refresh_single_flight(self) -> CredentialRecord | None:
        async with self._refresh_lock:
            if self._refresh_task is None:
                task = asyncio.create_task(self._run_refresh())
                task.add_done_callback(self._release_refresh_slot)
                self._refresh_task = task
            task = self._refresh_task

        # shield: a cancelled waiter must not cancel the refresh other waiters depend on
        return await asyncio.shield(task)

    def _release_refresh_slot(self, task: "asyncio.Task[CredentialRecord | None]") -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _run_refresh(self) -> CredentialRecord | None:
        """Exchange the stored (possibly expired) token for a new one.

        Returns:
            The new record, or None after clearing credentials
        """
        current = await self.store.load()
        if not current.token:
            logger.info("No stored token to refresh")
            await self._expire_session(notify=False)
            return None

        try:
            response = await self._send("POST", self.refresh_path, current.token, json={})
        except httpx.HTTPError as e:
            logger.warning("Token refresh failed (network): %s", e)
            await self._expire_session()
            return None

        record = self._parse_refresh(response)
        if record is None:
            logger.info("Token refresh rejected with status %d", response.status_code)
            await self._expire_session()
            return None

        if not await self.store.save(record.token, record.user):
            logger.warning("Could not persist refreshed token, ending session")
            await self._expire_session()
            return None

        logger.info("Token refreshed for user %s", record.user.id if record.user else "?")
        if self.on_refreshed is not None:
            await self.on_refreshed(record)
        return record

    @staticmethod
    def _parse_refresh(response: httpx.Response) -> CredentialRecord | None:
        if not response.is_success:
            return None
        try:
            data = response.json()
            if not data.get("success"):
                return None
            token = data["token"]
            user = UserIdentity.from_dict(data["user"])
        except (ValueError, KeyError, TypeError, AttributeError):
            return None
        if not token:
            return None
        return CredentialRecord(token=token, user=user)

    async def _expire_session(self, notify: bool = True) -> None:
        await self.store.clear()
        if notify and self.on_session_expired is not None:
            await self.on_session_expired()
