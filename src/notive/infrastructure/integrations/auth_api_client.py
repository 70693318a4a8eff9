"""Client for the account, profile and subscription endpoints."""

import logging
from datetime import datetime
from typing import Any

from notive.domain.entities import (
    ApiErrorCode,
    AuthResult,
    ErrorKind,
    Plan,
    Subscription,
    UserIdentity,
    get_error_message,
)
from notive.domain.exceptions import ApiError
from notive.infrastructure.integrations.api_errors import json_or_raise
from notive.infrastructure.integrations.session_client import SessionClient

logger = logging.getLogger(__name__)


def _auth_result(data: dict[str, Any]) -> AuthResult:
    try:
        return AuthResult(token=str(data["token"]), user=UserIdentity.from_dict(data["user"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ApiError("Malformed authentication response") from e


def _subscription(data: dict[str, Any]) -> Subscription:
    return Subscription(
        user_id=int(data["userId"]),
        plan=str(data["plan"]),
        created_at=datetime.fromisoformat(data["createdAt"]),
        updated_at=datetime.fromisoformat(data["updatedAt"]),
    )


class AuthApiClient:
    """Typed wrapper around the auth/profile/subscription HTTP API.

    Every call goes through the SessionClient, so bearer handling and token
    refresh happen underneath. This class never touches tokens itself; it only
    hands back what the server returned. Persisting a login is the controller's job.
    """

    def __init__(self, session: SessionClient) -> None:
        self.session = session

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account.

        Raises:
            ApiError: VALIDATION (MISSING_FIELDS/INVALID_EMAIL/WEAK_PASSWORD) or
                CONFLICT (EMAIL_EXISTS)
        """
        response = await self.session.post(
            "/register", json={"name": name, "email": email, "password": password}
        )
        return _auth_result(json_or_raise(response))

    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password.

        Raises:
            ApiError: VALIDATION or AUTH (INVALID_CREDENTIALS)
        """
        response = await self.session.post(
            "/login", json={"email": email, "password": password}
        )
        return _auth_result(json_or_raise(response))

    async def refresh(self) -> AuthResult:
        """Exchange the stored token for a new one.

        Shares the session client's in-flight refresh, if any. A rejected refresh has
        already cleared the stored credentials by the time this raises.

        Raises:
            ApiError: AUTH (INVALID_TOKEN) when no new token could be obtained
        """
        record = await self.session.refresh()
        if record is None or record.token is None or record.user is None:
            raise ApiError(
                get_error_message(ApiErrorCode.INVALID_TOKEN),
                code=ApiErrorCode.INVALID_TOKEN,
                status_code=401,
                kind=ErrorKind.AUTH,
            )
        return AuthResult(token=record.token, user=record.user)

    async def get_profile(self) -> UserIdentity:
        data = json_or_raise(await self.session.get("/profile"))
        try:
            return UserIdentity.from_dict(data)
        except (KeyError, ValueError) as e:
            raise ApiError("Malformed profile response") from e

    async def update_profile(self, name: str, email: str) -> UserIdentity:
        response = await self.session.put("/profile", json={"name": name, "email": email})
        data = json_or_raise(response)
        try:
            return UserIdentity.from_dict(data["user"])
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError("Malformed profile response") from e

    async def change_password(self, old_password: str, new_password: str) -> None:
        response = await self.session.post(
            "/change-password",
            json={"oldPassword": old_password, "newPassword": new_password},
        )
        json_or_raise(response)

    async def list_plans(self) -> list[Plan]:
        data = json_or_raise(await self.session.get("/plans"))
        return [Plan(**plan) for plan in data.get("plans", [])]

    async def subscribe(self, plan: str) -> Subscription:
        data = json_or_raise(await self.session.post("/subscribe", json={"plan": plan}))
        return _subscription(data["subscription"])

    async def get_subscription(self) -> Subscription | None:
        data = json_or_raise(await self.session.get("/subscription"))
        raw = data.get("subscription")
        return _subscription(raw) if raw else None
