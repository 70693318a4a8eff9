"""Tests for bearer token parsing and the protected-route guard."""

import pytest

from notive.api.dependencies import get_bearer_token, get_current_claims, parse_bearer_token
from notive.application.services.token_issuer import TokenIssuer
from notive.domain.entities import ApiErrorCode, UserIdentity
from notive.domain.exceptions import AuthenticationError, AuthorizationError
from tests.helpers import FakeClock

ALICE = UserIdentity(id=1, name="Alice", email="alice@example.com")


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc.def.ghi", "abc.def.ghi"),
        ("BEARER   abc.def.ghi  ", "abc.def.ghi"),
        ("abc.def.ghi", "abc.def.ghi"),
        ("Bearer", None),
        ("Bearer   ", None),
    ],
)
def test_parse_bearer_token(header: str, expected: str | None) -> None:
    assert parse_bearer_token(header) == expected


@pytest.mark.parametrize("header", [None, "", "   "])
async def test_get_bearer_token_absent(header: str | None) -> None:
    assert await get_bearer_token(header) is None


class TestGetCurrentClaims:
    """401 for a missing token, 403 for a rejected one."""

    async def test_valid_token(self, token_issuer: TokenIssuer) -> None:
        claims = await get_current_claims(token_issuer.issue(ALICE), token_issuer)
        assert claims.subject_id == ALICE.id

    async def test_missing_token(self, token_issuer: TokenIssuer) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_claims(None, token_issuer)
        assert exc_info.value.code == ApiErrorCode.NO_TOKEN

    async def test_garbage_token(self, token_issuer: TokenIssuer) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            await get_current_claims("garbage", token_issuer)
        assert exc_info.value.code == ApiErrorCode.INVALID_TOKEN

    async def test_expired_token(self, token_issuer: TokenIssuer, clock: FakeClock) -> None:
        token = token_issuer.issue(ALICE)
        clock.advance(days=8)

        with pytest.raises(AuthorizationError) as exc_info:
            await get_current_claims(token, token_issuer)
        assert exc_info.value.code == ApiErrorCode.TOKEN_EXPIRED
