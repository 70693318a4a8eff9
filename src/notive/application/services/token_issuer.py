"""Session token issuance and validation.

Hey future me - this is the ONLY authority on token validity. Tokens are plain
HS256 JWTs: three base64url segments (header.payload.signature), payload
``{id, email, iat, exp}``. No password, no hash, nothing secret goes in there -
anybody can base64-decode a JWT payload!

Expiry is checked against our own clock instead of PyJWT's wall clock. That's
what makes validate_ignoring_expiry() possible without a second decode path,
and it lets tests fast-forward time by injecting a clock.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from notive.config import AuthSettings
from notive.domain.entities import TokenClaims, UserIdentity
from notive.domain.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    """Default clock: aware UTC now."""
    return datetime.now(UTC)


class TokenIssuer:
    """Mint and validate signed session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_clock,
    ) -> None:
        """Initialize the issuer.

        Args:
            secret: HMAC signing secret (server-held, never sent to clients)
            algorithm: HMAC algorithm name
            ttl: Token lifetime from issuance
            clock: Returns the current aware UTC datetime
        """
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: AuthSettings, clock: Clock = utc_clock) -> "TokenIssuer":
        """Build an issuer from auth settings."""
        return cls(
            secret=settings.jwt_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(days=settings.token_ttl_days),
            clock=clock,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user: UserIdentity) -> str:
        """Mint a token for a user.

        Args:
            user: Subject of the token

        Returns:
            Encoded JWT valid for ``ttl`` from now
        """
        issued_at = self._clock()
        payload = {
            "id": user.id,
            "email": user.email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        logger.debug("Issued token for user %s", user.id)
        return token

    def validate(self, token: str) -> TokenClaims:
        """Verify signature, structure AND expiry.

        Raises:
            InvalidSignatureError: Signature doesn't match
            MalformedTokenError: Not a JWT or claims missing
            TokenExpiredError: Past ``exp``
        """
        claims = self._decode(token)
        if claims.is_expired(self._clock()):
            raise TokenExpiredError()
        return claims

    # Hey future me - ONLY the refresh endpoint may call this! It still rejects forged
    # and garbled tokens, it just doesn't care that the token is old. Using it anywhere
    # else turns a 7-day token into a forever token.
    def validate_ignoring_expiry(self, token: str) -> TokenClaims:
        """Verify signature and structure, accept expired tokens.

        Raises:
            InvalidSignatureError: Signature doesn't match
            MalformedTokenError: Not a JWT or claims missing
        """
        return self._decode(token)

    def _decode(self, token: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token is empty")

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError("Token signature is invalid") from e
        except jwt.DecodeError as e:
            raise MalformedTokenError("Token could not be decoded") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Token rejected: {e}") from e

        return self._claims_from_payload(payload)

    @staticmethod
    def _claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
        try:
            subject_id = int(payload["id"])
            subject_email = str(payload["email"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedTokenError("Token is missing required claims") from e

        return TokenClaims(
            subject_id=subject_id,
            subject_email=subject_email,
            issued_at=issued_at,
            expires_at=expires_at,
        )
