"""API schemas for accounts, tokens and profiles.

Request fields are all optional on purpose: a missing field is reported by the
service as MISSING_FIELDS / MISSING_CREDENTIALS (400) instead of a generic 422.
"""

from pydantic import BaseModel, ConfigDict, Field

from notive.domain.entities import AuthResult, UserIdentity


class RegisterRequest(BaseModel):
    """Body of POST /register."""

    name: str | None = Field(default=None, description="Display name")
    email: str | None = Field(default=None, description="Login email")
    password: str | None = Field(default=None, description="Plain password (min 6 chars)")


class LoginRequest(BaseModel):
    """Body of POST /login."""

    email: str | None = None
    password: str | None = None


class UpdateProfileRequest(BaseModel):
    """Body of PUT /profile."""

    name: str | None = None
    email: str | None = None


class ChangePasswordRequest(BaseModel):
    """Body of POST /change-password."""

    model_config = ConfigDict(populate_by_name=True)

    old_password: str | None = Field(default=None, alias="oldPassword")
    new_password: str | None = Field(default=None, alias="newPassword")


class UserResponse(BaseModel):
    """Public profile. Never contains the password hash."""

    id: int
    name: str
    email: str

    @classmethod
    def from_entity(cls, user: UserIdentity) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email)


class AuthResponse(BaseModel):
    """Token + profile returned by register, login and refresh."""

    success: bool = True
    token: str = Field(..., description="Signed session token (JWT)")
    user: UserResponse

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(token=result.token, user=UserResponse.from_entity(result.user))


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    user: UserResponse


class SuccessResponse(BaseModel):
    success: bool = True
