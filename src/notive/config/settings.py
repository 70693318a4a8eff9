"""Application settings loaded from environment variables and .env files.

Hey future me - every section is a nested BaseSettings model. With
env_nested_delimiter="__" you override a nested value like this:

    AUTH__JWT_SECRET=super-secret
    DATABASE__URL=postgresql+asyncpg://notive:notive@db/notive
    CLIENT__BASE_URL=https://api.example.com
    AI__API_KEY=sk-...

The same Settings object is shared by the API server and the session client,
the client just ignores the server sections.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me-in-production-please-use-a-long-secret"


class DatabaseSettings(BaseSettings):
    """Relational store for users, subscriptions and folders."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_", extra="ignore")

    url: str = Field(
        default="sqlite+aiosqlite:///./data/notive.db",
        description="SQLAlchemy async URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )
    echo: bool = Field(default=False, description="Log every SQL statement")
    pool_pre_ping: bool = True
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, ge=1)
    pool_recycle: int = Field(default=1800, ge=-1)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AuthSettings(BaseSettings):
    """Token issuance and password policy."""

    model_config = SettingsConfigDict(env_prefix="AUTH_", extra="ignore")

    jwt_secret: SecretStr = Field(
        default=SecretStr(DEFAULT_JWT_SECRET),
        description="HMAC secret used to sign session tokens",
    )
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_days: int = Field(default=7, ge=1)
    min_password_length: int = Field(default=6, ge=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    @field_validator("jwt_algorithm")
    @classmethod
    def _only_hmac(cls, value: str) -> str:
        # Tokens are signed with a shared secret, asymmetric algorithms need key pairs.
        if not value.upper().startswith("HS"):
            raise ValueError("jwt_algorithm must be an HMAC algorithm (HS256/HS384/HS512)")
        return value.upper()


class ClientSettings(BaseSettings):
    """Settings for the device-side session client."""

    model_config = SettingsConfigDict(env_prefix="CLIENT_", extra="ignore")

    base_url: str = Field(default="http://localhost:3000")
    timeout_seconds: float = Field(default=30.0, gt=0)
    credential_db_path: Path = Field(default=Path("data/credentials.db"))
    refresh_path: str = Field(default="/refresh-token")


class StorageSettings(BaseSettings):
    """Where uploaded media and documents are written."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", extra="ignore")

    upload_dir: Path = Field(default=Path("data/uploads"))
    public_prefix: str = Field(
        default="/uploads", description="URL path under which uploads are served"
    )
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, ge=1)


# Hey future me - api_key is optional. Without it the server still starts and
# everything but the AI chat works; sending a message answers 502 AI_UNAVAILABLE.
class AISettings(BaseSettings):
    """OpenAI-compatible chat completion endpoint used by conversations."""

    model_config = SettingsConfigDict(env_prefix="AI_", extra="ignore")

    base_url: str = Field(default="https://api.openai.com/v1")
    api_key: SecretStr | None = Field(default=None)
    model: str = Field(default="gpt-3.5-turbo")
    timeout_seconds: float = Field(default=60.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_", extra="ignore")

    log_level: str = Field(default="INFO")
    log_json_format: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def _valid_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(default="notive")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    seed_demo_users: bool = Field(
        default=False, description="Create test1/test2 demo accounts at startup"
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ai: AISettings = Field(default_factory=AISettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def uses_default_secret(self) -> bool:
        """True when the JWT secret was never configured."""
        return self.auth.jwt_secret.get_secret_value() == DEFAULT_JWT_SECRET

    def get_sqlite_db_path(self) -> Path | None:
        """Return the SQLite file path of the main database, or None.

        Returns None for non-SQLite URLs and for in-memory databases.
        """
        if not self.database.is_sqlite:
            return None
        _, _, path = self.database.url.partition(":///")
        if not path or path == ":memory:":
            return None
        return Path(path)


# Hey future me - lru_cache makes this a process-wide singleton. Tests that need
# different values build Settings(...) directly and override the FastAPI dependency
# instead of calling get_settings.cache_clear() all over the place.
@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
