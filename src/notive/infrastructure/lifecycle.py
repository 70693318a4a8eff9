"""Application lifecycle management for startup and shutdown tasks."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from notive.application.services.password_hasher import PasswordHasher
from notive.application.services.token_issuer import TokenIssuer
from notive.config import Settings
from notive.domain.exceptions import ConfigurationError
from notive.infrastructure.integrations.completion_client import ChatCompletionClient
from notive.infrastructure.observability import configure_logging
from notive.infrastructure.persistence import Database
from notive.infrastructure.persistence.file_storage import LocalFileStorage
from notive.infrastructure.persistence.seed import seed_demo_users

logger = logging.getLogger(__name__)


# Hey future me, this checks the SQLite directory BEFORE the engine is created. SQLite needs
# to create -journal/-wal/-shm files next to the .db, so the directory must be writable, not
# just the file. Failing here gives a readable ConfigurationError instead of an
# "unable to open database file" deep inside SQLAlchemy on the first request.
def _validate_sqlite_path(settings: Settings) -> None:
    """Ensure the SQLite database directory exists and is writable."""
    db_path = settings.get_sqlite_db_path()
    if db_path is None:
        return

    try:
        if str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)
        test_file = db_path.parent / f".{db_path.stem}_write_test"
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to write files in database directory '{db_path.parent}': {exc}. "
            "Update DATABASE__URL or adjust directory permissions."
        ) from exc


def _check_secret(settings: Settings) -> None:
    if not settings.uses_default_secret:
        return
    if not settings.debug:
        raise ConfigurationError(
            "AUTH__JWT_SECRET is not set. Refusing to sign tokens with the built-in "
            "placeholder secret outside debug mode."
        )
    logger.warning("Using the built-in JWT secret. Fine for local development only!")


# Listen future me, everything before `yield` is startup, everything after is shutdown. The
# long-lived objects (db, token issuer, hasher, blob storage, completion provider) go on
# app.state where api/dependencies.py picks them up. create_app() may pre-seed
# app.state.token_issuer and app.state.completion_provider (tests inject fakes); we only
# build what nobody did, and only close what we built.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup:
    - logging configuration
    - secret and SQLite path checks
    - database engine + tables
    - token issuer and password hasher on app.state
    - upload directory and chat completion client
    - optional demo users
    """
    settings: Settings = app.state.settings

    configure_logging(
        log_level=settings.observability.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    _check_secret(settings)
    _validate_sqlite_path(settings)

    db = Database(settings.database)
    app.state.db = db
    owned_completion: ChatCompletionClient | None = None
    try:
        await db.create_tables()

        if getattr(app.state, "token_issuer", None) is None:
            app.state.token_issuer = TokenIssuer.from_settings(settings.auth)
        app.state.password_hasher = PasswordHasher(rounds=settings.auth.bcrypt_rounds)

        blobs = LocalFileStorage.from_settings(settings.storage)
        try:
            blobs.ensure_dir()
        except OSError as exc:
            raise ConfigurationError(
                f"Unable to create upload directory '{blobs.upload_dir}': {exc}. "
                "Update STORAGE__UPLOAD_DIR or adjust directory permissions."
            ) from exc
        app.state.blob_storage = blobs

        if getattr(app.state, "completion_provider", None) is None:
            owned_completion = ChatCompletionClient.from_settings(settings.ai)
            app.state.completion_provider = owned_completion
            if not settings.ai.is_configured:
                logger.warning("AI__API_KEY is not set, conversations will answer 502")

        if settings.seed_demo_users:
            created = await seed_demo_users(db, app.state.password_hasher)
            logger.info("Seeded %d demo user(s)", created)

        logger.info("Application startup complete")
        yield
    finally:
        logger.info("Shutting down application")
        if owned_completion is not None:
            await owned_completion.close()
            app.state.completion_provider = None
        await db.close()
        logger.info("Application shutdown complete")
