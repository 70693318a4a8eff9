"""FastAPI application factory and server entry point."""

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from notive import __version__
from notive.api.exception_handlers import register_exception_handlers
from notive.api.routers import api_router
from notive.application.services.token_issuer import TokenIssuer
from notive.config import Settings, get_settings
from notive.domain.ports import ICompletionProvider
from notive.infrastructure.lifecycle import lifespan
from notive.infrastructure.observability import RequestLoggingMiddleware


def create_app(
    settings: Settings | None = None,
    token_issuer: TokenIssuer | None = None,
    completion_provider: ICompletionProvider | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Settings to run with (defaults to the cached environment settings)
        token_issuer: Pre-built issuer, e.g. one with a controllable clock in tests
        completion_provider: Pre-built AI provider; the lifespan builds an HTTP one
            from settings.ai when this is None (and only closes the one it built)

    Returns:
        Configured FastAPI app; resources are opened by the lifespan
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Notive API",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_issuer = token_issuer
    app.state.completion_provider = completion_provider

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router)

    # Uploads are served without a token; the random stored name is the only handle to one
    app.mount(
        "/" + settings.storage.public_prefix.strip("/"),
        StaticFiles(directory=settings.storage.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


def run() -> None:
    """Console entry point: ``notive-server``."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
