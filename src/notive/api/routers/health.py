# Hey future me - health checks for Docker/Kubernetes:
# - /health/live  -> process is up (never touches the DB)
# - /health/ready -> DB answers a SELECT 1, token issuer is configured
#
# Docker HEALTHCHECK: curl -f http://localhost:3000/health/live || exit 1
"""Health check endpoints for container orchestrators."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from notive import __version__

logger = logging.getLogger(__name__)

router = APIRouter()


class LivenessStatus(BaseModel):
    """Simple liveness check response."""

    status: str = Field(description="alive")
    timestamp: str = Field(description="ISO timestamp")
    version: str = Field(default=__version__)


class ReadinessStatus(BaseModel):
    """Readiness check response."""

    status: str = Field(description="ready or not_ready")
    timestamp: str = Field(description="ISO timestamp")
    database: bool = Field(description="Database answered a ping")
    token_issuer: bool = Field(description="Token issuer configured")


@router.get("/live", response_model=LivenessStatus)
async def liveness_check() -> LivenessStatus:
    """Return 200 while the process is running. No dependency checks."""
    return LivenessStatus(status="alive", timestamp=datetime.now(UTC).isoformat())


@router.get("/ready", response_model=ReadinessStatus)
async def readiness_check(request: Request) -> JSONResponse:
    """Return 200 when requests can be served, 503 otherwise."""
    db = getattr(request.app.state, "db", None)
    db_ok = db is not None and await db.ping()

    issuer_ok = getattr(request.app.state, "token_issuer", None) is not None
    is_ready = db_ok and issuer_ok
    if not is_ready:
        logger.warning("Not ready: database=%s token_issuer=%s", db_ok, issuer_ok)

    response = ReadinessStatus(
        status="ready" if is_ready else "not_ready",
        timestamp=datetime.now(UTC).isoformat(),
        database=db_ok,
        token_issuer=issuer_ok,
    )
    status_code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=status_code)
