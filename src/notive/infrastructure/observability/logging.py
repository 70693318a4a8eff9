"""Logging setup: JSON or compact text output, correlation IDs, token redaction."""

import contextvars
import logging
import re
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me - one correlation id per HTTP request, carried in a ContextVar so every
# coroutine spawned while serving that request logs the same id. Startup and client-side
# logs simply have "" here.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# JWT-shaped strings (three base64url segments) and "Bearer <anything>".
_JWT_PATTERN = re.compile(r"eyJ[\w-]*\.[\w-]+\.[\w-]+")
_BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
REDACTED = "[REDACTED]"


def get_correlation_id() -> str:
    """Get the current correlation ID ("" when none is set)."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: ID to use. If None, a new UUID4 is generated

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


class CorrelationIdFilter(logging.Filter):
    """Attach ``correlation_id`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def redact(text: str) -> str:
    """Mask bearer tokens and JWTs inside a string."""
    text = _BEARER_PATTERN.sub(rf"\g<1>{REDACTED}", text)
    return _JWT_PATTERN.sub(REDACTED, text)


# Listen up - session tokens are full credentials for 7 days. If one lands in a log file,
# anybody who can read the logs can act as that user. This filter rewrites the rendered
# message before any formatter sees it, so even a careless f-string can't leak a token.
class SensitiveDataFilter(logging.Filter):
    """Redact tokens from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


class CompactExceptionFormatter(logging.Formatter):
    """Text formatter that prints exception chains root-cause first, one line per hop.

    Only frames from the notive package are shown, library frames are dropped:

        ERROR │ notive.api.exception_handlers:88 │ Unhandled error on POST /login
        ╰─► OperationalError: database is locked
            File "repositories.py", line 70, in get_by_email
              result = await self.session.execute(stmt)
    """

    def formatException(self, ei: Any) -> str:
        _, exc_value, _ = ei
        if exc_value is None:
            return ""

        chain: list[BaseException] = []
        current: BaseException | None = exc_value
        while current is not None and current not in chain:
            chain.append(current)
            current = current.__cause__ or current.__context__
        chain.reverse()

        lines: list[str] = []
        for exc in chain:
            lines.append(f"╰─► {exc.__class__.__name__}: {redact(str(exc))}")
            if exc.__traceback__ is None:
                continue
            for frame in traceback.extract_tb(exc.__traceback__):
                if "/site-packages/" in frame.filename or "notive" not in frame.filename:
                    continue
                lines.append(
                    f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}'
                )
                if frame.line:
                    lines.append(f"      {frame.line.strip()}")

        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[misc]
    """JSON formatter adding level/logger/location and the correlation id."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        if record.exc_info:
            log_record["exc_info"] = redact(self.formatException(record.exc_info))


# Call ONCE at startup (lifespan does it). Handlers on the root logger are replaced, so
# calling it again in tests is harmless.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "notive",
) -> None:
    """Configure root logging.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: Emit one JSON object per line (production)
        app_name: Included in the startup log line
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if json_format:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CompactExceptionFormatter(
            fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
            datefmt="%H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # httpx logs every request URL at INFO, our own client logs enough.
    for noisy in ("httpx", "httpcore", "aiosqlite", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    # RequestLoggingMiddleware already logs each request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"app_name": app_name, "log_level": log_level, "json_format": json_format},
    )
