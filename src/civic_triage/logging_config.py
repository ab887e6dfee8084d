"""Structured logging for Civic Triage.

Every log line carries the service name, version and (inside a request) the
request id bound by RequestTracingMiddleware. Production renders one JSON
object per line; any other environment renders colored console output.

The Gemini API key travels as a `key=` query parameter, so URLs that reach
the log pipeline are scrubbed before rendering.
"""

import logging
import re
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "civic-triage"

# Loggers that would otherwise log every outbound request URL (API key included)
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")

_API_KEY_PATTERN = re.compile(r"([?&]key=)[^&\s\"']+")


def scrub_api_key(text: str) -> str:
    """
    >>> scrub_api_key("POST /v1beta/models/m:generateContent?key=abc123")
    'POST /v1beta/models/m:generateContent?key=***'
    """
    return _API_KEY_PATTERN.sub(r"\1***", text)


def redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Scrub API keys from every string value of the event."""
    for name, value in event_dict.items():
        if isinstance(value, str) and "key=" in value:
            event_dict[name] = scrub_api_key(value)
    return event_dict


def service_context(version: str) -> Processor:
    """Processor stamping service name and version on each event."""
    def add_service(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("version", version)
        return event_dict
    return add_service


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    version: str = "0.1.0",
) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ...)
        environment: "production" selects the JSON renderer
        version: Service version stamped on every event
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    json_output = environment.lower() == "production"

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        service_context(version),
        redact_secrets,
    ]
    if json_output:
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=(
                structlog.processors.JSONRenderer()
                if json_output
                else structlog.dev.ConsoleRenderer(colors=True)
            ),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if json_output else "console",
    )
