# baby_face_predictor/utils/logging.py
import logging
import sys
from typing import Any

import orjson
import structlog

from baby_face_predictor.data.settings import settings

# Third-party loggers that are too chatty at the application level
_QUIET_LOGGERS: dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiojobs": logging.WARNING,
    "httpx": logging.WARNING,
    "openai": logging.INFO,
}


def orjson_dumps(value: Any, *, default: Any = None) -> str:
    # JSONRenderer expects str; non-serializable values fall back to repr
    return orjson.dumps(value, default=default or repr).decode()


def _renderer(log_format: str) -> structlog.typing.Processor:
    if log_format == "console" or (log_format == "auto" and sys.stderr.isatty()):
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer(serializer=orjson_dumps)


def setup_logger(
    level: int | None = None, log_format: str | None = None
) -> structlog.typing.FilteringBoundLogger:
    """
    Routes structlog and stdlib logging through one handler on stdout.

    Context bound with `structlog.contextvars.bind_contextvars` (the web
    handlers bind a request id) is merged into every event, including
    events from third-party libraries.

    Returns:
        The application's bound logger.
    """
    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processor=_renderer(log_format or settings.log_format),
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level if level is not None else settings.logging_level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    return structlog.get_logger("baby_face_predictor.main")
