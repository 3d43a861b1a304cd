import logging
import sys
from typing import Optional

import structlog

from app.config import settings


def setup_logging(
    log_level: Optional[str] = None, json: Optional[bool] = None
) -> None:
    """Route stdlib and structlog output through one handler.

    JSON lines when `json` (or `settings.log_json`) is set, a colored console
    renderer otherwise.
    """
    level = getattr(
        logging, (log_level or settings.log_level).upper(), logging.INFO
    )
    json = settings.log_json if json is None else json

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in ("uvicorn.access", "httpcore", "httpx", "web3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = "estimation") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
