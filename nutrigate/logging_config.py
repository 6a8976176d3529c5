"""Structured logging setup."""

import logging
import sys
from enum import Enum

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog on top of the standard library logger.

    Request-scoped values (request id, endpoint, user id) are bound through
    ``structlog.contextvars`` by the gateway and merged into every event.

    Args:
        log_level: Minimum level name, e.g. "INFO".
        json_logs: Render JSON lines when True, coloured console output otherwise.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )


logger = structlog.get_logger("gateway")


class Stage(str, Enum):
    """Request lifecycle states, logged as ``gateway_stage`` events."""

    received = "received_request"
    authenticated = "authenticated"
    rate_checked = "rate_checked"
    sanitized = "sanitized"
    invoked = "invoked"
    parsed = "parsed"
    responded = "responded"
    failed = "failed"


def log_stage(stage: Stage, level: str = "info", **fields) -> None:
    getattr(logger, level)("gateway_stage", stage=stage.value, **fields)
