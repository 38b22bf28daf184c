"""
Structured logging for policy acceptance.

Acceptance records carry personal data (acceptor names and emails, IP
addresses, user agents). Redaction is a processor in the structlog chain, so
no log line can carry those fields whichever logger emitted it.

Each acceptance attempt binds an ``attempt_id`` plus the policy and version
into structlog's context variables; every line logged while the attempt runs
(veto hook, remote write, notifications) carries them.
"""

import logging
import os
import secrets
import sys
import time
from typing import Any

import structlog

REDACTED = "***REDACTED***"

# Personal data and credentials that must never reach a log line
REDACTED_FIELDS = frozenset(
    {
        "email",
        "acceptor_email",
        "acceptor_name",
        "ip_address",
        "user_agent",
        "location",
        "password",
        "token",
        "secret",
        "api_key",
        "authorization",
    }
)


def redact_context(context: dict[str, Any]) -> dict[str, Any]:
    """
    Redact sensitive fields from log context.

    Example:
        >>> redact_context({"acceptor_email": "jane@acme.com", "policy_id": "terms-001"})
        {'acceptor_email': '***REDACTED***', 'policy_id': 'terms-001'}
    """
    return {k: REDACTED if k in REDACTED_FIELDS else v for k, v in context.items()}


def redact_personal_data(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    return redact_context(event_dict)


def bind_attempt(**context: Any) -> str:
    """
    Start the log context of one acceptance attempt

    Replaces whatever the previous attempt bound in this task.

    Returns:
        The new attempt id
    """
    attempt_id = secrets.token_urlsafe(12)
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(attempt_id=attempt_id, **context)
    return attempt_id


def current_attempt_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("attempt_id")


def is_production() -> bool:
    return os.getenv("ENVIRONMENT", "development").lower() == "production"


def configure_logging(
    *,
    json_output: bool | None = None,
    log_level: str = "INFO",
) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Args:
        json_output: JSON lines when True, console rendering when False.
                     Defaults to JSON when ENVIRONMENT=production.
        log_level: Logging level name (DEBUG, INFO, WARNING, ...)
    """
    if json_output is None:
        json_output = is_production()

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level.upper())
    # httpx logs every request at INFO
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    renderer: list[structlog.types.Processor] = (
        [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        if json_output
        else [structlog.dev.ConsoleRenderer(colors=False)]
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_personal_data,
            *renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogOperation:
    """
    Log one remote operation as started / completed / failed, with its duration

    Exceptions propagate; the failure line includes a stack trace outside
    production only.

    Example:
        with LogOperation(logger, "submit_acceptance", policy_id="terms-001"):
            await client.post(url, json=body)
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger, operation: str, **context: Any):
        self.log = logger.bind(operation=operation, **context)
        self.operation = operation
        self.started = 0.0

    def _elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 2)

    def __enter__(self) -> "LogOperation":
        self.started = time.perf_counter()
        self.log.info(f"{self.operation} started")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if exc_type is None:
            self.log.info(f"{self.operation} completed", duration_ms=self._elapsed_ms())
            return
        self.log.error(
            f"{self.operation} failed",
            duration_ms=self._elapsed_ms(),
            error=str(exc_val),
            exc_info=not is_production(),
        )
