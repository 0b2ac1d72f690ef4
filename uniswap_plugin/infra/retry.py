"""
Retries and correlation ids

Subgraph queries go through call_with_retry. Each tool invocation runs
inside a CorrelationContext so every log line it produces, including
retry warnings, can be tied back to the tool call.
"""

import contextvars
import logging
import time
import uuid
from typing import Callable, Optional, Tuple, TypeVar

from ..errors import ErrorCode, UniswapPluginError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Returns the token needed to restore the previous id"""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Scope a correlation id, optionally prefixed with the tool name.

    Usage:
        with CorrelationContext("uniswap_swap_exact_input") as cid:
            logger.info(f"[{cid}] Starting swap")
    """

    def __init__(self, prefix: Optional[str] = None):
        cid = generate_correlation_id()
        self.correlation_id = f"{prefix}_{cid}" if prefix else cid
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)
            self._token = None


# Lowercase substrings of transient failures from HTTP clients and nodes
RECOVERABLE_KEYWORDS = (
    "timeout", "timed out", "connection", "network", "rate limit",
    "too many requests", "502", "503", "504",
    "temporarily unavailable", "service unavailable",
    "econnreset", "socket hang up",
)


def classify_error(error: Exception) -> Tuple[bool, Optional[ErrorCode]]:
    """
    Decide whether an error is worth retrying.

    Plugin errors carry their own recoverable flag and code. Other
    exceptions are matched on their message.

    Returns:
        (is_recoverable, error_code)
    """
    if isinstance(error, UniswapPluginError):
        return error.recoverable, error.code

    text = str(error).lower()
    if not any(keyword in text for keyword in RECOVERABLE_KEYWORDS):
        return False, None

    if "timeout" in text or "timed out" in text:
        return True, ErrorCode.RPC_TIMEOUT
    if "rate limit" in text or "too many requests" in text:
        return True, ErrorCode.RPC_RATE_LIMITED
    if "connection" in text or "network" in text or "socket" in text or "econnreset" in text:
        return True, ErrorCode.RPC_CONNECTION_FAILED
    return True, ErrorCode.RPC_INVALID_RESPONSE


def _log(level: int, operation_name: str, message: str, attempt: int, attempts: int, **extra):
    cid = get_correlation_id()
    prefix = f"[{cid}] " if cid else ""
    logger.log(
        level,
        f"{prefix}[{operation_name}] [{attempt}/{attempts}] {message}",
        extra={"correlation_id": cid, "operation": operation_name, "attempt": attempt, **extra},
    )


def call_with_retry(
    operation: Callable[[], T],
    operation_name: str,
    max_retries: int = 3,
    retry_delay: float = 1.0,
) -> T:
    """
    Run operation, retrying recoverable failures with linear backoff.

    The n-th retry waits retry_delay * n seconds. Fatal errors, and the
    error of the last attempt, propagate unchanged.

    Args:
        operation: Zero-argument callable
        operation_name: Label for log lines
        max_retries: Total attempts (at least one)
        retry_delay: Base delay in seconds

    Example:
        data = call_with_retry(lambda: self._post(query, variables), "subgraph:PoolByTokens")
    """
    attempts = max(1, max_retries)
    attempt = 0

    while True:
        attempt += 1
        try:
            result = operation()
        except Exception as e:
            recoverable, code = classify_error(e)
            if not recoverable or attempt >= attempts:
                _log(
                    logging.ERROR, operation_name, f"Failed: {e}", attempt, attempts,
                    error_type="recoverable" if recoverable else "fatal",
                )
                raise
            _log(
                logging.WARNING, operation_name, f"Retrying after error: {e}", attempt, attempts,
                error_code=code.value if code else None,
            )
            time.sleep(retry_delay * attempt)
            continue

        if attempt > 1:
            _log(logging.INFO, operation_name, f"Succeeded after {attempt} attempts", attempt, attempts)
        return result
