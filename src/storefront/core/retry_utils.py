"""
API error taxonomy and retry logic with exponential backoff.
Retries are only applied to read-only calls; mutations surface errors directly.
"""

import logging
import random
import time
from typing import Any, Callable, Optional, TypeVar
from functools import wraps

from pydantic import ValidationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_ERROR_MESSAGE = "Đã có lỗi xảy ra. Vui lòng thử lại."


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = 2,
        initial_backoff: float = 0.5,
        backoff_multiplier: float = 2.0,
        max_backoff: float = 8.0,
        jitter: bool = True
    ):
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.backoff_multiplier = backoff_multiplier
        self.max_backoff = max_backoff
        self.jitter = jitter

    def get_backoff_time(self, attempt: int) -> float:
        """Calculate backoff time for attempt number."""
        backoff = min(
            self.initial_backoff * (self.backoff_multiplier ** attempt),
            self.max_backoff
        )

        if self.jitter:
            backoff = backoff * (0.5 + random.random())

        return backoff


class ApiError(Exception):
    """Base exception for backend API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_possible: bool = True,
        payload: Optional[dict] = None
    ):
        self.message = message
        self.status_code = status_code
        self.retry_possible = retry_possible
        self.payload = payload or {}
        super().__init__(self.message)


class TransientError(ApiError):
    """Network failure, timeout or 5xx - might succeed on retry."""
    pass


class PermanentError(ApiError):
    """4xx - won't be resolved by retrying."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[dict] = None):
        super().__init__(message, status_code, retry_possible=False, payload=payload)


class AuthenticationRequired(PermanentError):
    """Access token expired and could not be refreshed; the user must log in again."""
    pass


def error_message(exc: BaseException, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """
    Best-effort human-readable message for a failed call.

    Uses the `message` field of the backend's error body when there is one,
    the fallback otherwise.
    """
    if not isinstance(exc, ApiError):
        return fallback
    message = exc.payload.get("message")
    if isinstance(message, list):
        message = "; ".join(str(m) for m in message)
    return str(message) if message else fallback


def form_error_message(exc: ValidationError) -> str:
    """First validation message of a form, for inline display."""
    errors = exc.errors()
    if not errors:
        return DEFAULT_ERROR_MESSAGE
    message = str(errors[0].get("msg", ""))
    # pydantic 2 prefixes messages raised from validators.
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message or DEFAULT_ERROR_MESSAGE


def retry_with_backoff(
    func: Optional[Callable[..., T]] = None,
    config: Optional[RetryConfig] = None,
    error_handler: Optional[Callable[[Exception, int], None]] = None
) -> Any:
    """
    Decorator to retry a function with exponential backoff.

    Usable bare (`@retry_with_backoff`) or with arguments
    (`@retry_with_backoff(config=RetryConfig(max_retries=1))`).

    Args:
        func: Function to retry
        config: Retry configuration
        error_handler: Callback on errors

    Returns:
        Wrapped function with retry logic
    """
    if func is None:
        return lambda f: retry_with_backoff(f, config=config, error_handler=error_handler)

    if config is None:
        config = RetryConfig()

    @wraps(func)
    def wrapper(*args, **kwargs) -> T:
        last_exception = None

        for attempt in range(config.max_retries + 1):
            try:
                result = func(*args, **kwargs)
                if attempt > 0:
                    logger.info(f"[RETRY] {func.__name__} succeeded on attempt {attempt + 1}")
                return result

            except PermanentError as e:
                logger.error(f"[RETRY] Permanent error from {func.__name__}: {e.message}")
                raise

            except (TransientError, ConnectionError, TimeoutError) as e:
                last_exception = e

                if attempt < config.max_retries:
                    backoff = config.get_backoff_time(attempt)
                    logger.warning(
                        f"[RETRY] Attempt {attempt + 1} of {func.__name__} failed: {str(e)}. "
                        f"Retrying in {backoff:.2f} seconds..."
                    )

                    if error_handler:
                        error_handler(e, attempt)

                    time.sleep(backoff)
                else:
                    logger.error(f"[RETRY] All {config.max_retries + 1} attempts of {func.__name__} failed")

        raise last_exception

    return wrapper
