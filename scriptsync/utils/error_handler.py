import asyncio
import functools
import time
from typing import TypeVar, Callable, Any, Optional, Type, Union
from loguru import logger
from ..exceptions import (
    ScriptSyncException,
    ProviderException,
    ConfigurationException,
    ValidationException,
    AuthenticationException,
)

T = TypeVar('T')

AUTH_STATUS_CODES = (401, 403)
AUTH_ERROR_MARKERS = ("invalid_api_key", "permission_error")

RetryFilter = Union[Type[BaseException], tuple, Callable[[BaseException], bool], None]


def is_auth_error(exc: BaseException) -> bool:
    """
    Return True for authentication / permission failures.

    These never resolve by themselves, so callers must not retry them.
    Recognises our own AuthenticationException, SDK errors carrying an
    HTTP 401/403 status, and provider messages naming an invalid key or
    a permission error.
    """
    if isinstance(exc, AuthenticationException):
        return True

    for attr in ("status_code", "status"):
        status = getattr(exc, attr, None)
        if isinstance(status, int) and status in AUTH_STATUS_CODES:
            return True

    message = str(exc)
    return any(marker in message for marker in AUTH_ERROR_MARKERS)


def is_fatal_error(exc: BaseException) -> bool:
    """Auth failures plus errors that repeating the same request cannot fix."""
    return is_auth_error(exc) or isinstance(exc, (ValidationException, ConfigurationException))


def _matches(exc: BaseException, rule: RetryFilter) -> bool:
    if rule is None:
        return False
    if isinstance(rule, type) or isinstance(rule, tuple):
        return isinstance(exc, rule)
    return bool(rule(exc))


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def _retry_delay(attempt: int, base_delay: float, backoff_factor: float, max_delay: float) -> float:
    # attempt is zero-based: base, base*f, base*f^2, ...
    return min(base_delay * (backoff_factor ** attempt), max_delay)


def handle_exceptions(
    retries: int = 3,
    fallback: Any = None,
    exceptions: Union[Type[Exception], tuple] = Exception,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    base_delay: float = 1.0,
    non_retryable: RetryFilter = is_auth_error,
):
    """
    Decorator to handle exceptions with retry logic and fallback.

    Args:
        retries: Maximum number of attempts (including the first one)
        fallback: Fallback value to return if all retries fail
        exceptions: Exception types to catch and retry
        backoff_factor: Exponential backoff factor
        max_delay: Maximum delay between retries
        base_delay: Delay in seconds before the second attempt
        non_retryable: Exception types, or a predicate, that fail immediately
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            last_exception = None

            for attempt in range(retries):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if _matches(e, non_retryable):
                        logger.error(f"Attempt {attempt + 1}/{retries} failed (not retrying): {e}")
                        raise

                    if attempt < retries - 1:
                        delay = _retry_delay(attempt, base_delay, backoff_factor, max_delay)
                        logger.warning(f"Attempt {attempt + 1}/{retries} failed: {e}. Retrying in {delay}s...")
                        await _sleep(delay)
                    else:
                        logger.error(f"All {retries} attempts failed: {e}")

            if fallback is not None:
                logger.info(f"Returning fallback value: {fallback}")
                return fallback

            raise last_exception

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            last_exception = None

            for attempt in range(retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if _matches(e, non_retryable):
                        logger.error(f"Attempt {attempt + 1}/{retries} failed (not retrying): {e}")
                        raise

                    if attempt < retries - 1:
                        delay = _retry_delay(attempt, base_delay, backoff_factor, max_delay)
                        logger.warning(f"Attempt {attempt + 1}/{retries} failed: {e}. Retrying in {delay}s...")
                        time.sleep(delay)
                    else:
                        logger.error(f"All {retries} attempts failed: {e}")

            if fallback is not None:
                logger.info(f"Returning fallback value: {fallback}")
                return fallback

            raise last_exception

        # Return appropriate wrapper based on function type
        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator


def _convert(e: Exception, exception_map: dict) -> Optional[ScriptSyncException]:
    # Our own exceptions already carry the right classification.
    if isinstance(e, ScriptSyncException):
        return None
    if is_auth_error(e):
        return AuthenticationException(
            str(e),
            status_code=getattr(e, "status_code", None),
            details={"original_exception": type(e).__name__},
        )
    for source_exc, target_exc in exception_map.items():
        if isinstance(e, source_exc):
            return target_exc(str(e), details={"original_exception": type(e).__name__})
    return None


def convert_exceptions(exception_map: dict):
    """
    Decorator to convert foreign exceptions to ScriptSync exceptions.

    Args:
        exception_map: Dictionary mapping exception types to ScriptSync exception types
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e, exception_map)
                if converted is None:
                    raise
                raise converted from e

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e, exception_map)
                if converted is None:
                    raise
                raise converted from e

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator


class ErrorHandler:
    """Centralized error handling utilities."""

    @staticmethod
    def summarize(exception: BaseException) -> str:
        """Human-readable one-line summary used for clip error messages."""
        message = str(exception).strip()
        return message or type(exception).__name__


__all__ = [
    "handle_exceptions",
    "convert_exceptions",
    "is_auth_error",
    "is_fatal_error",
    "ErrorHandler",
    "ProviderException",
    "ConfigurationException",
    "ValidationException",
    "AuthenticationException",
]
