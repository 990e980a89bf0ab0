import time
import logging
import functools
from typing import Optional

import requests

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


def status_of(error: Exception) -> Optional[int]:
    """HTTP status carried by an error, directly or on its response."""
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        if response is not None:
            status = getattr(response, "status_code", None)
    return status


def is_transient(error: Exception) -> bool:
    if isinstance(error, TRANSIENT_ERRORS):
        return True
    status = status_of(error)
    return status is not None and (status == 429 or status >= 500)


def retry_after_seconds(error: Exception) -> float:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    try:
        return float(headers.get("retry-after") or 0)
    except ValueError:
        return 0.0


def retry_with_backoff(max_retries: int = 3, base_delay: float = 2.0, max_delay: float = 60.0):
    """Retry a call on rate limits, 5xx responses and dropped connections.

    The wait doubles per attempt up to ``max_delay``, and never undercuts a
    Retry-After header. Anything else, 4xx included, propagates on first sight.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt >= max_retries or not is_transient(e):
                        raise
                    delay = max(min(base_delay * 2 ** attempt, max_delay), retry_after_seconds(e))
                    attempt += 1
                    logger.warning(
                        f"{func.__name__} failed ({type(e).__name__}), "
                        f"attempt {attempt}/{max_retries}, sleeping {delay:.1f}s"
                    )
                    time.sleep(delay)

        return wrapper

    return decorator
