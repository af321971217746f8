"""
Error handling for the facility finder data sources
Keeps upstream failures contained so callers always get a usable answer
"""

import asyncio
from typing import Callable, Optional
from functools import wraps

from logging_config import get_logger, log_error

logger = get_logger(__name__)


class FacilityFinderError(Exception):
    """Base exception for facility finder errors."""
    pass


class APIError(FacilityFinderError):
    """Exception for API-related errors."""
    def __init__(self, message: str, api_name: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.api_name = api_name
        self.status_code = status_code


class MirrorRequestError(APIError):
    """A single Overpass mirror failed to produce a usable response."""
    def __init__(self, message: str, endpoint: str, status_code: Optional[int] = None,
                 retryable: bool = True):
        super().__init__(message, "overpass", status_code)
        self.endpoint = endpoint
        self.retryable = retryable


def safe_api_call(api_name: str):
    """
    Decorator for async lookups whose failure should read as "no result".

    APIError is logged at warning, anything else at error; either way the
    wrapped call returns None.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except APIError as e:
                logger.warning(f"API error in {api_name}: {e}",
                               extra={"api_name": api_name, "status_code": e.status_code})
                return None
            except Exception as e:
                log_error(logger, type(e).__name__, f"Unexpected error in {api_name}: {e}",
                          api_name=api_name)
                return None
        return wrapper
    return decorator


def handle_api_timeout(timeout_seconds: float = 15):
    """
    Decorator bounding an async call with asyncio.wait_for.

    On expiry the in-flight coroutine is cancelled and an APIError with
    status 408 is raised in its place.

    Args:
        timeout_seconds: Timeout in seconds
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout_seconds)
            except asyncio.TimeoutError:
                logger.warning(f"Function {func.__name__} timed out after {timeout_seconds}s")
                raise APIError(f"Request timed out after {timeout_seconds} seconds", func.__name__, 408)
        return wrapper
    return decorator
