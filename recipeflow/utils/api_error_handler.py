"""
Reusable decorator for handling transport exceptions.

Converts ``requests`` network exceptions into the typed
:mod:`recipeflow.utils.exceptions` hierarchy, logs them, tracks stats and
either re-raises the typed error or returns a fallback value.
"""

import functools
import logging
from typing import Any, Callable, Optional

import requests

from .exceptions import (
    ServerConnectionError,
    TransportError,
    TransportTimeoutError,
)


def handle_transport_errors(
    service: str,
    return_on_error: Any = None,
    log_stats: bool = True,
    suppress_errors: bool = False,
):
    """
    Decorator that classifies network failures raised by a method.

    Handles:
    - Timeouts (connect or read) -> TransportTimeoutError
    - DNS failures -> HostResolutionError
    - Refused connections -> ServerConnectionError
    - Any other requests failure -> TransportError
    - Unexpected errors: re-raised untouched, or swallowed when suppressing

    Usage:
        @handle_transport_errors(service="RecipeFlow")
        def request(self, method, url):
            return self.session.request(method, url)

        @handle_transport_errors(service="RecipeFlow", return_on_error=False,
                                 suppress_errors=True)
        def check_upload_exists(self, version, kind):
            ...

    Args:
        service: Name of the remote service, used in messages
        return_on_error: Value to return when an error is suppressed
        log_stats: Whether to increment self.stats["errors"] on failure
        suppress_errors: If True, return fallback value; if False, raise

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            logger = getattr(self, "logger", logging.getLogger(func.__name__))
            stats = getattr(self, "stats", None) if log_stats else None
            endpoint = kwargs.get("url") or _extract_url(args)

            try:
                return func(self, *args, **kwargs)

            except TransportError as e:
                # Already classified (and logged) by an inner call
                log_level = "warning" if suppress_errors else "debug"
                return _handle_error(e, logger, log_level, stats, suppress_errors, return_on_error)

            except requests.exceptions.Timeout as e:
                error = TransportTimeoutError(
                    message=f"Timeout while calling {service}",
                    service=service,
                    endpoint=endpoint,
                    timeout_duration=getattr(self, "timeout", None),
                    original_exception=e,
                )
                return _handle_error(error, logger, "warning", stats, suppress_errors, return_on_error)

            except requests.exceptions.ConnectionError as e:
                try:
                    ServerConnectionError.detect_and_raise(
                        connection_error=e,
                        service=service,
                        endpoint=endpoint,
                    )
                except TransportError as classified:
                    return _handle_error(
                        classified, logger, "warning", stats, suppress_errors, return_on_error
                    )

            except requests.exceptions.RequestException as e:
                error = TransportError(
                    message=f"Request failed for {service}",
                    service=service,
                    endpoint=endpoint,
                    original_exception=e,
                    suggested_action="Check network connectivity and retry",
                )
                return _handle_error(error, logger, "error", stats, suppress_errors, return_on_error)

            except Exception as e:
                if not suppress_errors:
                    if stats is not None and "errors" in stats:
                        stats["errors"] += 1
                    raise
                logger.error(f"Unexpected error calling {service}: {e}")
                if stats is not None and "errors" in stats:
                    stats["errors"] += 1
                return return_on_error

        return wrapper

    return decorator


def _extract_url(args: tuple) -> Optional[str]:
    """Return the first positional argument that looks like a URL."""
    for arg in args:
        if isinstance(arg, str) and arg.startswith(("http://", "https://")):
            return arg
    return None


def _handle_error(
    error: TransportError,
    logger: logging.Logger,
    log_level: str,
    stats: Optional[dict],
    suppress: bool,
    return_value: Any,
):
    """
    Log a classified error, update stats, and return or raise.

    Raises:
        The classified error if suppress=False
    """
    if log_level == "debug":
        logger.debug(str(error))
    elif log_level == "warning":
        logger.warning(str(error))
    else:
        logger.error(str(error))

    if stats is not None and "errors" in stats:
        stats["errors"] += 1

    if suppress:
        return return_value
    raise error


__all__ = ["handle_transport_errors"]
