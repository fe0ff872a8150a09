"""
Utility modules for RecipeFlow.

This package contains shared utility functions and classes, including the
network error taxonomy used by the HTTP transport.
"""

from recipeflow.utils.api_error_handler import handle_transport_errors
from recipeflow.utils.exceptions import (
    HostResolutionError,
    ServerConnectionError,
    TransportError,
    TransportTimeoutError,
)

__all__ = [
    "handle_transport_errors",
    "TransportError",
    "TransportTimeoutError",
    "HostResolutionError",
    "ServerConnectionError",
]
