"""
Network failures raised while talking to a RecipeFlow server.

Only failures below HTTP live here. A response with an error status is
returned by the transport like any other and judged by the uploader.
"""

from typing import Optional

HOST_RESOLUTION_PATTERNS = (
    "name resolution",
    "failed to resolve",
    "nodename nor servname provided",
    "getaddrinfo failed",
    "name or service not known",
    "no address associated with hostname",
)

CONNECTION_REFUSED_PATTERNS = (
    "connection refused",
    "errno 111",
    "errno 61",
    "actively refused",
    "10061",
)


class TransportError(Exception):
    """A request never produced a response.

    The string form joins the message with whatever context is known, e.g.
    ``Connection refused | Service: RecipeFlow | Endpoint: ... | Action: ...``.
    """

    default_action: Optional[str] = None

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        original_exception: Optional[Exception] = None,
        suggested_action: Optional[str] = None,
    ):
        self.message = message
        self.service = service
        self.endpoint = endpoint
        self.original_exception = original_exception
        self.suggested_action = suggested_action or self.default_action

        labelled = [
            ("Service", service),
            ("Endpoint", endpoint),
            ("Action", self.suggested_action),
            ("Original error", original_exception),
        ]
        parts = [message] + [f"{label}: {value}" for label, value in labelled if value]
        super().__init__(" | ".join(parts))


class TransportTimeoutError(TransportError):
    """The connect or read timeout elapsed before the server answered."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout_duration: Optional[float] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.timeout_duration = timeout_duration

        action = "Check your network and server URL"
        if timeout_duration:
            action += f" (timeout after {timeout_duration}s)"

        super().__init__(message, service, endpoint, original_exception, action)


class HostResolutionError(TransportError):
    """The host in the server URL did not resolve."""

    default_action = "Check the server URL and your DNS settings"


class ServerConnectionError(TransportError):
    """The host resolved but nothing accepted the connection."""

    default_action = "Verify the server is running and the port is correct"

    @classmethod
    def detect_and_raise(
        cls,
        connection_error: Exception,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        """Re-raise a low-level connection error as the matching TransportError.

        DNS failures become HostResolutionError and refusals become this
        class. Anything else is raised as a plain TransportError.
        """
        error_msg = str(connection_error).lower()
        context = dict(service=service, endpoint=endpoint, original_exception=connection_error)

        if any(pattern in error_msg for pattern in HOST_RESOLUTION_PATTERNS):
            raise HostResolutionError("Could not resolve server hostname", **context)

        if any(pattern in error_msg for pattern in CONNECTION_REFUSED_PATTERNS):
            raise cls("Connection refused", **context)

        raise TransportError(
            "Network connection failed",
            suggested_action="Check network connectivity and retry",
            **context,
        )


__all__ = [
    "TransportError",
    "TransportTimeoutError",
    "ServerConnectionError",
    "HostResolutionError",
]
