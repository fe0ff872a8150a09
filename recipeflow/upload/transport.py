"""
HTTP transport for the RecipeFlow API.

Issues exactly one request/response cycle per call. HTTP error statuses are
returned like any other response; only network-level failures raise, and
they raise the typed errors from :mod:`recipeflow.utils.exceptions`.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from recipeflow.utils.api_error_handler import handle_transport_errors

from .models import UploadConfig

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
SERVICE_NAME = "RecipeFlow"


@dataclass
class TransportResponse:
    """Status code and decoded body of one HTTP exchange"""
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body)


class HttpTransport:
    """Thin wrapper around a requests session with RecipeFlow defaults"""

    def __init__(self, config: UploadConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.timeout = config.timeout
        self.logger = logging.getLogger(self.__class__.__name__)
        self.stats = {"requests": 0, "errors": 0}

        self.session = session or requests.Session()
        self.session.headers.update(config.get_headers())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.session.close()

    @handle_transport_errors(service=SERVICE_NAME)
    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[bytes] = None,
        json_body: Optional[Any] = None,
    ) -> TransportResponse:
        """Send one request and return its status and body.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Extra headers for this request only
            body: Raw request body
            json_body: Object serialized as a UTF-8 JSON body

        Raises:
            TransportTimeoutError: Connect or read timeout elapsed
            HostResolutionError: Server name could not be resolved
            ServerConnectionError: Server refused the connection
            TransportError: Any other network failure
        """
        request_headers = dict(headers or {})
        data = body
        if json_body is not None:
            data = json.dumps(json_body, ensure_ascii=False).encode("utf-8")
            request_headers.setdefault("Content-Type", JSON_CONTENT_TYPE)

        self.stats["requests"] += 1
        self.logger.debug(f"{method} {url} ({len(data) if data else 0} bytes)")

        response = self.session.request(
            method,
            url,
            headers=request_headers,
            data=data,
            timeout=(self.timeout, self.timeout),
        )

        # Error bodies are read the same way as success bodies
        text = response.content.decode("utf-8", errors="replace") if response.content else ""
        self.logger.debug(f"{method} {url} -> {response.status_code}")

        return TransportResponse(status_code=response.status_code, body=text)
