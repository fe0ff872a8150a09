"""
Chunked Uploader for RecipeFlow

Resumable upload protocol with per-chunk hash verification:

Phase 1: Start session - POST .../upload/start with the final content hash
Phase 2: Status - GET .../upload/{sessionId}/status for chunks already stored
Phase 3: Chunks - POST .../upload/{sessionId}/chunk/{index}, skipping stored ones
Phase 4: Complete - POST .../upload/{sessionId}/complete, server verifies the hash

There is no retry inside the protocol. A failed upload() is retried by
calling upload() again with the same inputs; the status phase then reports
the chunks that already made it and only the rest is sent.
"""

import gzip
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Set
from urllib.parse import quote

from recipeflow.utils.api_error_handler import handle_transport_errors
from recipeflow.utils.exceptions import (
    HostResolutionError,
    ServerConnectionError,
    TransportTimeoutError,
)

from .exceptions import UploadProtocolError
from .hashing import digest
from .models import (
    DEFAULT_CHUNK_SIZE,
    ChunkSpan,
    ChunkTally,
    ProgressCallback,
    UploadConfig,
    UploadFailure,
    UploadResult,
    UploadSession,
    UploadState,
    UploadSuccess,
    count_chunks,
    kind_label,
)
from .transport import SERVICE_NAME, HttpTransport, TransportResponse

PROGRESS_TOTAL = 100
SETUP_PROGRESS = 5
FINALIZE_PROGRESS = 95

TIMEOUT_MESSAGE = "Connection timed out. Check your network and server URL."
HOST_RESOLUTION_MESSAGE = "Could not resolve server hostname. Check the server URL."
CONNECTION_REFUSED_MESSAGE = "Could not connect to server. Is it running?"


def chunk_progress(chunk_index: int, total_chunks: int) -> int:
    """Progress value reported once chunk ``chunk_index`` is done (5..95)."""
    return SETUP_PROGRESS + (90 * (chunk_index + 1)) // total_chunks


def gzip_compress(data: bytes) -> bytes:
    return gzip.compress(data)


def parse_received_chunks(payload: object, total_chunks: int) -> Set[int]:
    """Extract valid chunk indices from a status response body.

    A missing or null ``chunksReceived`` means nothing is stored yet.
    Entries that are not integers in [0, total_chunks) are ignored.
    """
    if not isinstance(payload, dict):
        raise ValueError("Status response is not a JSON object")

    received = payload.get("chunksReceived")
    if received is None:
        return set()
    if not isinstance(received, list):
        raise ValueError("chunksReceived is not a list")

    return {
        index for index in received
        if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < total_chunks
    }


class ChunkedUploader:
    """Uploads one payload per call using the chunked session protocol"""

    def __init__(
        self,
        config: UploadConfig,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        transport: Optional[HttpTransport] = None,
    ):
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")

        self.config = config
        self.chunk_size = chunk_size
        self.server_url = config.normalized_server_url
        self.compression_enabled = config.compression_enabled
        self.debug_logging = config.debug_logging
        self.transport = transport or HttpTransport(config)
        self.logger = logging.getLogger(self.__class__.__name__)
        self.stats = {"errors": 0}
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.transport.close()

    # === Public API ===

    @handle_transport_errors(service=SERVICE_NAME, return_on_error=False, suppress_errors=True)
    def check_upload_exists(self, version: str, kind: str) -> bool:
        """Ask the server whether an upload of ``kind`` exists for ``version``.

        Any failure resolves to False.
        """
        url = f"{self._version_url(version)}/upload/check?type={quote(kind_label(kind), safe='')}"
        self._debug(f"Checking if upload exists at: {url}")

        response = self.transport.request("GET", url)
        self._debug(f"Check response: {response.status_code} - {response.body}")

        if not response.ok:
            return False

        payload = response.json()
        return isinstance(payload, dict) and payload.get("exists") is True

    def upload(
        self,
        data: bytes,
        version: str,
        kind: str,
        callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """Upload ``data`` and return the terminal result. Never raises."""
        state = UploadState.INIT
        session_id = None
        try:
            _report(callback, 0, "Starting upload session...")

            final_hash = digest(data)
            session = self._start_session(version, kind_label(kind), data, final_hash)
            session_id = session.session_id
            state = self._transition(state, UploadState.SESSION_STARTED, session.session_id)

            _report(callback, SETUP_PROGRESS, "Checking upload status...")
            received = self._get_uploaded_chunks(version, session)
            state = self._transition(state, UploadState.STATUS_KNOWN, session.session_id)

            self._debug(
                f"Total chunks: {session.total_chunks}, Already uploaded: {len(received)}"
            )

            tally = ChunkTally()
            for span in session.chunk_spans():
                if span.index in received:
                    self._debug(f"Skipping already uploaded chunk {span.index}")
                else:
                    if state is not UploadState.UPLOADING:
                        state = self._transition(state, UploadState.UPLOADING, session.session_id)
                    self._upload_chunk(version, session, span, data[span.start:span.end])
                tally = tally.add(span)
                _report(
                    callback,
                    chunk_progress(span.index, session.total_chunks),
                    f"Uploaded chunk {span.index + 1}/{session.total_chunks}",
                )

            _report(callback, FINALIZE_PROGRESS, "Completing upload...")
            self._complete_upload(version, session)
            state = self._transition(state, UploadState.COMPLETED, session.session_id)

            _report(callback, PROGRESS_TOTAL, "Upload complete!")
            return UploadSuccess(session.session_id, tally.chunks, tally.bytes)

        except TransportTimeoutError as e:
            return self._fail(state, session_id, TIMEOUT_MESSAGE, e)
        except HostResolutionError as e:
            return self._fail(state, session_id, HOST_RESOLUTION_MESSAGE, e)
        except ServerConnectionError as e:
            return self._fail(state, session_id, CONNECTION_REFUSED_MESSAGE, e)
        except UploadProtocolError as e:
            return self._fail(state, session_id, f"Server rejected upload: {e.message}", e)
        except Exception as e:
            self.logger.warning("Upload failed", exc_info=True)
            return self._fail(state, session_id, f"Upload error: {e}", e)

    def upload_async(
        self,
        data: bytes,
        version: str,
        kind: str,
        callback: Optional[ProgressCallback] = None,
    ) -> "Future[UploadResult]":
        """Run upload() on a background thread and return its future."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="recipeflow-upload")
        return self._executor.submit(self.upload, data, version, kind, callback)

    # === Protocol phases ===

    def _start_session(self, version: str, kind: str, data: bytes, final_hash: str) -> UploadSession:
        url = f"{self._version_url(version)}/upload/start"
        total_chunks = count_chunks(len(data), self.chunk_size)
        body = {
            "type": kind,
            "totalSize": len(data),
            "chunkSize": self.chunk_size,
            "totalChunks": total_chunks,
            "finalHash": final_hash,
        }
        self._debug(f"Starting session at: {url}")
        self._debug(f"Request body: {json.dumps(body)}")

        response = self.transport.request("POST", url, json_body=body)
        self._check_response("start session", response)

        session_id = _json_field(response, "sessionId")
        if not isinstance(session_id, str) or not session_id:
            raise UploadProtocolError(
                f"Failed to start session: response has no sessionId - {response.body}",
                phase="start session",
                status_code=response.status_code,
                response_body=response.body,
            )

        self._debug(f"Started upload session: {session_id}")
        return UploadSession(session_id, len(data), self.chunk_size, final_hash)

    def _get_uploaded_chunks(self, version: str, session: UploadSession) -> Set[int]:
        url = f"{self._session_url(version, session)}/status"
        self._debug(f"Getting upload status from: {url}")

        response = self.transport.request("GET", url)
        self._check_response("get upload status", response)

        try:
            return parse_received_chunks(response.json(), session.total_chunks)
        except ValueError as e:
            raise UploadProtocolError(
                f"Failed to get upload status: malformed response ({e}) - {response.body}",
                phase="get upload status",
                status_code=response.status_code,
                response_body=response.body,
            ) from e

    def _upload_chunk(self, version: str, session: UploadSession, span: ChunkSpan, chunk: bytes) -> None:
        url = f"{self._session_url(version, session)}/chunk/{span.index}"
        # Integrity is always over the uncompressed bytes
        chunk_hash = digest(chunk)
        headers = {
            "Content-Type": "application/octet-stream",
            "X-Chunk-Hash": chunk_hash,
        }

        body = chunk
        if self.compression_enabled:
            headers["Content-Encoding"] = "gzip"
            body = gzip_compress(chunk)
            self._debug(f"Compressed chunk {span.index} from {len(chunk)} to {len(body)} bytes")

        response = self.transport.request("POST", url, headers=headers, body=body)
        self._check_response(f"upload chunk {span.index}", response)

        self._debug(
            f"Uploaded chunk {span.index + 1}/{session.total_chunks} "
            f"({span.length} bytes, hash: {chunk_hash})"
        )

    def _complete_upload(self, version: str, session: UploadSession) -> None:
        # No body: the server checks against the hash committed at session start
        url = f"{self._session_url(version, session)}/complete"
        self._debug(f"Completing upload at: {url}")

        response = self.transport.request("POST", url)
        self._check_response("complete upload", response)

    # === Helpers ===

    def _version_url(self, version: str) -> str:
        return (
            f"{self.server_url}/api/modpacks/{quote(self.config.modpack_slug, safe='')}"
            f"/versions/{quote(version, safe='')}"
        )

    def _session_url(self, version: str, session: UploadSession) -> str:
        return f"{self._version_url(version)}/upload/{quote(session.session_id, safe='')}"

    def _check_response(self, phase: str, response: TransportResponse) -> None:
        if not response.ok:
            raise UploadProtocolError(
                f"Failed to {phase}: HTTP {response.status_code} - {response.body}",
                phase=phase,
                status_code=response.status_code,
                response_body=response.body,
            )

    def _transition(self, current: UploadState, target: UploadState, session_id: str) -> UploadState:
        self.logger.debug(f"Session {session_id}: {current.value} -> {target.value}")
        return target

    def _fail(self, state: UploadState, session_id: Optional[str], message: str, cause: Exception) -> UploadFailure:
        self.stats["errors"] += 1
        self._transition(state, UploadState.FAILED, session_id or "<none>")
        self.logger.debug(f"Upload failed in state {state.value}: {cause}")
        return UploadFailure(message=message, cause=cause)

    def _debug(self, message: str) -> None:
        if self.debug_logging:
            self.logger.info(message)
        else:
            self.logger.debug(message)


def _report(callback: Optional[ProgressCallback], current: int, message: str) -> None:
    if callback is not None:
        callback(current, PROGRESS_TOTAL, message)


def _json_field(response: TransportResponse, field: str) -> object:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload.get(field) if isinstance(payload, dict) else None


__all__ = [
    "ChunkedUploader",
    "chunk_progress",
    "parse_received_chunks",
    "gzip_compress",
]
