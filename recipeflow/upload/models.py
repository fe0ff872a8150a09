"""
Data Models for RecipeFlow Chunked Uploads

Dataclass-based models for configuration, upload sessions, chunk views
and upload outcomes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Dict, List, Optional, Union

DEFAULT_CHUNK_SIZE = 1024 * 1024
ICON_CHUNK_SIZE = 5 * 1024 * 1024
ITEMS_CHUNK_SIZE = 2 * 1024 * 1024
USER_AGENT = "RecipeFlow-Uploader/1.0"

# onProgress(current, total, message)
ProgressCallback = Callable[[int, int, str], None]


class UploadState(Enum):
    """Upload session state machine"""
    INIT = "init"
    SESSION_STARTED = "session_started"
    STATUS_KNOWN = "status_known"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


class UploadKind(str, Enum):
    """Known upload types accepted by the server"""
    RECIPES = "recipes"
    ICONS = "icons"
    ITEMS = "items"


def kind_label(kind: Union[str, UploadKind]) -> str:
    """Wire value of an upload kind given as a string or UploadKind."""
    return kind.value if isinstance(kind, UploadKind) else str(kind)


@dataclass
class ValidationResult:
    """Configuration validation result"""
    is_valid: bool
    error_message: Optional[str] = None
    validation_type: Optional[str] = None


@dataclass
class UploadConfig:
    """Configuration for RecipeFlow upload operations"""
    server_url: str
    auth_token: str
    modpack_slug: str
    timeout: float = 300
    compression_enabled: bool = True
    debug_logging: bool = False
    version_override: str = ""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    icon_chunk_size: int = ICON_CHUNK_SIZE
    items_chunk_size: int = ITEMS_CHUNK_SIZE

    @property
    def normalized_server_url(self) -> str:
        """Server URL without surrounding whitespace or trailing slashes"""
        return (self.server_url or "").strip().rstrip("/")

    def get_headers(self) -> Dict[str, str]:
        """Get authentication headers for API requests"""
        return {
            "Authorization": f"Bearer {self.auth_token}",
            "User-Agent": USER_AGENT,
        }

    def validate(self) -> ValidationResult:
        """Check that all required settings are present and sane"""
        if not self.normalized_server_url:
            return ValidationResult(False, "Server URL is not configured", "config")
        if not self.auth_token:
            return ValidationResult(False, "Auth token is not configured", "config")
        if not self.modpack_slug:
            return ValidationResult(False, "Modpack slug is not configured", "config")
        if self.timeout <= 0:
            return ValidationResult(False, f"Timeout must be positive, got {self.timeout}", "config")
        if min(self.chunk_size, self.icon_chunk_size, self.items_chunk_size) <= 0:
            return ValidationResult(False, "Chunk sizes must be positive", "config")
        return ValidationResult(is_valid=True)


@dataclass(frozen=True)
class ChunkSpan:
    """Byte range [start, end) of one chunk within a payload"""
    index: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def count_chunks(total_size: int, chunk_size: int) -> int:
    """Ceiling division; zero for an empty payload."""
    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")
    if total_size < 0:
        raise ValueError(f"Total size must not be negative, got {total_size}")
    return -(-total_size // chunk_size)


def plan_chunks(total_size: int, chunk_size: int) -> List[ChunkSpan]:
    """Partition [0, total_size) into consecutive chunk spans."""
    return [
        ChunkSpan(index, index * chunk_size, min((index + 1) * chunk_size, total_size))
        for index in range(count_chunks(total_size, chunk_size))
    ]


@dataclass(frozen=True)
class UploadSession:
    """Server-assigned session scoping one upload attempt"""
    session_id: str
    total_size: int
    chunk_size: int
    final_hash: str

    @property
    def total_chunks(self) -> int:
        return count_chunks(self.total_size, self.chunk_size)

    def chunk_spans(self) -> List[ChunkSpan]:
        return plan_chunks(self.total_size, self.chunk_size)


@dataclass(frozen=True)
class ChunkTally:
    """Running chunk/byte counters for the chunk loop"""
    chunks: int = 0
    bytes: int = 0

    def add(self, span: ChunkSpan) -> "ChunkTally":
        return ChunkTally(self.chunks + 1, self.bytes + span.length)


@dataclass(frozen=True)
class UploadSuccess:
    """Upload finished and the server verified the assembled payload"""
    session_id: str
    chunks_uploaded: int
    bytes_uploaded: int

    success: ClassVar[bool] = True

    def summary(self) -> str:
        if self.chunks_uploaded > 0:
            return (
                f"Upload complete! {self.chunks_uploaded} chunks "
                f"({format_bytes(self.bytes_uploaded)}) uploaded (Session: {self.session_id})"
            )
        return f"Upload complete! (Session: {self.session_id})"


@dataclass(frozen=True)
class UploadFailure:
    """Upload stopped; calling upload() again resumes from the server state"""
    message: str
    cause: Optional[BaseException] = None

    success: ClassVar[bool] = False

    def summary(self) -> str:
        return f"Upload failed: {self.message or 'Unknown error'}"


UploadResult = Union[UploadSuccess, UploadFailure]


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as B, KB, MB, GB or TB."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024:
            return f"{value:.1f} {unit}"
    return f"{value / 1024:.1f} TB"
