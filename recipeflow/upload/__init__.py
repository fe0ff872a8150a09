"""
RecipeFlow Upload Module

This module uploads exported modpack data (recipes, item metadata, icon
archives) to the RecipeFlow server via a 4-phase resumable protocol.

Phase 1: Start - Create an upload session committing to the payload hash
Phase 2: Status - Ask which chunks the server already stored
Phase 3: Chunks - Send the missing chunks, each with its own hash
Phase 4: Complete - Let the server verify the assembled payload
"""

from pathlib import Path
from typing import Optional, Union

from .chunked_uploader import ChunkedUploader
from .environment_detector import RecipeFlowEnvironmentDetector
from .exceptions import (
    ArchiveError,
    EnvironmentValidationError,
    RecipeFlowUploadError,
    UploadProtocolError,
)
from .hashing import digest
from .icon_metadata import IconEntry, IconMetadata
from .icon_uploader import IconUploader, build_icon_archive
from .models import (
    ProgressCallback,
    UploadConfig,
    UploadFailure,
    UploadKind,
    UploadResult,
    UploadSuccess,
)


class RecipeFlowUploadManager:
    """Main interface for RecipeFlow upload functionality"""

    def __init__(self, file_config: Optional[dict] = None):
        self.detector = RecipeFlowEnvironmentDetector()
        self.file_config = file_config
        self._config: Optional[UploadConfig] = None

    def is_upload_enabled(self) -> bool:
        """Check if upload is configured via environment variables or config file"""
        return self.detector.is_upload_enabled(self.file_config)

    @property
    def config(self) -> UploadConfig:
        if self._config is None:
            if not self.is_upload_enabled():
                raise EnvironmentValidationError(
                    "Upload not enabled - missing environment variables",
                    missing_vars=self.detector.get_missing_variables(self.file_config)
                )
            self._config = self.detector.get_upload_config(self.file_config)
        return self._config

    def _chunk_size_for(self, kind: Union[str, UploadKind]) -> int:
        if kind == UploadKind.ICONS:
            return self.config.icon_chunk_size
        if kind == UploadKind.ITEMS:
            return self.config.items_chunk_size
        return self.config.chunk_size

    def check_upload_exists(self, version: str, kind: Union[str, UploadKind]) -> bool:
        """Ask the server whether this upload is already stored"""
        with ChunkedUploader(self.config) as uploader:
            return uploader.check_upload_exists(version, kind)

    def upload_payload(
        self,
        data: bytes,
        version: str,
        kind: Union[str, UploadKind],
        callback: Optional[ProgressCallback] = None,
        chunk_size: Optional[int] = None,
    ) -> UploadResult:
        """Upload an already-serialized payload"""
        with ChunkedUploader(self.config, chunk_size or self._chunk_size_for(kind)) as uploader:
            return uploader.upload(data, version, kind, callback)

    def upload_icons(
        self,
        icon_dir: Union[str, Path],
        metadata: IconMetadata,
        version: str,
        callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """Archive and upload an exported icon directory"""
        with IconUploader(self.config) as uploader:
            return uploader.upload_icons(icon_dir, metadata, version, callback)


__all__ = [
    'RecipeFlowUploadManager',
    'RecipeFlowEnvironmentDetector',
    'ChunkedUploader',
    'IconUploader',
    'IconMetadata',
    'IconEntry',
    'build_icon_archive',
    'digest',
    'UploadConfig',
    'UploadKind',
    'UploadResult',
    'UploadSuccess',
    'UploadFailure',
    'RecipeFlowUploadError',
    'EnvironmentValidationError',
    'UploadProtocolError',
    'ArchiveError',
]
