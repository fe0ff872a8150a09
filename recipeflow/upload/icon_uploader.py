"""
Icon Uploader for RecipeFlow

Packs the icon metadata document and every referenced icon file into one
in-memory ZIP archive, then sends it through the chunked upload protocol
as an ``icons`` upload.

Archive layout:
    icon-metadata.json
    <namespace>/<item>.png (or .webp)
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Optional, Union

from .chunked_uploader import ChunkedUploader
from .exceptions import ArchiveError
from .icon_metadata import IconMetadata
from .models import (
    ICON_CHUNK_SIZE,
    ProgressCallback,
    UploadConfig,
    UploadFailure,
    UploadKind,
    UploadResult,
    format_bytes,
)

logger = logging.getLogger(__name__)

METADATA_ENTRY_NAME = "icon-metadata.json"


def build_icon_archive(icon_dir: Union[str, Path], metadata: IconMetadata) -> bytes:
    """Build the icon ZIP archive in memory.

    Icon files referenced by the metadata but missing on disk, or resolving
    outside ``icon_dir``, are logged and left out; a partial icon set is
    still uploaded.
    """
    icon_dir = Path(icon_dir)
    if not icon_dir.is_dir():
        raise ArchiveError(f"Icon directory not found: {icon_dir}")
    root = icon_dir.resolve()

    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(METADATA_ENTRY_NAME, metadata.to_json().encode("utf-8"))

        for item_id, entry in metadata.icons.items():
            icon_path = (icon_dir / entry.filename).resolve()
            if not icon_path.is_relative_to(root):
                logger.warning(f"Icon path outside icon directory: {entry.filename} (referenced by {item_id})")
                continue
            if not icon_path.is_file():
                logger.warning(f"Icon file not found: {icon_path} (referenced by {item_id})")
                continue
            archive.write(icon_path, arcname=entry.filename)

    return buffer.getvalue()


class IconUploader:
    """Uploads an exported icon directory as a single archive"""

    def __init__(self, config: UploadConfig, chunk_size: Optional[int] = None,
                 uploader: Optional[ChunkedUploader] = None):
        self.config = config
        self.chunk_size = chunk_size or config.icon_chunk_size or ICON_CHUNK_SIZE
        self.uploader = uploader or ChunkedUploader(config, self.chunk_size)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.uploader.close()

    def upload_icons(
        self,
        icon_dir: Union[str, Path],
        metadata: IconMetadata,
        version: str,
        callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """Archive ``icon_dir`` according to ``metadata`` and upload it."""
        if callback is not None:
            callback(0, 100, "Creating icon archive...")

        try:
            archive = build_icon_archive(icon_dir, metadata)
        except (OSError, ArchiveError) as e:
            logger.warning(f"Failed to create icon archive: {e}")
            return UploadFailure(f"Failed to create icon archive: {e}", e)
        except Exception as e:
            logger.warning("Icon upload failed", exc_info=True)
            return UploadFailure(f"Icon upload failed: {e}", e)

        logger.info(f"Icon archive created: {len(metadata)} icons, {format_bytes(len(archive))}")
        if callback is not None:
            callback(5, 100, f"Icon archive created ({format_bytes(len(archive))})")

        return self.uploader.upload(archive, version, UploadKind.ICONS, callback)
