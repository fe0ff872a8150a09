"""Content digests for upload payloads and chunks."""

import hashlib
import logging

logger = logging.getLogger(__name__)

HASH_PREFIX = "sha256:"
UNKNOWN_HASH = "unknown"


def digest(data: bytes) -> str:
    """Return ``"sha256:<lowercase hex>"`` for ``data``.

    Never raises: if the hash primitive fails the sentinel ``"unknown"`` is
    returned and the upload continues without integrity data for that call.
    """
    try:
        return HASH_PREFIX + hashlib.sha256(data).hexdigest()
    except Exception as e:
        logger.debug(f"Failed to compute hash: {e}")
        return UNKNOWN_HASH
