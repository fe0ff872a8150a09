"""
Modpack version detection.

Reads the version from a CurseForge ``manifest.json`` or a Modrinth
``pack.toml`` in the game directory, falling back to its parent directory
(instance-based launchers keep the manifest one level up).
"""
import json
import logging
import tomllib
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


def _clean(value: object) -> Optional[str]:
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    return None


def detect_from_curseforge(directory: Path) -> Optional[str]:
    """Version from manifest.json: {"version": "1.2.3", ...}"""
    manifest = directory / "manifest.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Failed to parse {manifest}: {e}")
        return None
    return _clean(data.get("version")) if isinstance(data, dict) else None


def detect_from_modrinth(directory: Path) -> Optional[str]:
    """Version from pack.toml: version = "1.2.3" """
    pack_toml = directory / "pack.toml"
    if not pack_toml.is_file():
        return None
    try:
        with pack_toml.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug(f"Failed to parse {pack_toml}: {e}")
        return None
    return _clean(data.get("version"))


def detect_version(game_dir: Optional[Union[str, Path]]) -> Optional[str]:
    """Detect the modpack version, or None if no manifest has one."""
    if game_dir is None:
        return None

    game_dir = Path(game_dir)
    candidates = [game_dir]
    if game_dir.parent != game_dir:
        candidates.append(game_dir.parent)

    for directory in candidates:
        for source, detector in (("manifest.json", detect_from_curseforge),
                                 ("pack.toml", detect_from_modrinth)):
            version = detector(directory)
            if version:
                logger.info(f"Detected version from {directory / source}: {version}")
                return version

    logger.debug("Could not detect modpack version")
    return None


def get_effective_version(game_dir: Optional[Union[str, Path]], override: Optional[str]) -> Optional[str]:
    """Use the override when it is non-blank, otherwise detect."""
    if override and override.strip():
        logger.info(f"Using version override: {override.strip()}")
        return override.strip()
    return detect_version(game_dir)
