"""Metadata document describing exported item icons."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union


@dataclass(frozen=True)
class IconEntry:
    """One icon file and its animation parameters"""
    filename: str
    animated: bool = False
    frame_count: int = 1
    frame_time_ms: int = 0

    @classmethod
    def static_icon(cls, filename: str) -> "IconEntry":
        return cls(filename)

    @classmethod
    def animated_icon(cls, filename: str, frame_count: int, frame_time_ms: int) -> "IconEntry":
        return cls(filename, True, frame_count, frame_time_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "animated": self.animated,
            "frameCount": self.frame_count,
            "frameTimeMs": self.frame_time_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IconEntry":
        if not isinstance(data, dict):
            raise ValueError(f"Icon entry must be a JSON object, got {type(data).__name__}")
        filename = data.get("filename")
        if not isinstance(filename, str) or not filename:
            raise ValueError("Icon entry has no filename")
        return cls(
            filename=filename,
            animated=bool(data.get("animated", False)),
            frame_count=int(data.get("frameCount", 1)),
            frame_time_ms=int(data.get("frameTimeMs", 0)),
        )


@dataclass
class IconMetadata:
    """Item id -> icon entry, in insertion order"""
    icons: Dict[str, IconEntry] = field(default_factory=dict)

    def add_icon(self, item_id: str, entry: IconEntry) -> None:
        self.icons[item_id] = entry

    def add_static_icon(self, item_id: str, filename: str) -> None:
        self.add_icon(item_id, IconEntry.static_icon(filename))

    def add_animated_icon(self, item_id: str, filename: str, frame_count: int, frame_time_ms: int) -> None:
        self.add_icon(item_id, IconEntry.animated_icon(filename, frame_count, frame_time_ms))

    def __len__(self) -> int:
        return len(self.icons)

    def to_json(self) -> str:
        return json.dumps(
            {item_id: entry.to_dict() for item_id, entry in self.icons.items()},
            indent=2,
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, text: str) -> "IconMetadata":
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("Icon metadata must be a JSON object")
        return cls({item_id: IconEntry.from_dict(entry) for item_id, entry in parsed.items()})

    @classmethod
    def load(cls, path: Union[str, Path]) -> "IconMetadata":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))
