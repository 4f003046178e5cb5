"""Per-tool record of installed bundles, stored next to the installed files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from skill_bundles.constants import INSTALL_MANIFEST_FILENAME
from skill_bundles.models import ContentType, Tool
from skill_bundles.tools.catalog import tool_metadata
from skill_bundles.utils import dump_json, load_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestFile:
    path: str
    content_type: ContentType
    name: str

    def as_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "content_type": self.content_type.value,
            "name": self.name,
        }


@dataclass
class ManifestEntry:
    name: str
    source: str
    files: list[ManifestFile] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "files": [item.as_dict() for item in self.files],
        }


def _parse_entry(raw: Any) -> Optional[ManifestEntry]:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        return None
    files: list[ManifestFile] = []
    for item in raw.get("files") or []:
        if not isinstance(item, dict):
            continue
        try:
            files.append(
                ManifestFile(
                    path=str(item["path"]),
                    content_type=ContentType(item["content_type"]),
                    name=str(item["name"]),
                )
            )
        except (KeyError, ValueError):
            continue
    return ManifestEntry(name=raw["name"], source=str(raw.get("source", "")), files=files)


class InstallManifest:
    def __init__(self, entries: Optional[list[ManifestEntry]] = None) -> None:
        self.entries: list[ManifestEntry] = entries or []

    @staticmethod
    def path_for(tool: Tool, install_root: Path) -> Path:
        return install_root / tool_metadata(tool).project_dir_name / INSTALL_MANIFEST_FILENAME

    @classmethod
    def load(cls, tool: Tool, install_root: Path) -> "InstallManifest":
        path = cls.path_for(tool, install_root)
        payload, error = load_json(path)
        if error is not None:
            logger.warning("ignoring corrupt install manifest %s: %s", path, error)
            return cls()
        if not isinstance(payload, dict):
            return cls()
        entries = [
            entry
            for entry in (_parse_entry(raw) for raw in payload.get("bundles") or [])
            if entry is not None
        ]
        return cls(entries)

    def save(self, tool: Tool, install_root: Path) -> None:
        path = self.path_for(tool, install_root)
        if not self.entries:
            if path.exists():
                path.unlink()
            return
        dump_json(path, {"bundles": [entry.as_dict() for entry in self.entries]})

    def get(self, name: str) -> Optional[ManifestEntry]:
        return next((entry for entry in self.entries if entry.name == name), None)

    def record_install(self, name: str, source: str, files: list[ManifestFile]) -> None:
        entry = self.get(name)
        if entry is None:
            self.entries.append(ManifestEntry(name=name, source=source, files=list(files)))
            return
        entry.source = source
        known = {item.path: item for item in entry.files}
        for item in files:
            known[item.path] = item
        entry.files = list(known.values())

    def remove_bundle(self, name: str) -> bool:
        before = len(self.entries)
        self.entries = [entry for entry in self.entries if entry.name != name]
        return len(self.entries) < before

    def remove_files(self, name: str, paths: set[str]) -> None:
        entry = self.get(name)
        if entry is None:
            return
        entry.files = [item for item in entry.files if item.path not in paths]
        if not entry.files:
            self.remove_bundle(name)

    def bundle_names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def lookup(self, relative_path: str) -> Optional[tuple[str, ManifestFile]]:
        for entry in self.entries:
            for item in entry.files:
                if item.path == relative_path:
                    return entry.name, item
        return None

    def is_empty(self) -> bool:
        return not self.entries
