"""JSON config file holding the ordered source list."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from skill_bundles.constants import APP_NAME, CONFIG_FILENAME, DEFAULT_SOURCE_PATH
from skill_bundles.errors import InvalidConfigSchemaError, InvalidJsonFormatError
from skill_bundles.models import Source, SourceKind, Tool
from skill_bundles.sources.materializer import looks_like_remote
from skill_bundles.utils import dump_json, expand_user_path, load_json, xdg_dir

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.json"


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


def default_config() -> dict[str, Any]:
    return {
        "default_tool": Tool.CLAUDE.value,
        "sources": [{"type": SourceKind.LOCAL.value, "path": DEFAULT_SOURCE_PATH}],
    }


class ConfigRepository:
    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = root or (xdg_dir("XDG_CONFIG_HOME", ".config") / APP_NAME)
        self._validator = Draft202012Validator(
            json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self._root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.exists()

    def validate(self, payload: Any) -> None:
        error = next(iter(self._validator.iter_errors(payload)), None)
        if error is not None:
            raise InvalidConfigSchemaError(self.config_path, format_schema_error(error))

    def load(self) -> dict[str, Any]:
        payload, error = load_json(self.config_path)
        if error is not None:
            raise InvalidJsonFormatError(self.config_path, error)
        if payload is None:
            return default_config()
        self.validate(payload)
        payload.setdefault("default_tool", Tool.CLAUDE.value)
        payload.setdefault("sources", [])
        return payload

    def save(self, payload: dict[str, Any]) -> None:
        self.validate(payload)
        dump_json(self.config_path, payload)

    def default_tool(self) -> Tool:
        return Tool(self.load()["default_tool"])

    def load_sources(self) -> list[Source]:
        sources: list[Source] = []
        for priority, item in enumerate(self.load()["sources"]):
            kind = SourceKind(item["type"])
            location = item["url"] if kind == SourceKind.GIT else item["path"]
            sources.append(
                Source(kind=kind, location=location, priority=priority, name=item.get("name"))
            )
        return sources

    def add_source(self, location: str, name: Optional[str] = None) -> Source:
        payload = self.load()
        if looks_like_remote(location):
            item: dict[str, str] = {"type": SourceKind.GIT.value, "url": location}
        else:
            item = {"type": SourceKind.LOCAL.value, "path": location}
        if name:
            item["name"] = name

        for existing in self.load_sources():
            if existing.location == location or (name and existing.name == name):
                raise ValueError(f"Source already configured: {existing.display}")
            if (
                item["type"] == SourceKind.LOCAL.value
                and existing.kind == SourceKind.LOCAL
                and expand_user_path(existing.location) == expand_user_path(location)
            ):
                raise ValueError(f"Source already configured: {existing.display}")

        payload["sources"].append(item)
        self.save(payload)
        return self.load_sources()[-1]

    def remove_source(self, ident: str) -> bool:
        payload = self.load()
        kept: list[dict[str, str]] = []
        for item in payload["sources"]:
            location = item.get("url") or item.get("path", "")
            matches = ident in (location, item.get("name"))
            if not matches and item["type"] == SourceKind.LOCAL.value:
                matches = expand_user_path(location) == expand_user_path(ident)
            if not matches:
                kept.append(item)
        if len(kept) == len(payload["sources"]):
            return False
        payload["sources"] = kept
        self.save(payload)
        return True
