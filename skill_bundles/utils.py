import json
import os
from pathlib import Path
from typing import Any

from skill_bundles.constants import SKIPPED_PREFIXES


def load_json(path: Path) -> tuple[Any | None, str | None]:
    """Return ``(payload, error)``; a missing or blank file is ``(None, None)``."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None, None
    except OSError as exc:
        return None, str(exc)
    if not text.strip():
        return None, None
    try:
        return json.loads(text), None
    except ValueError as exc:
        return None, str(exc)


def dump_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def is_under(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def is_skipped_name(name: str) -> bool:
    return name.startswith(SKIPPED_PREFIXES)


def expand_user_path(value: str | Path) -> Path:
    return Path(os.path.expandvars(str(value))).expanduser()


def xdg_dir(env_name: str, fallback: str) -> Path:
    value = os.environ.get(env_name)
    if value:
        return Path(value)
    return Path.home() / fallback


def compact_home_path(path: str | Path) -> str:
    """Show ``path`` relative to ``~`` when it lives under the home directory."""
    home = Path.home()
    candidate = Path(path)
    if candidate == home:
        return "~"
    try:
        return f"~/{candidate.relative_to(home).as_posix()}"
    except ValueError:
        return str(path)
