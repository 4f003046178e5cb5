"""Materialize remote sources as local directories."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol

from skill_bundles.constants import APP_NAME
from skill_bundles.errors import SourceUnavailableError
from skill_bundles.utils import xdg_dir

logger = logging.getLogger(__name__)


class IRemoteMaterializer(Protocol):
    def materialize(self, url: str) -> Path: ...

    def refresh(self, url: str) -> Path: ...

    def cached_path(self, url: str) -> Optional[Path]: ...


def url_to_relative_path(url: str) -> str:
    """``https://host/org/repo.git`` and ``git@host:org/repo`` -> ``host/org/repo``."""
    text = url.strip().rstrip("/")
    if text.endswith(".git"):
        text = text[: -len(".git")]
    for prefix in ("https://", "http://", "ssh://", "git://"):
        if text.startswith(prefix):
            text = text[len(prefix) :]
            break
    if text.startswith("git@"):
        text = text[len("git@") :].replace(":", "/", 1)
    if "@" in text.split("/", 1)[0]:
        text = text.split("@", 1)[1]
    return text


def looks_like_remote(location: str) -> bool:
    return location.startswith(("https://", "http://", "ssh://", "git://", "git@")) or (
        location.endswith(".git") and not Path(location).expanduser().exists()
    )


class GitMaterializer:
    def __init__(self, cache_root: Optional[Path] = None) -> None:
        self._cache_root = cache_root or (xdg_dir("XDG_CACHE_HOME", ".cache") / APP_NAME)

    def cache_path_for(self, url: str) -> Path:
        return self._cache_root / url_to_relative_path(url)

    def _run(self, url: str, args: list[str]) -> None:
        try:
            subprocess.run(
                ["git", *args],
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise SourceUnavailableError(url, "git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip() or f"exit code {exc.returncode}"
            raise SourceUnavailableError(url, detail) from exc

    def cached_path(self, url: str) -> Optional[Path]:
        """Return the existing checkout for ``url`` without touching the network."""
        path = self.cache_path_for(url)
        return path if path.is_dir() else None

    def materialize(self, url: str) -> Path:
        path = self.cache_path_for(url)
        if path.is_dir():
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("cloning %s into %s", url, path)
        self._run(url, ["clone", "--depth", "1", url, str(path)])
        return path

    def refresh(self, url: str) -> Path:
        path = self.cache_path_for(url)
        if not path.is_dir():
            return self.materialize(url)
        logger.info("pulling %s", url)
        self._run(url, ["-C", str(path), "pull", "--ff-only"])
        return path
