from pathlib import Path
from typing import Sequence


class SkillBundleError(Exception):
    """Base user-facing application error."""


class SkillBundleFileError(SkillBundleError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidJsonFormatError(SkillBundleFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidConfigSchemaError(SkillBundleFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid config schema ({detail})")


class MalformedResourceError(SkillBundleFileError):
    """A single bundle item failed validation; scans skip it and continue."""

    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Malformed resource ({detail})")


class SourceUnavailableError(SkillBundleError):
    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"Source unavailable: {source} ({detail})")


class BundleNotFoundError(SkillBundleError):
    def __init__(self, name: str, searched: Sequence[str]) -> None:
        self.name = name
        self.searched = list(searched)
        where = ", ".join(self.searched) if self.searched else "(no sources configured)"
        super().__init__(f"Bundle not found: {name} (searched: {where})")
