from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from skill_bundles.errors import MalformedResourceError


class ContentType(str, Enum):
    SKILL = "skill"
    AGENT = "agent"
    COMMAND = "command"
    RULE = "rule"

    @property
    def dir_name(self) -> str:
        return f"{self.value}s"


class Tool(str, Enum):
    CLAUDE = "claude"
    OPENCODE = "opencode"
    CURSOR = "cursor"


class BundleFormat(str, Enum):
    FLAT = "flat"
    ANTHROPIC = "anthropic"
    RESOURCES = "resources"


class SourceKind(str, Enum):
    LOCAL = "local"
    GIT = "git"


class FileInstallStatus(str, Enum):
    WRITTEN = "written"
    OVERWRITTEN = "overwritten"
    FAILED = "failed"


@dataclass(frozen=True)
class Source:
    kind: SourceKind
    location: str
    priority: int
    name: Optional[str] = None

    @property
    def display(self) -> str:
        return self.name or self.location


@dataclass(frozen=True)
class SkillFile:
    content_type: ContentType
    name: str
    content: str
    origin: Path


@dataclass(frozen=True)
class BundleMetadata:
    author: str = ""
    description: str = ""


@dataclass(frozen=True)
class Bundle:
    name: str
    origin: Path
    files: tuple[SkillFile, ...]
    format: BundleFormat
    metadata: BundleMetadata = field(default_factory=BundleMetadata)

    def files_of_type(self, content_type: ContentType) -> list[SkillFile]:
        return [item for item in self.files if item.content_type == content_type]

    def is_empty(self) -> bool:
        return not self.files


@dataclass
class NormalizationResult:
    bundles: list[Bundle] = field(default_factory=list)
    problems: list[MalformedResourceError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def extend(self, other: "NormalizationResult") -> None:
        self.bundles.extend(other.bundles)
        self.problems.extend(other.problems)
        self.warnings.extend(other.warnings)


@dataclass(frozen=True)
class SourceBundle:
    source: Source
    bundle: Bundle


@dataclass
class BundleListing:
    bundles: list[SourceBundle] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def names(self) -> list[str]:
        return [item.bundle.name for item in self.bundles]


@dataclass(frozen=True)
class InstalledEntry:
    tool: Tool
    content_type: ContentType
    name: str
    path: Path
    bundle: Optional[str] = None


@dataclass(frozen=True)
class FileInstallResult:
    content_type: ContentType
    name: str
    path: Path
    status: FileInstallStatus
    reason: str = ""


@dataclass
class InstallReport:
    bundle: str
    tool: Tool
    results: list[FileInstallResult] = field(default_factory=list)

    @property
    def failed(self) -> list[FileInstallResult]:
        return [item for item in self.results if item.status == FileInstallStatus.FAILED]

    @property
    def succeeded(self) -> list[FileInstallResult]:
        return [item for item in self.results if item.status != FileInstallStatus.FAILED]

    def summary(self) -> dict[str, int]:
        counts = {status.value: 0 for status in FileInstallStatus}
        for item in self.results:
            counts[item.status.value] += 1
        counts["files"] = len(self.results)
        return counts


@dataclass
class RemovalReport:
    bundle: str
    removed: list[InstalledEntry] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def not_found(self) -> bool:
        return not self.removed and not self.failures
