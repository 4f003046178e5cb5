"""Classify a directory as one of the supported bundle source layouts."""

from pathlib import Path
from typing import Final, Optional

from skill_bundles.constants import MARKDOWN_SUFFIX, RESOURCES_DIRNAME, SKILL_FILENAME
from skill_bundles.models import BundleFormat, ContentType
from skill_bundles.utils import is_skipped_name

RESOURCE_TYPE_DIRS: Final[dict[str, ContentType]] = {
    "skills": ContentType.SKILL,
    "commands": ContentType.COMMAND,
    "agents": ContentType.AGENT,
    "cursor-rules": ContentType.RULE,
    "rules": ContentType.RULE,
}

FLAT_TYPE_DIRS: Final[dict[str, ContentType]] = {
    content_type.dir_name: content_type for content_type in ContentType
}


def _visible_children(path: Path) -> list[Path]:
    return sorted(child for child in path.iterdir() if not is_skipped_name(child.name))


def is_resources_source(path: Path) -> bool:
    resources = path / RESOURCES_DIRNAME
    if not resources.is_dir():
        return False
    return any(
        child.is_dir() and child.name in RESOURCE_TYPE_DIRS
        for child in resources.iterdir()
    )


def is_anthropic_source(path: Path) -> bool:
    skills = path / ContentType.SKILL.dir_name
    if not skills.is_dir():
        return False
    has_skill_dir = False
    for child in _visible_children(skills):
        if child.is_file() and child.suffix == MARKDOWN_SUFFIX:
            return False
        # Exact, case-sensitive match: iterdir() names, not Path.exists().
        if child.is_dir() and SKILL_FILENAME in {item.name for item in child.iterdir()}:
            has_skill_dir = True
    return has_skill_dir


def is_flat_source(path: Path) -> bool:
    return any((path / dir_name).is_dir() for dir_name in FLAT_TYPE_DIRS)


def detect_format(path: Path) -> Optional[BundleFormat]:
    """Return the layout of ``path`` or None when it is not a bundle source.

    Anthropic is checked before Flat because an Anthropic ``skills/`` folder
    also satisfies the Flat check.
    """
    if not path.is_dir():
        return None
    if is_resources_source(path):
        return BundleFormat.RESOURCES
    if is_anthropic_source(path):
        return BundleFormat.ANTHROPIC
    if is_flat_source(path):
        return BundleFormat.FLAT
    return None
