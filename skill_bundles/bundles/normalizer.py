"""Turn detected bundle sources into normalized Bundle records."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from skill_bundles.bundles.detector import (
    FLAT_TYPE_DIRS,
    RESOURCE_TYPE_DIRS,
    detect_format,
)
from skill_bundles.constants import (
    MARKDOWN_SUFFIX,
    META_FILENAMES,
    META_REQUIRED_FIELDS,
    RESOURCES_DIRNAME,
    SKILL_FILENAME,
    SOURCE_IGNORED_DIRS,
)
from skill_bundles.errors import MalformedResourceError
from skill_bundles.frontmatter import frontmatter_name
from skill_bundles.models import (
    Bundle,
    BundleFormat,
    BundleMetadata,
    ContentType,
    NormalizationResult,
    SkillFile,
)
from skill_bundles.utils import is_skipped_name

logger = logging.getLogger(__name__)

RESOURCE_CONTENT_FILENAMES: dict[ContentType, tuple[str, ...]] = {
    ContentType.SKILL: ("skill.md", "SKILL.md"),
    ContentType.AGENT: ("agent.md", "AGENT.md"),
    ContentType.COMMAND: ("command.md", "COMMAND.md"),
    ContentType.RULE: ("rule.md", "RULE.md"),
}


def _read_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedResourceError(path, f"unreadable file: {exc}") from exc


def _checked_name(origin: Path, name: str) -> str:
    """Reject names that would step outside a destination directory."""
    if (
        not name
        or "/" in name
        or "\\" in name
        or ".." in name
        or name.startswith(".")
    ):
        raise MalformedResourceError(origin, f"unsafe name '{name}'")
    return name


def _markdown_files(directory: Path) -> list[Path]:
    return sorted(
        child
        for child in directory.iterdir()
        if child.is_file()
        and child.suffix == MARKDOWN_SUFFIX
        and not is_skipped_name(child.name)
    )


def normalize_flat(path: Path) -> NormalizationResult:
    result = NormalizationResult()
    files: list[SkillFile] = []
    for dir_name, content_type in FLAT_TYPE_DIRS.items():
        type_dir = path / dir_name
        if not type_dir.is_dir():
            continue
        for md_path in _markdown_files(type_dir):
            try:
                name = _checked_name(md_path, md_path.stem)
                content = _read_text(md_path)
            except MalformedResourceError as exc:
                logger.warning("skipping %s: %s", md_path, exc.detail)
                result.problems.append(exc)
                continue
            files.append(
                SkillFile(
                    content_type=content_type,
                    name=name,
                    content=content,
                    origin=md_path.resolve(),
                )
            )

    result.bundles.append(
        Bundle(
            name=path.resolve().name,
            origin=path,
            files=tuple(files),
            format=BundleFormat.FLAT,
        )
    )
    return result


def normalize_anthropic(path: Path) -> NormalizationResult:
    result = NormalizationResult()
    skills_dir = path / ContentType.SKILL.dir_name
    for skill_dir in sorted(skills_dir.iterdir()):
        if not skill_dir.is_dir() or is_skipped_name(skill_dir.name):
            continue
        skill_path = skill_dir / SKILL_FILENAME
        if SKILL_FILENAME not in {item.name for item in skill_dir.iterdir()}:
            result.problems.append(
                MalformedResourceError(skill_dir, f"missing {SKILL_FILENAME}")
            )
            continue
        try:
            content = _read_text(skill_path)
            name = _checked_name(
                skill_path, frontmatter_name(content) or skill_dir.name
            )
        except MalformedResourceError as exc:
            logger.warning("skipping skill %s: %s", skill_dir, exc.detail)
            result.problems.append(exc)
            continue

        skill = SkillFile(
            content_type=ContentType.SKILL,
            name=name,
            content=content,
            origin=skill_path.resolve(),
        )
        result.bundles.append(
            Bundle(
                name=name,
                origin=skill_dir,
                files=(skill,),
                format=BundleFormat.ANTHROPIC,
            )
        )
    return result


def _load_resource_meta(resource_dir: Path) -> dict:
    meta_path = next(
        (resource_dir / name for name in META_FILENAMES if (resource_dir / name).is_file()),
        None,
    )
    if meta_path is None:
        raise MalformedResourceError(resource_dir, "missing meta.yaml")
    try:
        raw = yaml.safe_load(_read_text(meta_path))
    except yaml.YAMLError as exc:
        raise MalformedResourceError(meta_path, f"invalid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise MalformedResourceError(meta_path, "metadata must be a mapping")
    for field_name in META_REQUIRED_FIELDS:
        value = raw.get(field_name)
        if value is None or not str(value).strip():
            raise MalformedResourceError(
                meta_path, f"missing required field '{field_name}'"
            )
    return raw


def _pick_content_file(
    resource_dir: Path, content_type: ContentType, result: NormalizationResult
) -> Path:
    candidates = _markdown_files(resource_dir)
    if not candidates:
        raise MalformedResourceError(resource_dir, "no markdown content file")
    names = {item.name: item for item in candidates}
    picked = next(
        (
            names[expected]
            for expected in RESOURCE_CONTENT_FILENAMES[content_type]
            if expected in names
        ),
        candidates[0],
    )
    if len(candidates) > 1:
        result.warnings.append(
            f"Multiple markdown files in {resource_dir}; using {picked.name}"
        )
    return picked


def _normalize_resource(
    resource_dir: Path, content_type: ContentType, result: NormalizationResult
) -> Bundle:
    meta = _load_resource_meta(resource_dir)
    content_path = _pick_content_file(resource_dir, content_type, result)
    name = _checked_name(resource_dir, str(meta["name"]).strip())
    skill = SkillFile(
        content_type=content_type,
        name=name,
        content=_read_text(content_path),
        origin=content_path.resolve(),
    )
    return Bundle(
        name=name,
        origin=resource_dir,
        files=(skill,),
        format=BundleFormat.RESOURCES,
        metadata=BundleMetadata(
            author=str(meta.get("author", "")),
            description=str(meta.get("description") or ""),
        ),
    )


def normalize_resources(path: Path) -> NormalizationResult:
    result = NormalizationResult()
    resources = path / RESOURCES_DIRNAME
    for dir_name, content_type in RESOURCE_TYPE_DIRS.items():
        type_dir = resources / dir_name
        if not type_dir.is_dir():
            continue
        for resource_dir in sorted(type_dir.iterdir()):
            if not resource_dir.is_dir() or is_skipped_name(resource_dir.name):
                continue
            try:
                bundle = _normalize_resource(resource_dir, content_type, result)
            except MalformedResourceError as exc:
                logger.warning("skipping resource %s: %s", resource_dir, exc.detail)
                result.problems.append(exc)
                continue
            result.bundles.append(bundle)
    return result


def normalize(path: Path, fmt: BundleFormat) -> NormalizationResult:
    if fmt == BundleFormat.FLAT:
        return normalize_flat(path)
    if fmt == BundleFormat.ANTHROPIC:
        return normalize_anthropic(path)
    return normalize_resources(path)


def scan_source(path: Path) -> NormalizationResult:
    """Normalize a source root.

    A root that is itself a bundle source is normalized directly. Otherwise
    each visible child directory that is a bundle source is normalized, which
    covers the common "directory of Flat bundles" layout.
    """
    result = NormalizationResult()
    if not path.is_dir():
        return result

    fmt = detect_format(path)
    if fmt is not None:
        logger.debug("%s detected as %s source", path, fmt.value)
        result.extend(normalize(path, fmt))
    else:
        for child in sorted(path.iterdir()):
            if not child.is_dir() or is_skipped_name(child.name):
                continue
            if child.name in SOURCE_IGNORED_DIRS:
                continue
            child_fmt = detect_format(child)
            if child_fmt is None:
                continue
            logger.debug("%s detected as %s source", child, child_fmt.value)
            result.extend(normalize(child, child_fmt))

    result.bundles = [bundle for bundle in result.bundles if not bundle.is_empty()]
    return result
