"""Convert between Cursor-style rule files and plain command files."""

from __future__ import annotations

from pathlib import Path

import yaml

from skill_bundles.errors import SkillBundleFileError
from skill_bundles.frontmatter import has_frontmatter, split_frontmatter

HEADING_PREFIX = "#"


def _title(content: str, fallback: str) -> str:
    lines = content.splitlines()
    first = lines[0] if lines else ""
    if first.startswith(HEADING_PREFIX):
        return first.lstrip(HEADING_PREFIX).strip() or fallback
    return fallback


def to_rule(content: str, source_name: str) -> str:
    """Prefix ``content`` with rule frontmatter.

    The description is the opening heading, or the file stem when the
    content does not start with one. Content that already has frontmatter is
    returned unchanged.
    """
    if has_frontmatter(content):
        return content
    meta = {
        "description": _title(content, Path(source_name).stem or "converted-rule"),
        "alwaysApply": False,
    }
    block = yaml.safe_dump(meta, default_flow_style=False, sort_keys=False)
    return f"---\n{block}---\n\n{content}"


def to_command(content: str) -> str:
    """Drop the frontmatter block of a rule, keeping only its body."""
    _, body = split_frontmatter(content)
    if body == content:
        return content
    return body.lstrip()


def convert_file(source: Path, to_rule_format: bool) -> str:
    try:
        content = source.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SkillBundleFileError(source, f"Cannot read file ({exc})") from exc
    if to_rule_format:
        return to_rule(content, source.name)
    return to_command(content)
