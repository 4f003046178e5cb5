"""Read and inject YAML frontmatter in markdown content."""

from __future__ import annotations

import re
from typing import Any

import yaml

_FRONTMATTER_RE = re.compile(
    r"^---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|$)", re.DOTALL
)
_NAME_LINE_RE = re.compile(r"^name\s*:", re.MULTILINE)
_BOM = "\ufeff"


def _split_bom(text: str) -> tuple[str, str]:
    if text.startswith(_BOM):
        return _BOM, text[len(_BOM) :]
    return "", text


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return the parsed frontmatter mapping and the remaining body.

    Content without a frontmatter block, or with one that is not a YAML
    mapping, yields an empty mapping and the full text as body. A leading
    byte order mark is ignored.
    """
    _, unmarked = _split_bom(text)
    match = _FRONTMATTER_RE.match(unmarked)
    if not match:
        return {}, text
    try:
        raw = yaml.safe_load(match.group(1) or "") or {}
    except yaml.YAMLError:
        return {}, text
    if not isinstance(raw, dict):
        return {}, text
    return raw, unmarked[match.end() :]


def frontmatter_name(text: str) -> str | None:
    raw, _ = split_frontmatter(text)
    value = raw.get("name")
    if value is None:
        return None
    name = str(value).strip()
    return name or None


def has_frontmatter(text: str) -> bool:
    _, unmarked = _split_bom(text)
    return _FRONTMATTER_RE.match(unmarked) is not None


def has_frontmatter_name(text: str) -> bool:
    _, unmarked = _split_bom(text)
    match = _FRONTMATTER_RE.match(unmarked)
    if not match:
        return False
    return _NAME_LINE_RE.search(match.group(1) or "") is not None


def _name_line(name: str) -> str:
    return yaml.safe_dump({"name": name}, default_flow_style=False, sort_keys=False)


def ensure_frontmatter_name(text: str, name: str) -> str:
    """Make sure ``text`` opens with a frontmatter block carrying ``name``.

    An existing ``name`` is left alone, so applying this twice is a no-op.
    A byte order mark stays in front of the block.
    """
    if has_frontmatter_name(text):
        return text
    bom, unmarked = _split_bom(text)
    if _FRONTMATTER_RE.match(unmarked):
        first_line_end = unmarked.index("\n") + 1
        return (
            bom
            + unmarked[:first_line_end]
            + _name_line(name)
            + unmarked[first_line_end:]
        )
    return f"{bom}---\n{_name_line(name)}---\n{unmarked}"
