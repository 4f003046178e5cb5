"""Map bundle content to tool destinations, and back."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable, Iterable, Optional

from skill_bundles.frontmatter import ensure_frontmatter_name
from skill_bundles.models import ContentType, Tool
from skill_bundles.tools.catalog import destination_rule, tool_metadata


ContentTransform = Callable[[str], str]


def identity(content: str) -> str:
    return content


@dataclass(frozen=True)
class MappedDestination:
    relative_path: Path
    transform: ContentTransform
    root: Optional[Path] = None

    def resolve(self, install_root: Path) -> Path:
        return (self.root or install_root) / self.relative_path


def compound_name(bundle_name: str, name: str) -> str:
    """Join bundle and item names for tools without per-bundle folders.

    Single-item bundles whose item carries the bundle's own name collapse to
    just the bundle name.
    """
    if name == bundle_name:
        return bundle_name
    return f"{bundle_name}-{name}"


def split_compound_name(
    compound: str, known_bundles: Iterable[str] = ()
) -> tuple[str, str]:
    """Best-effort inverse of :func:`compound_name`.

    Hyphens are ambiguous, so the longest known bundle name that prefixes
    ``compound`` wins; without a match the first hyphen splits it.
    """
    best = ""
    for bundle in known_bundles:
        if not bundle or len(bundle) <= len(best):
            continue
        if compound == bundle or compound.startswith(f"{bundle}-"):
            best = bundle
    if best:
        rest = compound[len(best) + 1 :]
        return best, rest or best
    if "-" in compound:
        bundle, name = compound.split("-", 1)
        if bundle and name:
            return bundle, name
    return compound, compound


def install_root_for(tool: Tool, is_global: bool, cwd: Optional[Path] = None) -> Path:
    if is_global:
        return tool_metadata(tool).global_root()
    return cwd or Path.cwd()


def destination(
    tool: Tool,
    content_type: ContentType,
    bundle_name: str,
    file_name: str,
    is_global: bool = False,
) -> MappedDestination:
    rule = destination_rule(tool, content_type)
    name = Path(file_name).stem if file_name.endswith(".md") else file_name
    relative = rule.template.format(
        bundle=bundle_name,
        name=name,
        compound=compound_name(bundle_name, name),
    )

    transform: ContentTransform = identity
    if rule.requires_frontmatter:
        transform = partial(
            ensure_frontmatter_name, name=compound_name(bundle_name, name)
        )

    root = tool_metadata(tool).global_root() if is_global else None
    return MappedDestination(relative_path=Path(relative), transform=transform, root=root)
