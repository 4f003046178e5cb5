"""Rebuild the installed-state view from tool directories, and remove from it.

Bundle attribution comes from the install manifest when a file is recorded
there. Otherwise it is inferred from the destination path, which is lossy for
hyphenated compound names. Removal only trusts inference when a tool has no
manifest and the bundle is known to a configured source.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from skill_bundles.constants import MARKDOWN_SUFFIX
from skill_bundles.install_manifest import InstallManifest
from skill_bundles.models import ContentType, InstalledEntry, RemovalReport, Tool
from skill_bundles.tools.catalog import (
    DestinationRule,
    destination_roots,
    destination_rule,
)
from skill_bundles.tools.mapper import split_compound_name
from skill_bundles.utils import is_under

logger = logging.getLogger(__name__)


def _group_roots(tool: Tool) -> dict[str, tuple[DestinationRule, ContentType]]:
    grouped: dict[str, list[tuple[ContentType, DestinationRule]]] = {}
    for content_type, rule in destination_roots(tool):
        grouped.setdefault(rule.destination_root, []).append((content_type, rule))

    roots: dict[str, tuple[DestinationRule, ContentType]] = {}
    for root, items in grouped.items():
        types = [content_type for content_type, _ in items]
        # Cursor folds agents and commands into rules; unrecorded files read as rules.
        default = ContentType.RULE if ContentType.RULE in types else types[0]
        roots[root] = (items[0][1], default)
    return roots


def _walk_root(root: Path, rule: DestinationRule) -> Iterator[tuple[Path, str, Optional[str]]]:
    """Yield ``(file, item_name, bundle_or_compound)`` for files under ``root``."""
    if "{bundle}" in rule.template:
        for path in sorted(root.rglob(f"*{MARKDOWN_SUFFIX}")):
            if not path.is_file():
                continue
            parts = path.relative_to(root).parts
            bundle = parts[0] if len(parts) > 1 else None
            yield path, path.stem, bundle
        return

    if rule.per_item_dir:
        filename = rule.template.rsplit("/", 1)[1]
        for child in sorted(root.iterdir()):
            candidate = child / filename
            if child.is_dir() and candidate.is_file():
                yield candidate, child.name, None
        return

    for path in sorted(root.iterdir()):
        if path.is_file() and path.suffix == MARKDOWN_SUFFIX:
            yield path, path.stem, None


def discover(
    install_root: Path,
    known_bundles: Optional[Iterable[str]] = None,
    tools: Optional[Iterable[Tool]] = None,
) -> list[InstalledEntry]:
    entries: list[InstalledEntry] = []
    base_known = set(known_bundles or ())

    for tool in tools or Tool:
        manifest = InstallManifest.load(tool, install_root)
        known = base_known | set(manifest.bundle_names())

        for root_text, (rule, default_type) in _group_roots(tool).items():
            root = install_root / root_text
            if not root.is_dir():
                continue
            for path, item_name, bundle in _walk_root(root, rule):
                relative = path.relative_to(install_root).as_posix()
                recorded = manifest.lookup(relative)
                if recorded is not None:
                    bundle_name, item = recorded
                    entries.append(
                        InstalledEntry(
                            tool=tool,
                            content_type=item.content_type,
                            name=item.name,
                            path=path,
                            bundle=bundle_name,
                        )
                    )
                    continue

                if "{bundle}" in rule.template:
                    inferred_bundle, name = bundle, item_name
                else:
                    inferred_bundle, name = split_compound_name(item_name, known)
                entries.append(
                    InstalledEntry(
                        tool=tool,
                        content_type=default_type,
                        name=name,
                        path=path,
                        bundle=inferred_bundle,
                    )
                )

    return entries


def _prune_empty_dirs(start: Path, stop_at: Path) -> None:
    current = start
    while current != stop_at and is_under(current, stop_at):
        if any(current.iterdir()):
            return
        current.rmdir()
        logger.debug("removed empty directory %s", current)
        current = current.parent


def _relative(entry: InstalledEntry, install_root: Path) -> str:
    return entry.path.relative_to(install_root).as_posix()


def _removable_entries(
    install_root: Path, bundle_name: str, tool: Tool, known: set[str]
) -> list[InstalledEntry]:
    """Entries of ``bundle_name`` that skill-bundles may delete for ``tool``.

    With an install manifest only recorded files qualify. Without one, paths
    are inferred, and only for bundles the configured sources know about.
    """
    if InstallManifest.path_for(tool, install_root).exists():
        recorded = InstallManifest.load(tool, install_root).get(bundle_name)
        if recorded is None:
            return []
        paths = {item.path for item in recorded.files}
        return [
            entry
            for entry in discover(install_root, tools=[tool])
            if entry.bundle == bundle_name and _relative(entry, install_root) in paths
        ]

    if bundle_name not in known:
        return []
    return [
        entry
        for entry in discover(install_root, known_bundles=known, tools=[tool])
        if entry.bundle == bundle_name
    ]


def remove(
    install_root: Path,
    bundle_name: str,
    tool: Optional[Tool] = None,
    content_types: Optional[Iterable[ContentType]] = None,
    known_bundles: Optional[Iterable[str]] = None,
) -> RemovalReport:
    """Delete the installed files attributed to ``bundle_name``.

    Nothing matching is not an error: the report's ``not_found`` is set.
    """
    allowed = set(content_types) if content_types is not None else set(ContentType)
    known = set(known_bundles or ())
    tools = [tool] if tool is not None else list(Tool)
    report = RemovalReport(bundle=bundle_name)

    removed_by_tool: dict[Tool, set[str]] = {}
    for item in tools:
        for entry in _removable_entries(install_root, bundle_name, item, known):
            if entry.content_type not in allowed:
                continue
            rule_root = _destination_root_for(entry)
            try:
                entry.path.unlink()
                _prune_empty_dirs(entry.path.parent, install_root / rule_root)
            except OSError as exc:
                report.failures.append(f"remove failed for {entry.path}: {exc}")
                continue
            report.removed.append(entry)
            removed_by_tool.setdefault(entry.tool, set()).add(
                _relative(entry, install_root)
            )

    for removed_tool, paths in removed_by_tool.items():
        manifest = InstallManifest.load(removed_tool, install_root)
        manifest.remove_files(bundle_name, paths)
        try:
            manifest.save(removed_tool, install_root)
        except OSError as exc:
            report.failures.append(f"manifest update failed for {removed_tool.value}: {exc}")

    return report


def installed_bundle_names(
    install_root: Path, tool: Tool, known_bundles: Optional[Iterable[str]] = None
) -> list[str]:
    """Bundles installed for ``tool`` that :func:`remove` would act on."""
    if InstallManifest.path_for(tool, install_root).exists():
        return InstallManifest.load(tool, install_root).bundle_names()
    known = set(known_bundles or ())
    found = {
        entry.bundle
        for entry in discover(install_root, known_bundles=known, tools=[tool])
        if entry.bundle in known
    }
    return sorted(found)


def remove_all(
    install_root: Path,
    tool: Optional[Tool] = None,
    known_bundles: Optional[Iterable[str]] = None,
) -> list[RemovalReport]:
    """Remove every bundle installed for ``tool`` (all tools by default)."""
    known = set(known_bundles or ())
    reports: list[RemovalReport] = []
    for item in [tool] if tool is not None else list(Tool):
        for name in installed_bundle_names(install_root, item, known):
            reports.append(remove(install_root, name, tool=item, known_bundles=known))
    return reports


def _destination_root_for(entry: InstalledEntry) -> str:
    return destination_rule(entry.tool, entry.content_type).destination_root


def group_by_tool(
    entries: Iterable[InstalledEntry],
) -> dict[Tool, dict[ContentType, list[InstalledEntry]]]:
    grouped: dict[Tool, dict[ContentType, list[InstalledEntry]]] = {}
    for entry in entries:
        grouped.setdefault(entry.tool, {}).setdefault(entry.content_type, []).append(entry)
    return grouped
