"""Write normalized bundles into a tool's layout."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from skill_bundles.discovery import discover, installed_bundle_names
from skill_bundles.errors import SkillBundleError
from skill_bundles.install_manifest import InstallManifest, ManifestFile
from skill_bundles.models import (
    Bundle,
    ContentType,
    FileInstallResult,
    FileInstallStatus,
    InstallReport,
    SkillFile,
    Source,
    SourceBundle,
    Tool,
)
from skill_bundles.sources.registry import SourceRegistry
from skill_bundles.tools.mapper import destination
from skill_bundles.utils import is_under

logger = logging.getLogger(__name__)


def _write_file(path: Path, content: str) -> FileInstallStatus:
    existed = path.exists()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
    return FileInstallStatus.OVERWRITTEN if existed else FileInstallStatus.WRITTEN


def _failed(item: SkillFile, target: Path, reason: str) -> FileInstallResult:
    return FileInstallResult(
        content_type=item.content_type,
        name=item.name,
        path=target,
        status=FileInstallStatus.FAILED,
        reason=reason,
    )


def install_bundle(
    bundle: Bundle,
    tool: Tool,
    install_root: Path,
    content_types: Optional[Iterable[ContentType]] = None,
    source_label: str = "",
) -> InstallReport:
    """Install every file of ``bundle`` whose type passes the filter.

    Existing destinations are overwritten. A failing file is reported and
    the remaining files are still written; nothing is rolled back.
    """
    allowed = set(content_types) if content_types is not None else set(ContentType)
    report = InstallReport(bundle=bundle.name, tool=tool)
    recorded: list[ManifestFile] = []

    for item in bundle.files:
        if item.content_type not in allowed:
            continue
        mapped = destination(tool, item.content_type, bundle.name, item.name)
        target = mapped.resolve(install_root)
        if not is_under(target, install_root):
            logger.warning("refusing to write %s outside %s", target, install_root)
            report.results.append(
                _failed(item, target, f"destination escapes {install_root}")
            )
            continue
        try:
            status = _write_file(target, mapped.transform(item.content))
        except OSError as exc:
            logger.warning("failed to write %s: %s", target, exc)
            report.results.append(_failed(item, target, str(exc)))
            continue

        logger.debug("%s %s", status.value, target)
        report.results.append(
            FileInstallResult(
                content_type=item.content_type,
                name=item.name,
                path=target,
                status=status,
            )
        )
        recorded.append(
            ManifestFile(
                path=mapped.relative_path.as_posix(),
                content_type=item.content_type,
                name=item.name,
            )
        )

    if recorded:
        try:
            manifest = InstallManifest.load(tool, install_root)
            manifest.record_install(bundle.name, source_label, recorded)
            manifest.save(tool, install_root)
        except OSError as exc:
            logger.warning("could not update install manifest: %s", exc)
    return report


class BundleInstaller:
    def __init__(self, registry: SourceRegistry) -> None:
        self._registry = registry

    def install_by_name(
        self,
        name: str,
        tool: Tool,
        install_root: Path,
        content_types: Optional[Iterable[ContentType]] = None,
        source_ident: Optional[str] = None,
    ) -> InstallReport:
        found: SourceBundle = self._registry.find_bundle(name, source_ident=source_ident)
        return install_bundle(
            found.bundle,
            tool,
            install_root,
            content_types=content_types,
            source_label=self._registry.display_source(found.source),
        )

    def install_source(
        self,
        source: Source,
        tool: Tool,
        install_root: Path,
        content_types: Optional[Iterable[ContentType]] = None,
    ) -> list[InstallReport]:
        result = self._registry.scan(source)
        label = self._registry.display_source(source)
        return [
            install_bundle(
                bundle, tool, install_root, content_types=content_types, source_label=label
            )
            for bundle in result.bundles
        ]

    def refresh_installed(
        self,
        tool: Tool,
        install_root: Path,
        known_bundles: Optional[Iterable[str]] = None,
    ) -> tuple[list[InstallReport], list[str]]:
        """Re-install each bundle installed for ``tool`` from its current source.

        Only the content types already installed are written again. Bundles
        that can no longer be found are returned as failure messages.
        """
        known = set(known_bundles or ())
        entries = discover(install_root, known_bundles=known, tools=[tool])
        reports: list[InstallReport] = []
        failures: list[str] = []
        for name in installed_bundle_names(install_root, tool, known):
            types = {entry.content_type for entry in entries if entry.bundle == name}
            try:
                reports.append(
                    self.install_by_name(
                        name, tool, install_root, content_types=types or None
                    )
                )
            except SkillBundleError as exc:
                logger.warning("could not refresh %s: %s", name, exc)
                failures.append(str(exc))
        return reports, failures
