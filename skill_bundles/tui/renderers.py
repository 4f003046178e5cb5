from pathlib import Path

from rich.console import Console

from skill_bundles.discovery import group_by_tool
from skill_bundles.models import (
    BundleListing,
    InstallReport,
    InstalledEntry,
    RemovalReport,
    Source,
)
from skill_bundles.tools.catalog import tool_label
from skill_bundles.tui.enums import UIStyle
from skill_bundles.tui.sections import (
    bullet_section,
    install_style,
    listing_style,
    removal_style,
    section,
)
from skill_bundles.tui.tables import (
    BundleTable,
    InstalledTable,
    InstallTable,
    RemovalTable,
    SourceTable,
)
from skill_bundles.utils import compact_home_path


class SkillBundlesConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_problems(self, errors: list[Exception], skipped: list[str]) -> None:
        if errors:
            self.console.print(bullet_section("errors", errors, style=UIStyle.RED.value))
        if skipped:
            self.console.print(
                bullet_section("skipped", skipped, style=UIStyle.YELLOW.value)
            )

    def render_bundles(self, listing: BundleListing) -> None:
        if listing.bundles:
            body = BundleTable.bundles_table(listing.bundles)
        else:
            body = (
                "No bundles found in configured sources.\n"
                "- skill-bundles sources add <path-or-url>"
            )
        self.console.print(section("bundles", body, style=listing_style(listing)))
        self.render_problems(listing.errors, listing.skipped)

    def render_install_report(self, report: InstallReport) -> None:
        self.console.print(
            section(
                "install overview",
                InstallTable.summary_block(report),
                style=install_style(report),
            )
        )
        if report.results:
            self.console.print(
                section(
                    "files", InstallTable.files_table(report), style=UIStyle.CYAN.value
                )
            )
        else:
            self.console.print(
                section(
                    "files",
                    "Nothing to install for the selected content types.",
                    style=UIStyle.DIM.value,
                )
            )

    def render_installed(self, entries: list[InstalledEntry], root: str) -> None:
        if not entries:
            self.console.print(
                section(
                    "installed",
                    f"No installed bundles under {compact_home_path(root)}.",
                    style=UIStyle.YELLOW.value,
                )
            )
            return

        for tool, by_type in group_by_tool(entries).items():
            rows = [entry for items in by_type.values() for entry in items]
            self.console.print(
                section(
                    tool_label(tool),
                    InstalledTable.entries_table(rows),
                    subtitle=compact_home_path(root),
                )
            )

    def render_removal(self, report: RemovalReport) -> None:
        style = removal_style(report)
        if report.not_found:
            self.console.print(
                section(
                    "remove",
                    f"Nothing installed for bundle: [bold]{report.bundle}[/bold]",
                    style=style,
                )
            )
            return

        if report.removed:
            self.console.print(
                section(
                    f"removed {report.bundle}",
                    RemovalTable.removed_table(report),
                    style=style,
                )
            )
        if report.failures:
            self.console.print(
                bullet_section("failures", report.failures, style=UIStyle.RED.value)
            )

    def render_clean(self, reports: list[RemovalReport], root: str) -> None:
        if not reports:
            self.console.print(
                section(
                    "clean",
                    f"No installed bundles under {compact_home_path(root)}.",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        for report in reports:
            self.render_removal(report)

    def render_sources(self, sources: list[Source]) -> None:
        if not sources:
            self.console.print(
                section("sources", "No sources configured.", style=UIStyle.YELLOW.value)
            )
            return
        self.console.print(section("sources", SourceTable.sources_table(sources)))

    def render_source_saved(self, source: Source, removed: bool = False) -> None:
        verb = "removed" if removed else "added"
        border_style = UIStyle.YELLOW.value if removed else UIStyle.GREEN.value
        self.console.print(
            section(
                "source",
                f"Source {verb}: [bold]{source.display}[/bold]\n"
                f"{compact_home_path(source.location)}",
                style=border_style,
            )
        )

    def render_update(self, updated: list[str], failures: list[str]) -> None:
        if updated:
            self.console.print(
                bullet_section("update", updated, style=UIStyle.GREEN.value)
            )
        elif not failures:
            self.console.print(
                section("update", "No git sources configured.", style=UIStyle.DIM.value)
            )
        if failures:
            self.console.print(
                bullet_section("failures", failures, style=UIStyle.RED.value)
            )

    def render_refresh(self, reports: list[InstallReport], failures: list[str]) -> None:
        if not reports and not failures:
            self.console.print(
                section(
                    "refresh",
                    "No installed bundles to refresh.",
                    style=UIStyle.DIM.value,
                )
            )
        for report in reports:
            self.render_install_report(report)
        if failures:
            self.console.print(
                bullet_section("not refreshed", failures, style=UIStyle.RED.value)
            )

    def render_converted(self, source: Path, output: Path) -> None:
        self.console.print(
            section(
                "convert",
                f"Converted {compact_home_path(source)} -> "
                f"[bold]{compact_home_path(output)}[/bold]",
                style=UIStyle.GREEN.value,
            )
        )
