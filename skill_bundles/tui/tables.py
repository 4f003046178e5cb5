from collections import Counter

from rich.table import Column, Table

from skill_bundles.models import (
    ContentType,
    InstallReport,
    InstalledEntry,
    RemovalReport,
    Source,
    SourceBundle,
)
from skill_bundles.tools.catalog import tool_label
from skill_bundles.tui.enums import INSTALL_STATUS_STYLE, UIStyle
from skill_bundles.utils import compact_home_path


def _type_counts(item: SourceBundle) -> str:
    chips = []
    for content_type in ContentType:
        count = len(item.bundle.files_of_type(content_type))
        if count:
            chips.append(f"{content_type.dir_name}={count}")
    return "  ".join(chips) or "none"


class BundleTable:
    @staticmethod
    def bundles_table(items: list[SourceBundle]) -> Table:
        table = Table(
            Column(header="Bundle", width=28),
            Column(header="Format", width=10),
            Column(header="Contents", overflow="fold"),
            Column(header="Source", overflow="ellipsis", max_width=42),
            Column(header="Description", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for item in items:
            table.add_row(
                item.bundle.name,
                item.bundle.format.value,
                _type_counts(item),
                item.source.display,
                item.bundle.metadata.description,
            )
        return table


class SourceTable:
    @staticmethod
    def sources_table(items: list[Source]) -> Table:
        table = Table(
            Column(header="#", width=3, justify="right"),
            Column(header="Name", width=20),
            Column(header="Type", width=6),
            Column(header="Location", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for item in items:
            table.add_row(
                str(item.priority + 1),
                item.name or "",
                item.kind.value,
                compact_home_path(item.location),
            )
        return table


class InstallTable:
    @staticmethod
    def summary_block(report: InstallReport):
        counts = Counter(item.status.value for item in report.results)
        chips = [f"{key}={value}" for key, value in sorted(counts.items()) if value > 0]
        if not chips:
            chips = ["none"]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Bundle", report.bundle)
        table.add_row("Tool", tool_label(report.tool))
        table.add_row("Files", str(len(report.results)))
        table.add_row("Statuses", "  ".join(chips))
        return table

    @staticmethod
    def files_table(report: InstallReport) -> Table:
        table = Table(
            Column(header="Type", width=8),
            Column(header="Status", width=12),
            Column(header="Target", overflow="ellipsis"),
            Column(header="Reason", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for item in report.results:
            style = INSTALL_STATUS_STYLE.get(item.status, UIStyle.WHITE.value)
            table.add_row(
                item.content_type.value,
                f"[{style}]{item.status.value}[/{style}]",
                compact_home_path(item.path),
                item.reason,
            )
        return table


class InstalledTable:
    @staticmethod
    def entries_table(entries: list[InstalledEntry]) -> Table:
        table = Table(
            Column(header="Type", width=8),
            Column(header="Bundle", width=24),
            Column(header="Name", width=24),
            Column(header="Path", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for entry in entries:
            table.add_row(
                entry.content_type.value,
                entry.bundle or "[dim](unknown)[/dim]",
                entry.name,
                compact_home_path(entry.path),
            )
        return table


class RemovalTable:
    @staticmethod
    def removed_table(report: RemovalReport) -> Table:
        table = Table(
            Column(header="Tool", width=10),
            Column(header="Type", width=8),
            Column(header="Name", width=24),
            Column(header="Path", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for entry in report.removed:
            table.add_row(
                tool_label(entry.tool),
                entry.content_type.value,
                entry.name,
                compact_home_path(entry.path),
            )
        return table
