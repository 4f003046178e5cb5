"""Panels whose border colour follows the outcome they report."""

from pathlib import Path
from typing import Iterable, Optional

from rich.console import RenderableType
from rich.panel import Panel

from skill_bundles.models import BundleListing, InstallReport, RemovalReport
from skill_bundles.tui.enums import UIStyle


def install_style(report: InstallReport) -> str:
    if not report.failed:
        return UIStyle.GREEN.value
    # Some files landed, some did not.
    if report.succeeded:
        return UIStyle.YELLOW.value
    return UIStyle.RED.value


def removal_style(report: RemovalReport) -> str:
    if report.failures:
        return UIStyle.YELLOW.value if report.removed else UIStyle.RED.value
    if report.not_found:
        return UIStyle.YELLOW.value
    return UIStyle.GREEN.value


def listing_style(listing: BundleListing) -> str:
    if listing.errors:
        return UIStyle.RED.value
    if not listing.bundles:
        return UIStyle.YELLOW.value
    return UIStyle.BLUE.value


def section(
    title: str,
    body: RenderableType,
    style: str = UIStyle.BLUE.value,
    subtitle: Optional[str] = None,
) -> Panel:
    return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))


def bullet_section(title: str, items: Iterable[object], style: str) -> Panel:
    """One ``- item`` line per entry, with the home directory shown as ``~``."""
    home = f"{Path.home()}/"
    lines = [f"- {str(item).replace(home, '~/')}" for item in items]
    return section(title, "\n".join(lines), style=style)
