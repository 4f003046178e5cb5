from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console

from skill_bundles.config.repository import ConfigRepository
from skill_bundles.convert import convert_file
from skill_bundles.discovery import discover, remove, remove_all
from skill_bundles.errors import SkillBundleError
from skill_bundles.installer import BundleInstaller
from skill_bundles.logs import setup_logging
from skill_bundles.models import ContentType, RemovalReport, Source, SourceKind, Tool
from skill_bundles.sources.materializer import GitMaterializer
from skill_bundles.sources.registry import SourceRegistry
from skill_bundles.tools.mapper import install_root_for
from skill_bundles.tui import SkillBundlesConsoleUI
from skill_bundles.utils import expand_user_path


TOOL_VALUES = [tool.value for tool in Tool]
TYPE_VALUES = [content_type.value for content_type in ContentType]


def _tool_option(help_text: str) -> Any:
    return click.option(
        "--tool",
        "-t",
        type=click.Choice(TOOL_VALUES, case_sensitive=False),
        default=None,
        help=help_text,
    )


def _type_option() -> Any:
    return click.option(
        "--type",
        "content_types",
        multiple=True,
        type=click.Choice(TYPE_VALUES, case_sensitive=False),
        help="Limit to these content types (repeatable).",
    )


def _global_option() -> Any:
    return click.option(
        "--global",
        "is_global",
        is_flag=True,
        default=False,
        help="Use the tool's user-level directory instead of the current one.",
    )


def _config_from_obj(obj: Dict[str, Any]) -> ConfigRepository:
    return obj.get("config") or ConfigRepository()


def _registry_from_obj(obj: Dict[str, Any]) -> SourceRegistry:
    config = _config_from_obj(obj)
    try:
        sources = config.load_sources()
    except SkillBundleError as exc:
        raise click.ClickException(str(exc))
    return SourceRegistry(sources, materializer=obj.get("materializer"))


def _resolve_tool(obj: Dict[str, Any], tool: Optional[str]) -> Tool:
    if tool:
        return Tool(tool.lower())
    try:
        return _config_from_obj(obj).default_tool()
    except SkillBundleError as exc:
        raise click.ClickException(str(exc))


def _content_types(values: tuple[str, ...]) -> Optional[list[ContentType]]:
    if not values:
        return None
    return [ContentType(value.lower()) for value in values]


def _split_reference(reference: str, source: Optional[str]) -> tuple[str, Optional[str]]:
    if source is None and "/" in reference:
        source_ident, name = reference.rsplit("/", 1)
        if source_ident and name:
            return name, source_ident
    return reference, source


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug details.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Install skill bundles into Claude, OpenCode and Cursor layouts."""
    setup_logging(verbose)
    ctx.ensure_object(dict)


@cli.command("list", help="List bundles across configured sources.")
@click.pass_obj
def list_bundles(obj: Dict[str, Any]) -> None:
    ui = SkillBundlesConsoleUI(Console())
    registry = _registry_from_obj(obj)
    try:
        listing = registry.list_bundles(strict=True)
    except SkillBundleError as exc:
        raise click.ClickException(str(exc))

    ui.render_bundles(listing)

    if listing.errors:
        raise click.exceptions.Exit(1)


@cli.command(help="Install a bundle (NAME or SOURCE/NAME) for a tool.")
@click.argument("bundle")
@_tool_option("Target tool (defaults to the configured default_tool).")
@_type_option()
@_global_option()
@click.option("--source", "-s", default=None, help="Only look in this source.")
@click.pass_obj
def install(
    obj: Dict[str, Any],
    bundle: str,
    tool: Optional[str],
    content_types: tuple[str, ...],
    is_global: bool,
    source: Optional[str],
) -> None:
    ui = SkillBundlesConsoleUI(Console())
    registry = _registry_from_obj(obj)
    target_tool = _resolve_tool(obj, tool)
    name, source_ident = _split_reference(bundle, source)

    if source_ident is not None and registry.get_source(source_ident) is None:
        raise click.ClickException(f"Source not configured: {source_ident}")

    installer = BundleInstaller(registry)
    try:
        report = installer.install_by_name(
            name,
            target_tool,
            install_root_for(target_tool, is_global),
            content_types=_content_types(content_types),
            source_ident=source_ident,
        )
    except SkillBundleError as exc:
        raise click.ClickException(str(exc))

    ui.render_install_report(report)

    if report.failed:
        raise click.exceptions.Exit(1)


@cli.command(help="Show installed bundles grouped by tool.")
@_tool_option("Only show this tool.")
@_global_option()
@click.pass_obj
def installed(obj: Dict[str, Any], tool: Optional[str], is_global: bool) -> None:
    ui = SkillBundlesConsoleUI(Console())
    registry = _registry_from_obj(obj)
    known = registry.known_bundle_names()
    tools = [Tool(tool.lower())] if tool else list(Tool)

    entries = []
    roots = []
    for item in tools:
        root = install_root_for(item, is_global)
        entries.extend(discover(root, known_bundles=known, tools=[item]))
        if root not in roots:
            roots.append(root)

    ui.render_installed(entries, ", ".join(str(root) for root in roots))


@cli.command("rm", help="Remove an installed bundle.")
@click.argument("bundle")
@_tool_option("Only remove from this tool.")
@_type_option()
@_global_option()
@click.pass_obj
def rm(
    obj: Dict[str, Any],
    bundle: str,
    tool: Optional[str],
    content_types: tuple[str, ...],
    is_global: bool,
) -> None:
    ui = SkillBundlesConsoleUI(Console())
    registry = _registry_from_obj(obj)
    known = registry.known_bundle_names()
    tools = [Tool(tool.lower())] if tool else list(Tool)

    report = RemovalReport(bundle=bundle)
    for item in tools:
        tool_report = remove(
            install_root_for(item, is_global),
            bundle,
            tool=item,
            content_types=_content_types(content_types),
            known_bundles=known,
        )
        report.removed.extend(tool_report.removed)
        report.failures.extend(tool_report.failures)

    ui.render_removal(report)

    if report.failures:
        raise click.exceptions.Exit(1)


@cli.group(help="Manage bundle sources.")
def sources() -> None:
    pass


@sources.command("list", help="List configured sources in priority order.")
@click.pass_obj
def sources_list(obj: Dict[str, Any]) -> None:
    ui = SkillBundlesConsoleUI(Console())
    ui.render_sources(_registry_from_obj(obj).sources)


@sources.command("add", help="Add a local directory or git URL as a source.")
@click.argument("location")
@click.option("--name", "-n", default=None, help="Short name for the source.")
@click.pass_obj
def sources_add(obj: Dict[str, Any], location: str, name: Optional[str]) -> None:
    ui = SkillBundlesConsoleUI(Console())
    config = _config_from_obj(obj)
    try:
        source = config.add_source(location, name=name)
    except (ValueError, SkillBundleError) as exc:
        raise click.ClickException(str(exc))
    if source.kind == SourceKind.LOCAL and not expand_user_path(source.location).is_dir():
        ui.render_problems([], [f"Source path does not exist yet: {source.location}"])
    ui.render_source_saved(source)


@sources.command("remove", help="Remove a source by path, URL or name.")
@click.argument("ident")
@click.pass_obj
def sources_remove(obj: Dict[str, Any], ident: str) -> None:
    ui = SkillBundlesConsoleUI(Console())
    config = _config_from_obj(obj)
    registry = _registry_from_obj(obj)
    existing = registry.get_source(ident)
    try:
        removed = config.remove_source(ident)
    except SkillBundleError as exc:
        raise click.ClickException(str(exc))
    if not removed:
        raise click.ClickException(f"Source not found: {ident}")
    if existing is None:
        existing = Source(kind=SourceKind.LOCAL, location=ident, priority=0)
    ui.render_source_saved(existing, removed=True)


@cli.command(help="Refresh git sources, then re-install installed bundles.")
@_tool_option("Tool whose bundles are re-installed (defaults to default_tool).")
@_global_option()
@click.option(
    "--sources-only",
    is_flag=True,
    default=False,
    help="Only refresh git sources; leave installed bundles alone.",
)
@click.pass_obj
def update(
    obj: Dict[str, Any], tool: Optional[str], is_global: bool, sources_only: bool
) -> None:
    ui = SkillBundlesConsoleUI(Console())
    registry = _registry_from_obj(obj)
    materializer = obj.get("materializer") or GitMaterializer()

    updated: list[str] = []
    failures: list[str] = []
    for source in registry.sources:
        if source.kind != SourceKind.GIT:
            continue
        try:
            materializer.refresh(source.location)
        except SkillBundleError as exc:
            failures.append(str(exc))
            continue
        updated.append(source.display)

    ui.render_update(updated, failures)

    refresh_failed = False
    if not sources_only:
        target_tool = _resolve_tool(obj, tool)
        reports, missing = BundleInstaller(registry).refresh_installed(
            target_tool,
            install_root_for(target_tool, is_global),
            known_bundles=registry.known_bundle_names(),
        )
        ui.render_refresh(reports, missing)
        refresh_failed = bool(missing) or any(report.failed for report in reports)

    if failures or refresh_failed:
        raise click.exceptions.Exit(1)


@cli.command(help="Remove every installed bundle for a tool.")
@_tool_option("Only clean this tool.")
@_global_option()
@click.confirmation_option(prompt="Remove all installed bundles?")
@click.pass_obj
def clean(obj: Dict[str, Any], tool: Optional[str], is_global: bool) -> None:
    ui = SkillBundlesConsoleUI(Console())
    registry = _registry_from_obj(obj)
    known = registry.known_bundle_names()
    tools = [Tool(tool.lower())] if tool else list(Tool)

    reports: list[RemovalReport] = []
    roots: list[Path] = []
    for item in tools:
        root = install_root_for(item, is_global)
        reports.extend(remove_all(root, tool=item, known_bundles=known))
        if root not in roots:
            roots.append(root)

    ui.render_clean(reports, ", ".join(str(root) for root in roots))

    if any(report.failures for report in reports):
        raise click.exceptions.Exit(1)


@cli.command(help="Convert a rule file to a command file, or back with --to-rule.")
@click.argument(
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--to-rule", is_flag=True, default=False, help="Produce a rule file.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write here instead of printing to stdout.",
)
def convert(source: Path, to_rule: bool, output: Optional[Path]) -> None:
    try:
        converted = convert_file(source, to_rule_format=to_rule)
    except SkillBundleError as exc:
        raise click.ClickException(str(exc))

    if output is None:
        click.echo(converted, nl=False)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(converted.encode("utf-8"))
    except OSError as exc:
        raise click.ClickException(f"Cannot write {output}: {exc}")
    SkillBundlesConsoleUI(Console()).render_converted(source, output)


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
