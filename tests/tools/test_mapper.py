from pathlib import Path

import pytest

from skill_bundles.models import ContentType, Tool
from skill_bundles.tools.catalog import destination_rule, tool_label
from skill_bundles.tools.mapper import (
    compound_name,
    destination,
    identity,
    install_root_for,
    split_compound_name,
)


@pytest.mark.parametrize(
    ("tool", "content_type", "expected"),
    [
        (Tool.CLAUDE, ContentType.SKILL, ".claude/skills/demo/helper.md"),
        (Tool.CLAUDE, ContentType.AGENT, ".claude/agents/demo/helper.md"),
        (Tool.CLAUDE, ContentType.COMMAND, ".claude/commands/demo/helper.md"),
        (Tool.CLAUDE, ContentType.RULE, ".claude/rules/demo/helper.md"),
        (Tool.OPENCODE, ContentType.SKILL, ".opencode/skill/demo-helper/SKILL.md"),
        (Tool.OPENCODE, ContentType.AGENT, ".opencode/agent/demo-helper.md"),
        (Tool.OPENCODE, ContentType.COMMAND, ".opencode/command/demo-helper.md"),
        (Tool.OPENCODE, ContentType.RULE, ".opencode/rule/demo-helper/RULE.md"),
        (Tool.CURSOR, ContentType.SKILL, ".cursor/skills/demo-helper/SKILL.md"),
        (Tool.CURSOR, ContentType.AGENT, ".cursor/rules/demo-helper/RULE.md"),
        (Tool.CURSOR, ContentType.COMMAND, ".cursor/rules/demo-helper/RULE.md"),
        (Tool.CURSOR, ContentType.RULE, ".cursor/rules/demo-helper/RULE.md"),
    ],
)
def test_destination_matrix(tool: Tool, content_type: ContentType, expected: str) -> None:
    mapped = destination(tool, content_type, "demo", "helper")
    assert mapped.relative_path == Path(expected)
    assert mapped.root is None


def test_file_name_extension_is_stripped() -> None:
    mapped = destination(Tool.CLAUDE, ContentType.SKILL, "demo", "helper.md")
    assert mapped.relative_path == Path(".claude/skills/demo/helper.md")


def test_compound_collapses_when_name_equals_bundle() -> None:
    assert compound_name("pdf-tools", "pdf-tools") == "pdf-tools"
    assert compound_name("demo", "helper") == "demo-helper"
    mapped = destination(Tool.OPENCODE, ContentType.SKILL, "pdf-tools", "pdf-tools")
    assert mapped.relative_path == Path(".opencode/skill/pdf-tools/SKILL.md")


def test_claude_transform_is_identity() -> None:
    for content_type in ContentType:
        assert destination(Tool.CLAUDE, content_type, "demo", "helper").transform is identity


@pytest.mark.parametrize(
    ("tool", "content_type"),
    [
        (Tool.OPENCODE, ContentType.SKILL),
        (Tool.OPENCODE, ContentType.RULE),
        (Tool.CURSOR, ContentType.SKILL),
        (Tool.CURSOR, ContentType.RULE),
    ],
)
def test_frontmatter_cells_inject_compound_name(
    tool: Tool, content_type: ContentType
) -> None:
    assert destination_rule(tool, content_type).requires_frontmatter
    mapped = destination(tool, content_type, "demo", "helper")
    assert mapped.transform("Body\n") == "---\nname: demo-helper\n---\nBody\n"


def test_agent_and_command_cells_keep_content() -> None:
    for tool in (Tool.OPENCODE, Tool.CURSOR):
        for content_type in (ContentType.AGENT, ContentType.COMMAND):
            mapped = destination(tool, content_type, "demo", "helper")
            assert mapped.transform("Body\n") == "Body\n"


def test_global_roots(tmp_path: Path) -> None:
    claude = destination(Tool.CLAUDE, ContentType.SKILL, "demo", "helper", is_global=True)
    opencode = destination(Tool.OPENCODE, ContentType.AGENT, "demo", "helper", is_global=True)
    cursor = destination(Tool.CURSOR, ContentType.RULE, "demo", "helper", is_global=True)

    assert claude.resolve(tmp_path / "ignored") == tmp_path / ".claude/skills/demo/helper.md"
    assert opencode.root == tmp_path / ".config" / "opencode"
    assert cursor.root == tmp_path
    assert claude.relative_path == Path(".claude/skills/demo/helper.md")


def test_opencode_global_root_follows_xdg(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    assert install_root_for(Tool.OPENCODE, is_global=True) == tmp_path / "xdg" / "opencode"


def test_local_root_is_working_directory(tmp_path: Path, project_dir: Path) -> None:
    assert install_root_for(Tool.CURSOR, is_global=False) == Path.cwd()
    assert install_root_for(Tool.CLAUDE, False, cwd=tmp_path / "x") == tmp_path / "x"


@pytest.mark.parametrize(
    ("compound", "known", "expected"),
    [
        ("demo-helper", ["demo"], ("demo", "helper")),
        ("my-bundle-helper", ["my-bundle"], ("my-bundle", "helper")),
        ("my-bundle-helper", ["my", "my-bundle"], ("my-bundle", "helper")),
        ("my-bundle-helper", [], ("my", "bundle-helper")),
        ("pdf-tools", ["pdf-tools"], ("pdf-tools", "pdf-tools")),
        ("solo", [], ("solo", "solo")),
    ],
)
def test_split_compound_name(compound: str, known: list[str], expected: tuple[str, str]) -> None:
    assert split_compound_name(compound, known) == expected


def test_tool_labels() -> None:
    assert [tool_label(tool) for tool in Tool] == ["Claude", "OpenCode", "Cursor"]
    assert tool_label("cursor") == "Cursor"
