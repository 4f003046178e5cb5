"""Static per-tool tables: destination templates and install anchors."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Final

from skill_bundles.models import ContentType, Tool
from skill_bundles.utils import xdg_dir


@dataclass(frozen=True)
class ToolMetadata:
    tool: Tool
    label: str
    project_dir_name: str
    global_root: Callable[[], Path]


@dataclass(frozen=True)
class DestinationRule:
    """One cell of the tool x content type matrix.

    ``template`` is relative to the install root and may use ``{bundle}``,
    ``{name}`` and ``{compound}`` placeholders.
    """

    template: str
    requires_frontmatter: bool = False

    @property
    def destination_root(self) -> str:
        return self.template.split("/{", 1)[0]

    @property
    def per_item_dir(self) -> bool:
        return self.template.endswith(("/SKILL.md", "/RULE.md"))


TOOL_CATALOG: Final[dict[Tool, ToolMetadata]] = {
    Tool.CLAUDE: ToolMetadata(
        tool=Tool.CLAUDE,
        label="Claude",
        project_dir_name=".claude",
        global_root=lambda: Path.home(),
    ),
    Tool.OPENCODE: ToolMetadata(
        tool=Tool.OPENCODE,
        label="OpenCode",
        project_dir_name=".opencode",
        global_root=lambda: xdg_dir("XDG_CONFIG_HOME", ".config") / "opencode",
    ),
    Tool.CURSOR: ToolMetadata(
        tool=Tool.CURSOR,
        label="Cursor",
        project_dir_name=".cursor",
        global_root=lambda: Path.home(),
    ),
}


DESTINATION_RULES: Final[dict[tuple[Tool, ContentType], DestinationRule]] = {
    (Tool.CLAUDE, ContentType.SKILL): DestinationRule(".claude/skills/{bundle}/{name}.md"),
    (Tool.CLAUDE, ContentType.AGENT): DestinationRule(".claude/agents/{bundle}/{name}.md"),
    (Tool.CLAUDE, ContentType.COMMAND): DestinationRule(".claude/commands/{bundle}/{name}.md"),
    (Tool.CLAUDE, ContentType.RULE): DestinationRule(".claude/rules/{bundle}/{name}.md"),
    (Tool.OPENCODE, ContentType.SKILL): DestinationRule(
        ".opencode/skill/{compound}/SKILL.md", requires_frontmatter=True
    ),
    (Tool.OPENCODE, ContentType.AGENT): DestinationRule(".opencode/agent/{compound}.md"),
    (Tool.OPENCODE, ContentType.COMMAND): DestinationRule(".opencode/command/{compound}.md"),
    (Tool.OPENCODE, ContentType.RULE): DestinationRule(
        ".opencode/rule/{compound}/RULE.md", requires_frontmatter=True
    ),
    (Tool.CURSOR, ContentType.SKILL): DestinationRule(
        ".cursor/skills/{compound}/SKILL.md", requires_frontmatter=True
    ),
    (Tool.CURSOR, ContentType.AGENT): DestinationRule(".cursor/rules/{compound}/RULE.md"),
    (Tool.CURSOR, ContentType.COMMAND): DestinationRule(".cursor/rules/{compound}/RULE.md"),
    (Tool.CURSOR, ContentType.RULE): DestinationRule(
        ".cursor/rules/{compound}/RULE.md", requires_frontmatter=True
    ),
}


def tool_metadata(tool: Tool | str) -> ToolMetadata:
    tool_id = tool if isinstance(tool, Tool) else Tool(tool)
    return TOOL_CATALOG[tool_id]


def tool_label(tool: Tool | str) -> str:
    return tool_metadata(tool).label


def destination_rule(tool: Tool, content_type: ContentType) -> DestinationRule:
    return DESTINATION_RULES[(tool, content_type)]


def destination_roots(tool: Tool) -> list[tuple[ContentType, DestinationRule]]:
    return [
        (content_type, rule)
        for (rule_tool, content_type), rule in DESTINATION_RULES.items()
        if rule_tool == tool
    ]
