from typing import Final


APP_NAME: Final[str] = "skill-bundles"

SKILL_FILENAME: Final[str] = "SKILL.md"
MARKDOWN_SUFFIX: Final[str] = ".md"

RESOURCES_DIRNAME: Final[str] = "resources"
META_FILENAMES: Final[tuple[str, ...]] = ("meta.yaml", "meta.yml")
META_REQUIRED_FIELDS: Final[tuple[str, ...]] = ("name", "author")

INSTALL_MANIFEST_FILENAME: Final[str] = ".skill-bundles.json"
CONFIG_FILENAME: Final[str] = "config.json"
DEFAULT_SOURCE_PATH: Final[str] = "~/.claude-skills"

SKIPPED_PREFIXES: Final[tuple[str, ...]] = (".", "_")
SOURCE_IGNORED_DIRS: Final[tuple[str, ...]] = ("shell", "node_modules")
