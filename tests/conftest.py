import sys
import json
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / ".cache"))
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def write_text():
    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    path = tmp_path / "skills-src"
    path.mkdir()
    return path


@pytest.fixture
def flat_bundle(source_root: Path, write_text) -> Path:
    bundle = source_root / "demo"
    write_text(bundle / "skills" / "helper.md", "# Helper\r\n\r\nHelp out.\r\n")
    write_text(bundle / "agents" / "reviewer.md", "Review carefully.\n")
    write_text(bundle / "commands" / "commit.md", "Write a commit message.\n")
    write_text(bundle / "rules" / "style.md", "---\ndescription: style\n---\nBe terse.\n")
    return bundle


@pytest.fixture
def anthropic_source(tmp_path: Path, write_text) -> Path:
    root = tmp_path / "anthropic-skills"
    write_text(
        root / "skills" / "pdf" / "SKILL.md",
        "---\nname: pdf-tools\ndescription: Work with PDFs\n---\n# PDF\n",
    )
    write_text(root / "skills" / "xlsx" / "SKILL.md", "# Spreadsheets\n")
    return root


@pytest.fixture
def config_root(tmp_path: Path) -> Path:
    return tmp_path / ".config" / "skill-bundles"


@pytest.fixture
def configure(config_root: Path, write_json):
    def _configure(sources: list[dict], default_tool: str = "claude") -> Path:
        path = config_root / "config.json"
        write_json(path, {"default_tool": default_tool, "sources": sources})
        return path

    return _configure


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("XDG_CONFIG_HOME", str(tmp_path / ".config"))
            env.setdefault("XDG_CACHE_HOME", str(tmp_path / ".cache"))
            env.setdefault("COLUMNS", "160")
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()
