import io
from pathlib import Path
from typing import Optional

from skill_bundles.__main__ import cli, main
from skill_bundles.config.repository import ConfigRepository
from skill_bundles.errors import SourceUnavailableError


class RecordingMaterializer:
    def __init__(self, failing: tuple[str, ...] = ()) -> None:
        self.failing = failing
        self.refreshed: list[str] = []
        self.materialized: list[str] = []

    def materialize(self, url: str) -> Path:
        self.materialized.append(url)
        raise SourceUnavailableError(url, "offline")

    def refresh(self, url: str) -> Path:
        if url in self.failing:
            raise SourceUnavailableError(url, "offline")
        self.refreshed.append(url)
        return Path("/unused")

    def cached_path(self, url: str) -> Optional[Path]:
        return None


def test_sources_add_list_remove(tmp_path: Path, cli_runner) -> None:
    skills = tmp_path / "my-skills"
    skills.mkdir()

    add_result = cli_runner.invoke(cli, ["sources", "add", str(skills), "--name", "mine"])
    assert add_result.exit_code == 0
    assert "Source added: mine" in add_result.output

    list_result = cli_runner.invoke(cli, ["sources", "list"])
    assert list_result.exit_code == 0
    assert "mine" in list_result.output
    assert "~/.claude-skills" in list_result.output

    remove_result = cli_runner.invoke(cli, ["sources", "remove", "mine"])
    assert remove_result.exit_code == 0
    assert "Source removed: mine" in remove_result.output
    assert [source.location for source in ConfigRepository().load_sources()] == [
        "~/.claude-skills"
    ]


def test_sources_add_git_url(cli_runner) -> None:
    result = cli_runner.invoke(
        cli, ["sources", "add", "https://github.com/org/skills.git"]
    )

    assert result.exit_code == 0
    assert ConfigRepository().load_sources()[-1].kind.value == "git"


def test_sources_add_missing_path_warns(tmp_path: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["sources", "add", str(tmp_path / "later")])

    assert result.exit_code == 0
    assert "does not exist yet" in result.output


def test_sources_add_duplicate(tmp_path: Path, cli_runner) -> None:
    cli_runner.invoke(cli, ["sources", "add", str(tmp_path)])

    result = cli_runner.invoke(cli, ["sources", "add", str(tmp_path)])

    assert result.exit_code != 0
    assert "already configured" in result.output


def test_sources_remove_nonexistent(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["sources", "remove", "ghost"])

    assert result.exit_code != 0
    assert "Source not found: ghost" in result.output


def test_update_refreshes_git_sources(project_dir: Path, configure, cli_runner) -> None:
    url = "https://example.com/org/skills.git"
    configure([{"type": "local", "path": "~/mine"}, {"type": "git", "url": url}])
    materializer = RecordingMaterializer()

    result = cli_runner.invoke(cli, ["update"], obj={"materializer": materializer})

    assert result.exit_code == 0
    assert materializer.refreshed == [url]
    assert url in result.output


def test_update_reports_failures(project_dir: Path, configure, cli_runner) -> None:
    url = "https://example.com/org/skills.git"
    configure([{"type": "git", "url": url}])

    result = cli_runner.invoke(
        cli, ["update"], obj={"materializer": RecordingMaterializer(failing=(url,))}
    )

    assert result.exit_code == 1
    assert "Source unavailable" in result.output


def test_update_without_git_sources(project_dir: Path, configure, cli_runner) -> None:
    configure([])

    result = cli_runner.invoke(cli, ["update"])

    assert result.exit_code == 0
    assert "No git sources configured" in result.output
    assert "No installed bundles to refresh" in result.output


def test_update_sources_only_skips_refresh(
    project_dir: Path, configure, cli_runner
) -> None:
    configure([])

    result = cli_runner.invoke(cli, ["update", "--sources-only"])

    assert result.exit_code == 0
    assert "No installed bundles to refresh" not in result.output


def test_installed_and_rm_never_clone_git_sources(
    project_dir: Path, configure, cli_runner
) -> None:
    configure([{"type": "git", "url": "https://example.com/org/skills.git"}])
    materializer = RecordingMaterializer()

    listed = cli_runner.invoke(cli, ["installed"], obj={"materializer": materializer})
    removed = cli_runner.invoke(cli, ["rm", "demo"], obj={"materializer": materializer})

    assert listed.exit_code == 0
    assert removed.exit_code == 0
    assert materializer.materialized == []


def test_list_aborts_on_unavailable_source(configure, cli_runner) -> None:
    configure([{"type": "git", "url": "https://example.com/org/skills.git"}])

    result = cli_runner.invoke(
        cli, ["list"], obj={"materializer": RecordingMaterializer()}
    )

    assert result.exit_code != 0
    assert "Source unavailable" in result.output


def test_main_maps_click_errors_to_exit_code_two(monkeypatch) -> None:
    monkeypatch.setattr("sys.argv", ["skill-bundles", "sources", "remove", "ghost"])
    assert main() == 2


def test_main_returns_zero_on_success(monkeypatch) -> None:
    monkeypatch.setattr("sys.argv", ["skill-bundles", "sources", "list"])
    assert main() == 0


def test_main_returns_one_when_clean_is_declined(
    project_dir: Path, monkeypatch, configure
) -> None:
    configure([])
    monkeypatch.setattr("sys.argv", ["skill-bundles", "clean"])
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))

    assert main() == 1
