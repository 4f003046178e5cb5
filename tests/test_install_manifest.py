from pathlib import Path

from skill_bundles.install_manifest import InstallManifest, ManifestFile
from skill_bundles.models import ContentType, Tool


def _file(path: str, name: str = "helper") -> ManifestFile:
    return ManifestFile(path=path, content_type=ContentType.SKILL, name=name)


def test_missing_manifest_is_empty(tmp_path: Path) -> None:
    manifest = InstallManifest.load(Tool.CLAUDE, tmp_path)
    assert manifest.is_empty()
    assert manifest.bundle_names() == []


def test_manifest_path_per_tool(tmp_path: Path) -> None:
    assert InstallManifest.path_for(Tool.OPENCODE, tmp_path) == (
        tmp_path / ".opencode" / ".skill-bundles.json"
    )


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    manifest = InstallManifest()
    manifest.record_install("demo", "~/skills", [_file(".claude/skills/demo/helper.md")])
    manifest.save(Tool.CLAUDE, tmp_path)

    loaded = InstallManifest.load(Tool.CLAUDE, tmp_path)

    assert loaded.bundle_names() == ["demo"]
    assert loaded.lookup(".claude/skills/demo/helper.md") == (
        "demo",
        _file(".claude/skills/demo/helper.md"),
    )
    assert loaded.lookup(".claude/skills/demo/other.md") is None


def test_record_install_upserts_by_path() -> None:
    manifest = InstallManifest()
    manifest.record_install("demo", "a", [_file("x.md"), _file("y.md", "other")])
    manifest.record_install("demo", "b", [_file("x.md", "renamed")])

    entry = manifest.get("demo")
    assert entry is not None
    assert entry.source == "b"
    assert [(item.path, item.name) for item in entry.files] == [
        ("x.md", "renamed"),
        ("y.md", "other"),
    ]


def test_remove_files_drops_empty_bundle() -> None:
    manifest = InstallManifest()
    manifest.record_install("demo", "", [_file("x.md"), _file("y.md")])

    manifest.remove_files("demo", {"x.md"})
    assert manifest.get("demo") is not None
    manifest.remove_files("demo", {"y.md"})
    assert manifest.get("demo") is None


def test_saving_empty_manifest_deletes_file(tmp_path: Path) -> None:
    manifest = InstallManifest()
    manifest.record_install("demo", "", [_file("x.md")])
    manifest.save(Tool.CURSOR, tmp_path)
    assert InstallManifest.path_for(Tool.CURSOR, tmp_path).exists()

    manifest.remove_bundle("demo")
    manifest.save(Tool.CURSOR, tmp_path)
    assert not InstallManifest.path_for(Tool.CURSOR, tmp_path).exists()


def test_corrupt_manifest_reads_as_empty(tmp_path: Path, write_text) -> None:
    write_text(InstallManifest.path_for(Tool.CLAUDE, tmp_path), "{not json")
    assert InstallManifest.load(Tool.CLAUDE, tmp_path).is_empty()


def test_invalid_entries_are_ignored(tmp_path: Path, write_json) -> None:
    write_json(
        InstallManifest.path_for(Tool.CLAUDE, tmp_path),
        {
            "bundles": [
                {"name": "demo", "files": [{"path": "a.md", "content_type": "bogus", "name": "a"}]},
                {"files": []},
                "junk",
            ]
        },
    )

    manifest = InstallManifest.load(Tool.CLAUDE, tmp_path)

    assert manifest.bundle_names() == ["demo"]
    entry = manifest.get("demo")
    assert entry is not None
    assert entry.files == []
