"""End-to-end tests for the CLI and the session context."""

import json
import sys
from pathlib import Path

import pytest

from portfolio_cms import cli
from portfolio_cms.config import Settings
from portfolio_cms.context import CMSContext
from portfolio_cms.core.defaults import default_state
from portfolio_cms.storage.backup import import_backup
from portfolio_cms.storage.database import KeyValueStorage, MemoryStorage
from portfolio_cms.storage.loader import STORAGE_KEY, load_state


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PORTFOLIO_CMS_DATABASE", "PORTFOLIO_CMS_PASSCODE", "PORTFOLIO_CMS_QUOTA_BYTES"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "cms.db"


@pytest.fixture
def run_cli(monkeypatch: pytest.MonkeyPatch, db_path: Path):
    """Run the CLI with the given arguments against db_path."""

    def _run(*args: str, passcode: str = "0729") -> None:
        argv = ["portfolio-cms", "--database", str(db_path), "--passcode", passcode, *args]
        monkeypatch.setattr(sys, "argv", argv)
        cli.main()

    return _run


def _stored(db_path: Path):
    return load_state(KeyValueStorage(db_path))


def test_show_uses_defaults_on_first_run(run_cli, capsys) -> None:
    run_cli("show")

    out = capsys.readouterr().out
    assert "ODEMIND" in out
    assert "Projects: 2" in out


def test_add_project_with_images(run_cli, db_path: Path, image_file) -> None:
    images = [image_file("a.png", width=1500, height=300), image_file("b.png", width=40, height=40)]

    run_cli(
        "add-project", "--id", "ODM-PRJ-2024-009", "--title", "NEW WORK",
        "--category", "DIGITAL", "--date", "2024-06-01", *map(str, images),
    )

    project = _stored(db_path).projects[0]
    assert project.id == "ODM-PRJ-2024-009"
    assert project.category.value == "DIGITAL"
    assert len(project.image_urls) == 2
    assert all(url.startswith("data:image/jpeg;base64,") for url in project.image_urls)


def test_wrong_passcode_is_rejected(run_cli, db_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli("settings", "--title", "HACKED", passcode="0000")

    assert excinfo.value.code == 1
    assert "access denied" in capsys.readouterr().out
    assert _stored(db_path).site_title == "ODEMIND"


def test_duplicate_project_id_is_reported(run_cli, capsys) -> None:
    with pytest.raises(SystemExit):
        run_cli("add-project", "--id", "ODM-PRJ-2004-001", "--title", "COPY")

    assert "already exists" in capsys.readouterr().out


def test_update_and_delete_project(run_cli, db_path: Path, image_file) -> None:
    run_cli("update-project", "ODM-PRJ-2004-001", "--title", "RETITLED", "--remove-image", "0",
            "--add-image", str(image_file("c.png")))
    project = _stored(db_path).projects[0]
    assert project.title == "RETITLED"
    assert len(project.image_urls) == 1
    assert project.image_urls[0].startswith("data:image/jpeg")

    run_cli("delete-project", "ODM-PRJ-2004-001", "--yes")
    assert [p.id for p in _stored(db_path).projects] == ["ODM-PRJ-2004-002"]


def test_archive_commands(run_cli, db_path: Path, image_file) -> None:
    run_cli("add-archive", "--year", "2020 - 2022", "--company", "Aesop",
            "--image", str(image_file("thumb.png", width=1200, height=1200)))
    item = _stored(db_path).archive_items[0]
    assert item.company == "Aesop"
    assert item.image_url.startswith("data:image/jpeg")
    assert len(item.id) == 32

    run_cli("update-archive", item.id, "--project", "Retail launch", "--clear-image")
    edited = _stored(db_path).archive_items[0]
    assert edited.project == "Retail launch"
    assert edited.image_url == ""

    run_cli("delete-archive", item.id, "--yes")
    assert _stored(db_path).archive_items == default_state().archive_items


def test_settings_keeps_unspecified_field(run_cli, db_path: Path) -> None:
    run_cli("settings", "--title", "NEW TITLE")

    state = _stored(db_path)
    assert state.site_title == "NEW TITLE"
    assert state.tagline == default_state().tagline


def test_export_and_import(run_cli, db_path: Path, tmp_path: Path) -> None:
    run_cli("settings", "--title", "EXPORTED")
    run_cli("export", "--output-dir", str(tmp_path / "out"))
    exported = next((tmp_path / "out").glob("EXPORTED_DATABASE_*.json"))

    run_cli("settings", "--title", "CHANGED")
    run_cli("import", str(exported), "--yes")

    assert _stored(db_path).site_title == "EXPORTED"


def test_import_invalid_file(run_cli, tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit):
        run_cli("import", str(bad), "--yes")

    assert "Invalid data structure" in capsys.readouterr().out


def test_quota_failure_is_reported(run_cli, monkeypatch: pytest.MonkeyPatch, capsys, db_path: Path) -> None:
    monkeypatch.setenv("PORTFOLIO_CMS_QUOTA_BYTES", "100")

    with pytest.raises(SystemExit):
        run_cli("settings", "--title", "WONT FIT")

    captured = capsys.readouterr()
    assert "Storage limit exceeded" in captured.out + captured.err
    assert KeyValueStorage(db_path).get_item(STORAGE_KEY) is None


def test_usage(run_cli, capsys) -> None:
    run_cli("usage")

    assert "project ODM-PRJ-2004-001" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_context_reload_discards_pending_changes() -> None:
    storage = MemoryStorage()
    ctx = CMSContext.open(Settings(debounce_seconds=10), storage=storage)
    ctx.store.update_settings("PENDING", "")
    storage.set_item(STORAGE_KEY, json.dumps({"projects": [], "siteTitle": "IMPORTED"}))

    ctx.reload()
    assert await ctx.close() is True

    assert ctx.store.state.site_title == "IMPORTED"
    assert load_state(storage).site_title == "IMPORTED"


def test_import_then_edit_keeps_imported_projects(run_cli, db_path: Path, tmp_path: Path, capsys) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(
        json.dumps({"projects": [{"id": "X1", "title": "REEL", "category": "MOTION"}], "siteTitle": "IMPORTED"}),
        encoding="utf-8",
    )

    run_cli("import", str(backup), "--yes")
    assert "Imported 1 project(s)" in capsys.readouterr().out
    run_cli("settings", "--tagline", "edited after import")

    state = _stored(db_path)
    assert [p.id for p in state.projects] == ["X1"]
    assert state.projects[0].category == "MOTION"
    assert state.site_title == "IMPORTED"
    assert state.tagline == "edited after import"


def test_import_with_unusable_record_leaves_data_alone(run_cli, db_path: Path, tmp_path: Path, capsys) -> None:
    run_cli("settings", "--title", "BEFORE")
    backup = tmp_path / "backup.json"
    backup.write_text('{"projects": [{"title": "no id"}]}', encoding="utf-8")

    with pytest.raises(SystemExit):
        run_cli("import", str(backup), "--yes")

    assert "Invalid data structure" in capsys.readouterr().out
    assert _stored(db_path).site_title == "BEFORE"
    assert len(_stored(db_path).projects) == 2


@pytest.mark.parametrize(
    "args",
    [
        ("add-project", "--id", "", "--title", "TITLE"),
        ("add-project", "--id", "ODM-PRJ-2024-010", "--title", "   "),
        ("update-project", "ODM-PRJ-2004-001", "--title", ""),
        ("add-archive", "--year", "", "--company", "Aesop"),
        ("add-archive", "--year", "2020", "--company", " "),
    ],
)
def test_blank_mandatory_values_are_rejected(run_cli, db_path: Path, capsys, args) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(*args)

    assert excinfo.value.code == 2
    assert "mandatory value is missing" in capsys.readouterr().err
    assert _stored(db_path) == default_state()


def test_unusable_database_is_reported(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys) -> None:
    broken = tmp_path / "broken.db"
    broken.write_bytes(b"this is not a database file" * 100)
    monkeypatch.setattr(sys, "argv", ["portfolio-cms", "--database", str(broken), "show"])

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1
    assert "Error: Storage failure" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_context_edit_after_import_persists_imported_data(tmp_path: Path) -> None:
    storage = MemoryStorage()
    ctx = CMSContext.open(Settings(debounce_seconds=0.01), storage=storage)
    backup = tmp_path / "backup.json"
    backup.write_text(json.dumps({"projects": [{"id": "X1", "title": "REEL", "category": "MOTION"}]}), encoding="utf-8")

    import_backup(backup, storage)
    ctx.reload()
    ctx.store.update_settings("AFTER IMPORT", "")
    assert await ctx.close() is True

    assert [p.id for p in load_state(storage).projects] == ["X1"]
