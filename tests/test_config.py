"""Tests for settings loading and the passcode gate."""

from pathlib import Path

import pytest

from portfolio_cms.auth import DEFAULT_PASSCODE, AdminSession
from portfolio_cms.config import load_settings
from portfolio_cms.errors import ConfigError
from portfolio_cms.media.codec import GALLERY_PRESET


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PORTFOLIO_CMS_DATABASE",
        "PORTFOLIO_CMS_PASSCODE",
        "PORTFOLIO_CMS_QUOTA_BYTES",
        "PORTFOLIO_CMS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.database == Path("data/portfolio.db")
    assert settings.debounce_seconds == 0.5
    assert settings.max_upload_bytes == 10 * 1024 * 1024
    assert settings.gallery_preset == GALLERY_PRESET
    assert settings.passcode == DEFAULT_PASSCODE


def test_yaml_overrides(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "database: other.db\n"
        "quota_bytes: 1000\n"
        "debounce_seconds: 0.25\n"
        "presets:\n"
        "  thumbnail: {max_width: 800, quality: 0.5}\n",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.database == Path("other.db")
    assert settings.quota_bytes == 1000
    assert settings.debounce_seconds == 0.25
    assert settings.thumbnail_preset.max_width == 800
    assert settings.thumbnail_preset.quality == 0.5
    assert settings.gallery_preset == GALLERY_PRESET


def test_environment_wins_over_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("database: yaml.db\n", encoding="utf-8")
    monkeypatch.setenv("PORTFOLIO_CMS_DATABASE", "env.db")
    monkeypatch.setenv("PORTFOLIO_CMS_PASSCODE", "secret")
    monkeypatch.setenv("PORTFOLIO_CMS_QUOTA_BYTES", "2048")

    settings = load_settings(config)

    assert settings.database == Path("env.db")
    assert settings.passcode == "secret"
    assert settings.quota_bytes == 2048


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("", encoding="utf-8")

    assert load_settings(config).quota_bytes == 5 * 1024 * 1024


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "quota_bytes: lots\n",
        "presets:\n  gallery: {max_width: 0}\n",
        "presets:\n  gallery: {quality: 1.5}\n",
        "presets:\n  gallery: [1, 2]\n",
        "key: [unclosed\n",
    ],
)
def test_invalid_config(tmp_path: Path, content: str) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(config)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "nope.yaml")


def test_invalid_quota_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORTFOLIO_CMS_QUOTA_BYTES", "five")

    with pytest.raises(ConfigError):
        load_settings()


def test_admin_session() -> None:
    session = AdminSession("0729")

    assert session.authenticate("1234") is False
    assert session.is_admin is False
    assert session.authenticate("0729") is True
    assert session.is_admin is True

    session.logout()
    assert session.is_admin is False
