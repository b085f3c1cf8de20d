"""Configuration loading.

Values are resolved in this order (later wins):
    1. built-in defaults
    2. YAML config file (optional)
    3. environment variables (a .env file is honoured via python-dotenv)

Environment variables:
    PORTFOLIO_CMS_DATABASE: Path to the SQLite storage file
    PORTFOLIO_CMS_PASSCODE: Admin passcode
    PORTFOLIO_CMS_QUOTA_BYTES: Storage quota in bytes
    PORTFOLIO_CMS_LOG_LEVEL: Logging level name

Example config.yaml::

    database: data/portfolio.db
    quota_bytes: 5242880
    debounce_seconds: 0.5
    presets:
      gallery: {max_width: 1000, quality: 0.6}
      thumbnail: {max_width: 800, quality: 0.5}
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from .auth import DEFAULT_PASSCODE
from .errors import ConfigError
from .media.codec import GALLERY_PRESET, THUMBNAIL_PRESET, CodecPreset
from .media.ingest import MAX_FILE_SIZE
from .storage.database import DEFAULT_QUOTA_BYTES
from .storage.loader import STORAGE_KEY
from .storage.synchronizer import DEFAULT_DEBOUNCE_SECONDS


@dataclass
class Settings:
    database: Path = Path("data/portfolio.db")
    storage_key: str = STORAGE_KEY
    quota_bytes: int = DEFAULT_QUOTA_BYTES
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    max_upload_bytes: int = MAX_FILE_SIZE
    passcode: str = DEFAULT_PASSCODE
    log_level: str = "WARNING"
    gallery_preset: CodecPreset = GALLERY_PRESET
    thumbnail_preset: CodecPreset = THUMBNAIL_PRESET


def _preset(base: CodecPreset, raw) -> CodecPreset:
    if raw is None:
        return base
    if not isinstance(raw, dict):
        raise ConfigError(f"Preset '{base.name}' must be a mapping")
    try:
        max_width = int(raw.get("max_width", base.max_width))
        quality = float(raw.get("quality", base.quality))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid preset '{base.name}': {e}") from e
    if max_width <= 0 or not 0.0 < quality <= 1.0:
        raise ConfigError(f"Preset '{base.name}' needs max_width > 0 and 0 < quality <= 1")
    return CodecPreset(base.name, max_width, quality)


def load_config(config_path: str | Path) -> dict:
    """Load configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with open(path) as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")
    return config


def load_settings(config_path: Optional[str | Path] = None) -> Settings:
    """Build Settings from defaults, an optional YAML file and the environment."""
    load_dotenv()
    settings = Settings()
    config = load_config(config_path) if config_path else {}

    try:
        if "database" in config:
            settings.database = Path(config["database"])
        if "storage_key" in config:
            settings.storage_key = str(config["storage_key"])
        if "quota_bytes" in config:
            settings.quota_bytes = int(config["quota_bytes"])
        if "debounce_seconds" in config:
            settings.debounce_seconds = float(config["debounce_seconds"])
        if "max_upload_bytes" in config:
            settings.max_upload_bytes = int(config["max_upload_bytes"])
        if "log_level" in config:
            settings.log_level = str(config["log_level"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e

    presets = config.get("presets") or {}
    if not isinstance(presets, dict):
        raise ConfigError("presets must be a mapping")
    settings.gallery_preset = _preset(GALLERY_PRESET, presets.get("gallery"))
    settings.thumbnail_preset = _preset(THUMBNAIL_PRESET, presets.get("thumbnail"))

    return _apply_environment(settings)


def _apply_environment(settings: Settings) -> Settings:
    env = os.environ
    try:
        return replace(
            settings,
            database=Path(env["PORTFOLIO_CMS_DATABASE"]) if env.get("PORTFOLIO_CMS_DATABASE") else settings.database,
            passcode=env.get("PORTFOLIO_CMS_PASSCODE") or settings.passcode,
            quota_bytes=int(env["PORTFOLIO_CMS_QUOTA_BYTES"]) if env.get("PORTFOLIO_CMS_QUOTA_BYTES") else settings.quota_bytes,
            log_level=env.get("PORTFOLIO_CMS_LOG_LEVEL") or settings.log_level,
        )
    except ValueError as e:
        raise ConfigError(f"Invalid PORTFOLIO_CMS_QUOTA_BYTES: {e}") from e
