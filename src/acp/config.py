"""ACP CLI configuration and the local config store."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from platformdirs import user_config_dir
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from acp.models import LocalConfig

logger = logging.getLogger(__name__)

APP_NAME = "acp"


class ConfigError(Exception):
    pass


def get_config_dir() -> Path:
    return Path(user_config_dir(APP_NAME))


class ACPSettings(BaseSettings):
    """Process settings, overridable through ACP_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="ACP_", env_file=".env", extra="ignore")

    api_url: str = "https://acpx.virtuals.io/api"
    search_url: str = "https://acpx.virtuals.io/api/agents/v4/search"
    config_file: Path = Field(default_factory=lambda: get_config_dir() / "config.json")
    session_token: Optional[str] = None
    timeout: float = 30.0


_settings: ACPSettings | None = None


def get_settings() -> ACPSettings:
    global _settings
    if _settings is None:
        _settings = ACPSettings()
    return _settings


def _resolve(path: Optional[Path]) -> Path:
    return Path(path) if path is not None else get_settings().config_file


def load_config(path: Optional[Path] = None) -> LocalConfig:
    """Read the local config. A missing file is an empty config."""
    path = _resolve(path)
    if not path.exists():
        return LocalConfig()
    try:
        return LocalConfig.model_validate_json(path.read_text())
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def save_config(config: LocalConfig, path: Optional[Path] = None) -> None:
    """Replace the config file in one step.

    The document goes to a temp file beside the target and is renamed over
    it, so readers see either the old file or the new one.
    """
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"
    try:
        with open(tmp_path, "w") as f:
            f.write(config.to_json())
            f.flush()
            os.fsync(f.fileno())
        tmp_path.chmod(0o600)
        os.replace(str(tmp_path), str(path))
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.debug("Wrote config with %d agent(s) to %s", len(config.agents), path)


@contextmanager
def edit_config(path: Optional[Path] = None) -> Iterator[LocalConfig]:
    """Load the config, hand it out for mutation, save it if the block succeeds."""
    path = _resolve(path)
    config = load_config(path)
    yield config
    save_config(config, path)
