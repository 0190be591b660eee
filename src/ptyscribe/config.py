"""Configuration loading and persistence for ptyscribe."""

import json
import logging
import os
import time
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from ptyscribe.errors import PtyscribeError
from ptyscribe.models import ScribeConfig

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".ptyscribe"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Environment variable -> config field.
ENV_OVERRIDES = {
    "PTYSCRIBE_SHELL": "shell",
    "PTYSCRIBE_TRANSCRIPT": "transcript_path",
    "PTYSCRIBE_LOG_FILE": "log_file",
}


class ConfigError(PtyscribeError):
    """The configuration file exists but cannot be used."""


def _read_config_file(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        log.debug("no config file at %s, using defaults", path)
        return {}
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    if not isinstance(payload, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return payload


def _env_overrides(environ: Mapping[str, str]) -> dict:
    overrides = {}
    for env_key, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_key, "").strip()
        if value:
            overrides[field_name] = value
    return overrides


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> ScribeConfig:
    """Load config from disk, then apply environment overrides."""
    path = CONFIG_FILE if path is None else path
    environ = os.environ if environ is None else environ

    data = _read_config_file(path)
    data.update(_env_overrides(environ))
    try:
        config = ScribeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
    log.debug("config=%s", config.model_dump())
    return config


def save_config(config: ScribeConfig, path: Path | None = None) -> Path:
    """Write config atomically with owner-only permissions."""
    path = CONFIG_FILE if path is None else path
    os.makedirs(path.parent, mode=0o700, exist_ok=True)
    temp_file = path.with_name(f".{path.name}.{os.getpid()}.{time.time_ns()}.tmp")
    fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(config.model_dump(exclude_defaults=True), f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(temp_file, path)
    log.debug("saved config to %s", path)
    return path
