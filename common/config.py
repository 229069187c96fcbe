"""User settings for the nimsforestpm CLI.

Settings come from ``~/.nimsforestpm/config.yaml`` when it exists and are
then overridden by ``NIMSFOREST_*`` environment variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .errors import ValidationError

DEFAULT_CONFIG_FILE = Path("~/.nimsforestpm/config.yaml")

ENV_OVERRIDES = {
    "NIMSFOREST_LOG_LEVEL": "log_level",
    "NIMSFOREST_LOG_FILE": "log_file",
    "NIMSFOREST_DISCOVERY_TIMEOUT": "discovery_timeout",
    "NIMSFOREST_EXECUTE_TIMEOUT": "execute_timeout",
}


class Settings(BaseModel):
    """Runtime settings shared by the CLI commands."""

    log_level: str = Field(default="INFO", description="Root logger level")
    log_file: str | None = Field(default=None, description="Log file, ~/.nimsforestpm/log.txt if unset")
    discovery_timeout: float | None = Field(default=30.0, gt=0, description="Seconds per help probe")
    execute_timeout: float | None = Field(default=None, gt=0, description="Seconds before a dispatched tool is killed")


def load_settings(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the config file (if any) and the environment."""
    config_file = Path(path) if path is not None else DEFAULT_CONFIG_FILE.expanduser()
    payload: dict[str, Any] = {}
    if config_file.is_file():
        payload.update(_load_text_payload(config_file.read_text(encoding="utf-8")))
    elif path is not None:
        raise ValidationError(f"config file does not exist: {config_file}")

    env = os.environ if environ is None else environ
    for var, field_name in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            payload[field_name] = value
    try:
        return Settings.model_validate(payload)
    except PydanticValidationError as exc:
        problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise ValidationError("invalid settings: " + "; ".join(problems), problems) from exc


def _load_text_payload(raw: str | bytes) -> dict[str, Any]:
    """Interpret raw text as YAML first, falling back to JSON."""
    text = raw.decode() if isinstance(raw, bytes) else raw
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError:
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ValidationError(f"config file is neither YAML nor JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError("config file must contain a mapping")
    return data


__all__ = ["Settings", "load_settings"]
