from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

ROOT_DIR = Path(__file__).resolve().parent.parent
ENV_PREFIX = "RECALL_GRADER_"


class GraderConfig(BaseModel):
    remote_enabled: bool = Field(True, description="Ask the remote scorer first when one is wired in.")
    remote_timeout: float = Field(10.0, gt=0, description="Seconds to wait for a remote score.")
    remote_workers: int = Field(2, ge=1)
    cache_size: int = Field(1024, ge=0, description="Memoized local scores; 0 disables the cache.")


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class PracticeConfig(BaseModel):
    data_dir: Path = ROOT_DIR / "data"
    weights: dict[int, int] = Field(default_factory=lambda: {0: 75, 1: 20, 2: 5})

    @field_validator("weights")
    @classmethod
    def _check_weights(cls, value: dict[int, int]) -> dict[int, int]:
        if set(value) != {0, 1, 2}:
            raise ValueError("weights must cover recall classes 0, 1 and 2")
        if any(weight < 0 for weight in value.values()):
            raise ValueError("weights must be non-negative")
        if sum(value.values()) != 100:
            raise ValueError("weights must sum to 100")
        return value


class AppConfig(BaseModel):
    practice: PracticeConfig = Field(default_factory=PracticeConfig)
    grader: GraderConfig = Field(default_factory=GraderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _env_overrides(env: Mapping[str, str]) -> dict[str, dict[str, Any]]:
    mapping = {
        "DATA_DIR": ("practice", "data_dir"),
        "REMOTE_ENABLED": ("grader", "remote_enabled"),
        "REMOTE_TIMEOUT": ("grader", "remote_timeout"),
        "CACHE_SIZE": ("grader", "cache_size"),
        "LOG_LEVEL": ("logging", "level"),
        "LOG_JSON": ("logging", "json_output"),
    }
    overrides: dict[str, dict[str, Any]] = {}
    for suffix, (section, key) in mapping.items():
        value = env.get(ENV_PREFIX + suffix)
        if value is not None:
            overrides.setdefault(section, {})[key] = value
    return overrides


def load_config(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    """Build the app config from an optional YAML file plus RECALL_GRADER_* variables."""
    raw: dict[str, Any] = _read_yaml(path) if path else {}
    for section, values in _env_overrides(os.environ if env is None else env).items():
        raw.setdefault(section, {}).update(values)
    return AppConfig.model_validate(raw)
