from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import Optional

from .errors import ConfigError

CONFIG_FILENAME = ".git-reviewers.json"
CONFIG_ENV = "GIT_REVIEWERS_CONFIG"
LOG_LEVEL_ENV = "GIT_REVIEWERS_LOG_LEVEL"


def _default_jobs() -> int:
    return max(1, min(8, (os.cpu_count() or 4)))


@dataclasses.dataclass(frozen=True)
class ReviewersConfig:
    base: str = "master"
    context_radius: int = 2
    jobs: int = dataclasses.field(default_factory=_default_jobs)
    git_timeout_s: Optional[float] = None
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, raw: dict) -> "ReviewersConfig":
        if not isinstance(raw, dict):
            raise ConfigError(f"config must be a JSON object, got {type(raw).__name__}")
        unknown = sorted(set(raw) - {f.name for f in dataclasses.fields(cls)})
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

        kwargs: dict[str, object] = {}
        if "base" in raw:
            base = raw["base"]
            if not isinstance(base, str) or not base.strip():
                raise ConfigError(f"base must be a non-empty string, got {base!r}")
            kwargs["base"] = base.strip()
        if "context_radius" in raw:
            radius = raw["context_radius"]
            if isinstance(radius, bool) or not isinstance(radius, int) or radius < 0:
                raise ConfigError(f"context_radius must be a non-negative integer, got {radius!r}")
            kwargs["context_radius"] = radius
        if "jobs" in raw:
            jobs = raw["jobs"]
            if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
                raise ConfigError(f"jobs must be a positive integer, got {jobs!r}")
            kwargs["jobs"] = jobs
        if "git_timeout_s" in raw:
            timeout = raw["git_timeout_s"]
            if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
                raise ConfigError(f"git_timeout_s must be a positive number or null, got {timeout!r}")
            kwargs["git_timeout_s"] = None if timeout is None else float(timeout)
        if "log_level" in raw:
            level = raw["log_level"]
            if not isinstance(level, str) or not level.strip():
                raise ConfigError(f"log_level must be a string, got {level!r}")
            kwargs["log_level"] = level.strip().upper()
        return cls(**kwargs)


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        return json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {config_path}: {e}") from e


def config_path_for(toplevel: Path) -> Path:
    env = os.environ.get(CONFIG_ENV, "").strip()
    if env:
        return Path(env).expanduser()
    return toplevel / CONFIG_FILENAME


def resolve_config(toplevel: Path) -> ReviewersConfig:
    config = ReviewersConfig.from_dict(load_config(config_path_for(toplevel)))
    level = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if level:
        config = dataclasses.replace(config, log_level=level.upper())
    return config
