"""Run configuration.

Loads defaults, then an optional YAML file (keybake.yml in the working
directory, $KEYBAKE_CONFIG, or an explicit path), then environment
overrides. A .env file is honored through python-dotenv. CLI flags are
applied on top by the caller.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .pipeline import DEFAULT_PACKAGE

load_dotenv()

DEFAULT_CONFIG_NAME = "keybake.yml"


@dataclass
class BakeConfig:
    package: str = DEFAULT_PACKAGE
    output: Optional[str] = None
    jobs: int = 1
    strict_load: bool = False
    keys: List[str] = field(default_factory=list)


def _as_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str) and v.lower() in ("true", "false"):
        return v.lower() == "true"
    raise ValueError(f"expected true/false, got {v!r}")


def _as_jobs(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError(f"expected an integer, got {v!r}")
    n = int(v)
    if n < 1:
        raise ValueError(f"jobs must be at least 1, got {n}")
    return n


def _as_keys(v: Any) -> List[str]:
    if not isinstance(v, list) or not all(isinstance(k, str) for k in v):
        raise ValueError("keys must be a list of key spec strings")
    return list(v)


_FIELDS = {
    "package": str,
    "output": str,
    "jobs": _as_jobs,
    "strict_load": _as_bool,
    "keys": _as_keys,
}

_ENV_MAP = {
    "package": "KEYBAKE_PACKAGE",
    "output": "KEYBAKE_OUTPUT",
    "jobs": "KEYBAKE_JOBS",
    "strict_load": "KEYBAKE_STRICT_LOAD",
}


def _config_path(path: Optional[str]) -> Optional[str]:
    if path:
        return path
    env = os.getenv("KEYBAKE_CONFIG")
    if env:
        return env
    default = os.path.join(os.getcwd(), DEFAULT_CONFIG_NAME)
    return default if os.path.exists(default) else None


def _read_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping")
    unknown = sorted(set(data) - set(_FIELDS))
    if unknown:
        raise ConfigError(f"unknown config key(s) in {path}: {', '.join(unknown)}")
    return data


def _cast(key: str, value: Any, origin: str) -> Any:
    if key == "output" and value is None:
        return None
    if key in ("package", "output") and not isinstance(value, str):
        raise ConfigError(f"{origin}: {key} must be a string")
    try:
        return _FIELDS[key](value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{origin}: invalid {key}: {e}") from e


def load_config(path: Optional[str] = None) -> BakeConfig:
    data: Dict[str, Any] = {}
    cfg_path = _config_path(path)
    if cfg_path:
        for k, v in _read_file(cfg_path).items():
            data[k] = _cast(k, v, cfg_path)
    for k, env in _ENV_MAP.items():
        if env in os.environ:
            data[k] = _cast(k, os.environ[env], env)
    return BakeConfig(**data)


__all__ = ["BakeConfig", "DEFAULT_CONFIG_NAME", "load_config"]
