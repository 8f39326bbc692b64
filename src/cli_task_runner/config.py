"""Runtime settings for tools built on cli-task-runner.

Precedence (lowest to highest): defaults, ``task-runner.yaml``, ``.env``,
process environment, explicit overrides passed by the caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

from .shared import FailurePolicy

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_dotenv_config",
    "load_env_config",
    "load_yaml_config",
    "merge_config",
]

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("task-runner.yaml")

_ENV_TO_CONFIG_KEY = {
    "TASK_RUNNER_FAILURE_POLICY": ("failure_policy",),
    "TASK_RUNNER_LOG_LEVEL": ("logging", "level"),
    "TASK_RUNNER_LOGS_DIR": ("logging", "logs_dir"),
    "TASK_RUNNER_DEBUG": ("logging", "debug"),
    "TASK_RUNNER_TRACEBACKS": ("console", "show_tracebacks"),
}
_TRUTHY = {"1", "true", "yes", "on"}


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default settings."""
    return {
        "failure_policy": FailurePolicy.SOFT.value,
        "logging": {
            "level": "INFO",
            "logs_dir": None,
            "debug": False,
        },
        "console": {
            "show_tracebacks": False,
        },
    }


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place."""
    for key, value in overlay.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def merge_config(
    overrides: Dict[str, Any],
    env_config: Dict[str, Any],
    dotenv_config: Dict[str, Any],
    file_config: Dict[str, Any],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration dictionaries honoring precedence order."""
    merged = defaults.copy()
    deep_merge(merged, file_config)
    deep_merge(merged, dotenv_config)
    deep_merge(merged, env_config)
    deep_merge(merged, {k: v for k, v in overrides.items() if v is not None})
    return merged


def load_yaml_config(yaml_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load settings from YAML.

    An explicit path that is missing or unreadable raises ``ValueError``; the
    implicit ``task-runner.yaml`` is optional.
    """
    explicit = yaml_path is not None
    path = Path(yaml_path) if explicit else DEFAULT_CONFIG_FILE
    if not path.exists():
        if explicit:
            raise ValueError(f"config file not found: {path}")
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (yaml.YAMLError, OSError) as exc:
        if explicit:
            raise ValueError(f"failed to read config {path}: {exc}") from exc
        logger.warning("Failed to load %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        if explicit:
            raise ValueError(f"invalid config format (expected mapping): {path}")
        return {}
    return data


def load_dotenv_config(dotenv_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load supported ``TASK_RUNNER_*`` variables from a ``.env`` file."""
    path = dotenv_path or Path(".env")
    if not path.exists():
        return {}
    return _from_variables(dotenv_values(path))


def load_env_config() -> Dict[str, Any]:
    """Load supported ``TASK_RUNNER_*`` variables from the environment."""
    return _from_variables(os.environ)


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    yaml_path: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load settings from defaults, files, environment, and overrides."""
    config = merge_config(
        overrides=overrides or {},
        env_config=load_env_config(),
        dotenv_config=load_dotenv_config(dotenv_path),
        file_config=load_yaml_config(yaml_path),
        defaults=get_default_config(),
    )
    return _validate(config)


def _validate(config: Dict[str, Any]) -> Dict[str, Any]:
    policy = str(config.get("failure_policy", FailurePolicy.SOFT.value)).lower()
    try:
        config["failure_policy"] = FailurePolicy(policy)
    except ValueError:
        allowed = ", ".join(p.value for p in FailurePolicy)
        raise ValueError(
            f"invalid failure_policy '{policy}' (expected one of: {allowed})"
        ) from None

    for section in ("logging", "console"):
        if not isinstance(config.get(section), dict):
            raise ValueError(
                f"invalid '{section}' settings: expected a mapping, "
                f"got {type(config.get(section)).__name__}"
            )

    logs_dir = config["logging"].get("logs_dir")
    if logs_dir is not None:
        config["logging"]["logs_dir"] = Path(logs_dir)
    for section, key in (("logging", "debug"), ("console", "show_tracebacks")):
        config[section][key] = _as_bool(config[section].get(key))
    return config


def _from_variables(values: Any) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for env_key, path in _ENV_TO_CONFIG_KEY.items():
        value = values.get(env_key)
        if value is None:
            continue
        target = config
        for part in path[:-1]:
            target = target.setdefault(part, {})
        target[path[-1]] = value
    return config


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)
