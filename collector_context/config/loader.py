"""Configuration loading for collector_context."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from collector_context.exceptions import InvalidConfigurationError

from .settings import CollectorContextConfig

DEFAULT_CONFIG_PATH = Path("config/collector_context.yaml")


def _lower_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize dictionary keys to lowercase."""
    return {k.lower(): v for k, v in d.items()}


def _apply_env_overrides(cfg: Dict[str, Any], env: Dict[str, str], prefix: str) -> None:
    """Apply simple env overrides using DOUBLE-UNDERSCORE path syntax.

    Example: COLLECTOR_COLLECTORS__STRICT=true overrides collectors.strict
    """
    plen = len(prefix)
    for key, value in env.items():
        if not key.startswith(prefix):
            continue
        path = key[plen:].lower().split("__")
        cur: Any = cfg
        for part in path[:-1]:
            if part not in cur or not isinstance(cur[part], dict):
                cur[part] = {}
            cur = cur[part]
        # Basic type coercion for ints/bools/floats
        leaf = path[-1]
        if value.lower() in {"true", "false"}:
            cur[leaf] = value.lower() == "true"
        else:
            try:
                if "." in value:
                    cur[leaf] = float(value)
                else:
                    cur[leaf] = int(value)
            except ValueError:
                cur[leaf] = value


def load_collector_config(
    path: Path | str = DEFAULT_CONFIG_PATH,
    *,
    env_overrides: bool = True,
    env: Optional[Dict[str, str]] = None,
    env_prefix: str = "COLLECTOR_",
) -> CollectorContextConfig:
    """Load YAML config and return a typed `CollectorContextConfig`.

    - Allows extra keys so the settings can share a file with other tools
    - Optionally applies environment variable overrides
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")

    with open(p, "r") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise InvalidConfigurationError(
                "Config file is not valid YAML", config_path=str(p), original_exception=e
            ) from e

    if not isinstance(raw, dict):
        raise InvalidConfigurationError(
            "Config file must contain a mapping at the top level", config_path=str(p)
        )

    data = _lower_keys(raw)

    if env_overrides:
        _apply_env_overrides(data, env if env is not None else dict(os.environ), env_prefix)

    try:
        return CollectorContextConfig(**data)
    except ValidationError as e:
        raise InvalidConfigurationError(
            f"Invalid collector context configuration: {e}",
            config_path=str(p),
            original_exception=e,
        ) from e
