"""Load config.yaml into an RMTConfig.

Resolution order:
  1. Explicit path (``--config`` / ``RMTSCORE_CONFIG``)
  2. ./config.yaml
  3. ~/.rmtscore/config.yaml
  4. Published defaults, no file needed

String values may reference the environment as ``${VAR}`` or
``${VAR:-fallback}``. Deployment paths can also be overridden directly
through RMTSCORE_* variables, which win over the file.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from rmtscore.config.schema import RMTConfig, ScoringConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    Path("config.yaml"),
    Path("~/.rmtscore/config.yaml"),
]

# ${NAME} or ${NAME:-fallback}
_ENV_REF = re.compile(r"\$\{(?P<name>\w+)(?::-(?P<fallback>[^}]*))?\}")

# env var -> (section, key); applied after the file is parsed
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "RMTSCORE_DB_PATH": ("database", "path"),
    "RMTSCORE_HISTORY_DIR": ("output", "score_history_dir"),
    "RMTSCORE_MAX_WORKERS": ("pipeline", "max_workers"),
}


def _expand_env_vars(value: Any) -> Any:
    """Substitute environment references in every string of a parsed YAML tree."""
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    if not isinstance(value, str):
        return value

    def _lookup(m: re.Match[str]) -> str:
        fallback = m.group("fallback")
        return os.environ.get(m.group("name"), fallback if fallback is not None else "")

    return _ENV_REF.sub(_lookup, value)


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if not env_value:
            continue
        # An empty YAML section parses as None
        block = raw.get(section) or {}
        block[key] = env_value
        raw[section] = block
        logger.debug("%s overrides %s.%s", env_name, section, key)
    return raw


def _find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if path.is_file():
            return path
        logger.warning("Config file %s not found, falling back to defaults", path)
        return None

    for candidate in DEFAULT_CONFIG_PATHS:
        path = candidate.expanduser()
        if path.is_file():
            return path
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(raw).__name__}")
    return raw


def load_config(path: str | Path | None = None) -> RMTConfig:
    """Load, expand and validate configuration.

    Raises pydantic.ValidationError for values that break the scoring
    contract (weights not summing to 1.0, unordered tiers, ...).
    """
    config_path = _find_config_file(path)
    if config_path is not None:
        logger.info("Loading config from %s", config_path)
        raw = _expand_env_vars(_read_yaml(config_path))
    else:
        logger.info("No config file found, using published defaults")
        raw = {}

    config = RMTConfig.model_validate(_apply_env_overrides(raw))

    if config.scoring != ScoringConfig():
        logger.warning(
            "Scoring parameters differ from the published v%d defaults; "
            "scores are not comparable with the public leaderboard",
            config.version,
        )
    return config


def resolve_path(path_str: str | Path) -> Path:
    """Absolute path for a configured location, with ~ expanded."""
    return Path(path_str).expanduser().resolve()
