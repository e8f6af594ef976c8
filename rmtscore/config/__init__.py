"""Configuration loading, validation, and defaults."""

from rmtscore.config.loader import load_config
from rmtscore.config.schema import RMTConfig

__all__ = ["load_config", "RMTConfig"]
