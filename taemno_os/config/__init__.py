"""Configuration loading and validation for taemno-os."""

from taemno_os.config.loader import find_config_file, load_config
from taemno_os.config.schema import TaemnoConfig

__all__ = [
    "TaemnoConfig",
    "find_config_file",
    "load_config",
]
