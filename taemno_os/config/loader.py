"""Configuration file loading and validation.

Loads an optional YAML configuration file, applies ``TAEMNO_*``
environment-variable overrides, and validates the result against
:class:`~taemno_os.config.schema.TaemnoConfig`.

Lookup order for the file: explicit path → ``$TAEMNO_CONFIG`` →
``~/.config/taemno-os/config.yaml`` (only if it exists).  With no file,
defaults are used.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from taemno_os.config.schema import TaemnoConfig
from taemno_os.constants import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH
from taemno_os.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Recognised config file extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})

# Environment variable → config field
_ENV_OVERRIDES = {
    "TAEMNO_ENV_PREFIX": "env_prefix",
    "TAEMNO_ENV_SUFFIX": "env_suffix",
    "TAEMNO_PROVIDER": "provider",
    "TAEMNO_COMMAND_TIMEOUT": "command_timeout",
    "TAEMNO_LOG_LEVEL": "log_level",
}


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file from *cfg_fpath*.

    Raises :class:`ConfigurationError` on I/O or parse errors.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def find_config_file(
    path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Return the config file to load, or ``None`` to use defaults."""
    environ = os.environ if environ is None else environ
    if path:
        return path
    from_env = environ.get(CONFIG_ENV_VAR)
    if from_env:
        return from_env
    default = os.path.expanduser(DEFAULT_CONFIG_PATH)
    if os.path.isfile(default):
        return default
    return None


def _format_validation_errors(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"  - {loc}: {err['msg']}")
    return "\n".join(lines)


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> TaemnoConfig:
    """Load, merge and validate configuration.

    *overrides* (e.g. from command-line flags) win over environment
    variables, which win over the file.  ``None`` overrides are ignored.
    """
    environ = os.environ if environ is None else environ
    cfg_fpath = find_config_file(path, environ)

    raw_data: Dict[str, Any] = {}
    if cfg_fpath is not None:
        logger.debug("Loading configuration from %s", cfg_fpath)
        raw_data = _read_config_file(cfg_fpath)

    for env_var, field_name in _ENV_OVERRIDES.items():
        if environ.get(env_var):
            raw_data[field_name] = environ[env_var]

    raw_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return TaemnoConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n"
            f"{_format_validation_errors(exc)}"
        ) from exc
