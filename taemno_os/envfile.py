"""Load ``KEY=value`` environment files."""

import logging
import os
from typing import Dict

from dotenv import dotenv_values

from taemno_os.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_env_file(path: str) -> Dict[str, str]:
    """Parse the dotenv file at *path*, preserving key order.

    Variable interpolation is disabled so that ``$(...)`` secret
    references reach the resolver untouched.  Keys declared without a
    value (``KEY`` on its own line) are returned as empty strings.
    """
    if not os.path.isfile(path):
        raise ConfigurationError(f"Failed to read env file: {path} does not exist")
    try:
        values = dotenv_values(path, interpolate=False, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read env file: {path}\n  {exc}") from exc

    env = {key: "" if value is None else value for key, value in values.items()}
    logger.debug("Loaded %d variable(s) from %s", len(env), path)
    return env
