"""Logging configuration setup."""

import copy
import logging
import logging.config
import re
import sys
from typing import Optional, Set

from taemno_os.constants import DEFAULT_LOG_LEVEL

# ── Secret redaction filter ──────────────────────────────────────────────

_REDACTED = "***REDACTED***"


class SecretRedactionFilter(logging.Filter):
    """Logging filter that replaces resolved secret values with a placeholder.

    Call :meth:`register` to add values that should be scrubbed.  Thread-safe
    because CPython's GIL protects set reads against concurrent adds.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: Set[str] = set()
        self._pattern: Optional[re.Pattern] = None

    def register(self, value: str) -> None:
        """Register a secret value for redaction."""
        if value and len(value) >= 4:  # skip trivially short values
            self._secrets.add(value)
            # Rebuild regex pattern with longest-first ordering
            escaped = sorted((re.escape(s) for s in self._secrets), key=len, reverse=True)
            self._pattern = re.compile("|".join(escaped))

    def clear(self) -> None:
        self._secrets.clear()
        self._pattern = None

    def redact(self, text: str) -> str:
        if self._pattern is None:
            return text
        return self._pattern.sub(_REDACTED, text)

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is not None:
            if isinstance(record.msg, str):
                record.msg = self.redact(record.msg)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {
                        k: self.redact(v) if isinstance(v, str) else v
                        for k, v in record.args.items()
                    }
                elif isinstance(record.args, tuple):
                    record.args = tuple(
                        self.redact(a) if isinstance(a, str) else a for a in record.args
                    )
        return True


# Module-level singleton so resolver can register values at resolve time.
secret_redaction_filter = SecretRedactionFilter()

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_stderr": {
            "format": "%(asctime)s - %(name)25s:%(lineno)-4d - %(levelname)-7s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "stderr_handler": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "simple_stderr",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "taemno_os": {
            "handlers": ["stderr_handler"],
            "propagate": False,
            "level": DEFAULT_LOG_LEVEL,
        },
        "keyring": {
            "handlers": ["stderr_handler"],
            "propagate": False,
            "level": "WARNING",
        },
    },
    "root": {
        "handlers": ["stderr_handler"],
        "level": "WARNING",
    },
}


def setup_logging(log_lvl_str: str = DEFAULT_LOG_LEVEL) -> str:
    """
    Set up the logging system.

    Log records go to stderr so that ``resolve`` output on stdout stays
    machine-readable.  Every handler gets the secret redaction filter.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').

    Returns:
        The validated log level.
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in VALID_LEVELS:
        print(
            f"Warning: invalid log level '{log_lvl_str}'. Using '{DEFAULT_LOG_LEVEL}'.",
            file=sys.stderr,
        )
        log_lvl_valid = DEFAULT_LOG_LEVEL

    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    log_cfg["loggers"]["taemno_os"]["level"] = log_lvl_valid
    log_cfg["loggers"]["keyring"]["level"] = "DEBUG" if log_lvl_valid == "DEBUG" else "WARNING"
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    logging.config.dictConfig(log_cfg)
    # Attach secret redaction filter to all handlers
    for name in ("", "taemno_os", "keyring"):
        for handler in logging.getLogger(name).handlers:
            handler.addFilter(secret_redaction_filter)

    return log_lvl_valid
