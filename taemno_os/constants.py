"""Shared constants for taemno-os."""

APP_NAME = "taemno-os"
APP_VERSION = "0.1.0"

# Secret reference syntax defaults: $(taemno os://service/account)
DEFAULT_ENV_PREFIX = "$(taemno os://"
DEFAULT_ENV_SUFFIX = ")"
REFERENCE_SEPARATOR = "/"

# Provider backends
SECURITY_COMMAND = "/usr/bin/security"
DEFAULT_COMMAND_TIMEOUT = 10.0  # seconds for a single keychain subprocess call
MAX_IDENTIFIER_LENGTH = 255

# Configuration
CONFIG_ENV_VAR = "TAEMNO_CONFIG"
DEFAULT_CONFIG_PATH = "~/.config/taemno-os/config.yaml"

# Logging defaults
DEFAULT_LOG_LEVEL = "WARNING"
