"""
taemno-os - Secure secrets management across operating systems.

Stores secrets in the platform's native secure storage (macOS Keychain,
Linux Secret Service, Windows Credential Manager) and resolves
``$(taemno os://service/account)`` references embedded in environment
values.
"""

from taemno_os.constants import APP_NAME, APP_VERSION
from taemno_os.secrets.store import SecretStore, TaemnoOS

__version__ = APP_VERSION
__app_name__ = APP_NAME

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "SecretStore",
    "TaemnoOS",
    "__version__",
    "__app_name__",
]
