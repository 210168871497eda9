"""Secret storage and reference resolution.

Provides a uniform facade over the OS secure-storage backends, with
resolution of ``$(taemno os://service/account)`` references in
environment values.
"""

from taemno_os.secrets.providers import (
    KeychainProvider,
    KeyringProvider,
    Platform,
    SecretProvider,
    create_provider,
)
from taemno_os.secrets.reference import ReferenceMatcher, SecretReference
from taemno_os.secrets.resolver import (
    MissingSecret,
    VerificationResult,
    find_secret_references,
    resolve_environment,
    verify_environment,
)
from taemno_os.secrets.store import SecretStore, TaemnoOS

__all__ = [
    "KeychainProvider",
    "KeyringProvider",
    "MissingSecret",
    "Platform",
    "ReferenceMatcher",
    "SecretProvider",
    "SecretReference",
    "SecretStore",
    "TaemnoOS",
    "VerificationResult",
    "create_provider",
    "find_secret_references",
    "resolve_environment",
    "verify_environment",
]
