"""Secret store — high-level API for secret management.

Combines a :class:`SecretProvider` backend with environment resolution
and verification.  The provider is injected; :meth:`SecretStore.from_config`
is the composition point that picks one for the running platform.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from taemno_os.constants import DEFAULT_ENV_PREFIX, DEFAULT_ENV_SUFFIX
from taemno_os.display.logging_config import secret_redaction_filter
from taemno_os.secrets.providers import SecretProvider, create_provider
from taemno_os.secrets.reference import ReferenceMatcher
from taemno_os.secrets.resolver import (
    VerificationResult,
    resolve_environment,
    verify_environment,
)

logger = logging.getLogger(__name__)


class SecretStore:
    """Unified secret management facade.

    Parameters
    ----------
    provider:
        The backend every operation is forwarded to.
    env_prefix, env_suffix:
        Delimiters of secret references inside environment values.
    """

    def __init__(
        self,
        provider: SecretProvider,
        *,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        env_suffix: str = DEFAULT_ENV_SUFFIX,
    ) -> None:
        self._provider = provider
        self._matcher = ReferenceMatcher(env_prefix, env_suffix)

    @property
    def provider(self) -> SecretProvider:
        return self._provider

    @property
    def matcher(self) -> ReferenceMatcher:
        return self._matcher

    def set(self, service: str, account: str, secret: str) -> bool:
        """Store or update a secret."""
        result = self._provider.set(service, account, secret)
        # nosemgrep: python-logger-credential-disclosure (logs name, not value)
        logger.debug("Secret '%s/%s' stored via %s provider", service, account, self._provider.name)
        return result

    def get(self, service: str, account: str) -> str:
        """Retrieve a secret value."""
        secret = self._provider.get(service, account)
        secret_redaction_filter.register(secret)
        return secret

    def exists(self, service: str, account: str) -> bool:
        """Check whether a secret exists."""
        return self._provider.exists(service, account)

    def delete(self, service: str, account: str) -> bool:
        """Delete a secret."""
        result = self._provider.delete(service, account)
        logger.debug(
            "Secret '%s/%s' delete via %s provider: %s",
            service,
            account,
            self._provider.name,
            "removed" if result else "not found",
        )
        return result

    def resolve_environment(self, env: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Substitute secret references in *env* (default: ``os.environ``)."""
        env = os.environ if env is None else env
        return resolve_environment(env, self._provider, matcher=self._matcher)

    def verify_environment(self, env: Optional[Mapping[str, Any]] = None) -> VerificationResult:
        """Report referenced secrets in *env* (default: ``os.environ``) that are missing."""
        env = os.environ if env is None else env
        return verify_environment(env, self._provider, matcher=self._matcher)

    @classmethod
    def from_config(cls, config: Any, platform: Optional[str] = None) -> "SecretStore":
        """Create a SecretStore from a :class:`TaemnoConfig`.

        The platform is detected from ``sys.platform`` unless given.
        """
        provider = create_provider(
            platform,
            backend=config.provider,
            timeout=config.command_timeout,
        )
        return cls(provider, env_prefix=config.env_prefix, env_suffix=config.env_suffix)

    def __repr__(self) -> str:
        return f"SecretStore(provider={self._provider.name!r}, matcher={self._matcher!r})"


# Alias matching the CLI and package name.
TaemnoOS = SecretStore
