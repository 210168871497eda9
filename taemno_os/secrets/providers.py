"""Secret storage providers — platform backends for secret retrieval.

Providers implement a simple interface::

    class SecretProvider:
        def set(self, service: str, account: str, secret: str) -> bool: ...
        def get(self, service: str, account: str) -> str: ...
        def exists(self, service: str, account: str) -> bool: ...
        def delete(self, service: str, account: str) -> bool: ...

``get`` raises :class:`SecretNotFoundError` for a missing secret;
``exists`` returns ``False`` for it.  Any other backend failure raises
:class:`ProviderBackendError`.

Built-in providers:

* ``KeychainProvider`` — macOS Keychain via ``/usr/bin/security``
* ``KeyringProvider`` — Linux Secret Service / Windows Credential Manager
  (via ``keyring`` package)
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Union

import keyring
from keyring.errors import PasswordDeleteError

from taemno_os.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    MAX_IDENTIFIER_LENGTH,
    SECURITY_COMMAND,
)
from taemno_os.errors import (
    ConfigurationError,
    InvalidInputError,
    ProviderBackendError,
    SecretNotFoundError,
    UnsupportedPlatformError,
)

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9._\-@#]+$")


def is_valid_identifier(value: object) -> bool:
    """Return ``True`` if *value* is safe to hand to a backend command."""
    return (
        isinstance(value, str)
        and len(value) <= MAX_IDENTIFIER_LENGTH
        and _IDENTIFIER_RE.match(value) is not None
    )


def validate_inputs(service: str, account: str) -> None:
    """Reject identifiers that could inject arguments into a backend call."""
    if not is_valid_identifier(service):
        raise InvalidInputError("service")
    if not is_valid_identifier(account):
        raise InvalidInputError("account")


class SecretProvider(ABC):
    """Abstract base class for secure-storage backends."""

    name = "abstract"

    @abstractmethod
    def set(self, service: str, account: str, secret: str) -> bool:
        """Store *secret*, replacing any existing value."""

    @abstractmethod
    def get(self, service: str, account: str) -> str:
        """Retrieve a secret, or raise :class:`SecretNotFoundError`."""

    @abstractmethod
    def exists(self, service: str, account: str) -> bool:
        """Return whether a secret is stored.  Only backend failures raise."""

    @abstractmethod
    def delete(self, service: str, account: str) -> bool:
        """Remove a secret.  Returns ``False`` if nothing was stored."""


# ── macOS Keychain provider ──────────────────────────────────────────────


class KeychainProvider(SecretProvider):
    """Stores generic passwords in the macOS Keychain.

    Every operation runs ``/usr/bin/security`` with an argument list (no
    shell) against the user's default keychain.  The secret itself is
    written to the child's stdin, so it never appears in the process table.

    Parameters
    ----------
    timeout:
        Seconds to wait for each ``security`` invocation.
    command:
        Path to the ``security`` binary.
    """

    name = "keychain"

    # errSecItemNotFound, as reported by security(1)
    ITEM_NOT_FOUND_EXIT = 44

    def __init__(
        self,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        command: str = SECURITY_COMMAND,
    ) -> None:
        self._timeout = timeout
        self._command = command

    def _args(self, action: str, service: str, account: str, *options: str) -> List[str]:
        return [self._command, action, "-s", service, "-a", account, *options]

    def _run(
        self, args: List[str], stdin: Optional[str] = None
    ) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                args,
                input=stdin,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProviderBackendError(
                f"'{args[1]}' timed out after {self._timeout}s", backend=self.name, orig_exc=exc
            ) from exc
        except OSError as exc:
            raise ProviderBackendError(
                f"could not run {self._command}", backend=self.name, orig_exc=exc
            ) from exc

    def _fail(self, action: str, proc: subprocess.CompletedProcess) -> ProviderBackendError:
        stderr = (proc.stderr or "").strip()
        return ProviderBackendError(
            f"'{action}' exited with status {proc.returncode}: {stderr}",
            backend=self.name,
        )

    def set(self, service: str, account: str, secret: str) -> bool:
        validate_inputs(service, account)
        # Replace rather than update, so attributes from an older item are dropped.
        self.delete(service, account)
        # A trailing -w makes security prompt for the password (and a retype).
        proc = self._run(
            self._args("add-generic-password", service, account, "-U", "-w"),
            stdin=f"{secret}\n{secret}\n",
        )
        if proc.returncode != 0:
            raise self._fail("add-generic-password", proc)
        logger.debug("Stored keychain item %s/%s", service, account)
        return True

    def get(self, service: str, account: str) -> str:
        validate_inputs(service, account)
        proc = self._run(self._args("find-generic-password", service, account, "-w"))
        if proc.returncode == self.ITEM_NOT_FOUND_EXIT:
            raise SecretNotFoundError(service, account)
        if proc.returncode != 0:
            raise self._fail("find-generic-password", proc)
        return proc.stdout.rstrip("\n")

    def exists(self, service: str, account: str) -> bool:
        try:
            self.get(service, account)
        except SecretNotFoundError:
            return False
        return True

    def delete(self, service: str, account: str) -> bool:
        validate_inputs(service, account)
        proc = self._run(self._args("delete-generic-password", service, account))
        if proc.returncode == self.ITEM_NOT_FOUND_EXIT:
            return False
        if proc.returncode != 0:
            raise self._fail("delete-generic-password", proc)
        logger.debug("Deleted keychain item %s/%s", service, account)
        return True


# ── OS keyring provider ─────────────────────────────────────────────────


class KeyringProvider(SecretProvider):
    """Uses the OS keyring (GNOME Keyring / KWallet, Windows Credential Manager).

    The ``keyring`` package picks the concrete backend for the platform.
    """

    name = "keyring"

    def __init__(self, backend: Optional[object] = None) -> None:
        # None -> the keyring module's configured default backend
        self._keyring = backend if backend is not None else keyring

    # Backends also raise non-keyring errors (D-Bus, OSError); all become
    # ProviderBackendError.
    def _backend_error(self, action: str, exc: Exception) -> ProviderBackendError:
        return ProviderBackendError(f"{action} failed: {exc}", backend=self.name, orig_exc=exc)

    def set(self, service: str, account: str, secret: str) -> bool:
        validate_inputs(service, account)
        try:
            self._keyring.set_password(service, account, secret)  # type: ignore[union-attr]
        except Exception as exc:
            raise self._backend_error("set_password", exc) from exc
        logger.debug("Stored keyring item %s/%s", service, account)
        return True

    def get(self, service: str, account: str) -> str:
        validate_inputs(service, account)
        try:
            value = self._keyring.get_password(service, account)  # type: ignore[union-attr]
        except Exception as exc:
            raise self._backend_error("get_password", exc) from exc
        if value is None:
            raise SecretNotFoundError(service, account)
        return value

    def exists(self, service: str, account: str) -> bool:
        try:
            self.get(service, account)
        except SecretNotFoundError:
            return False
        return True

    def delete(self, service: str, account: str) -> bool:
        validate_inputs(service, account)
        try:
            self._keyring.delete_password(service, account)  # type: ignore[union-attr]
        except PasswordDeleteError:
            return False
        except Exception as exc:
            raise self._backend_error("delete_password", exc) from exc
        logger.debug("Deleted keyring item %s/%s", service, account)
        return True


# ── Platform selection ───────────────────────────────────────────────────


class Platform(str, Enum):
    """Platforms with a native secure-storage backend."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "win32"

    @classmethod
    def detect(cls, platform_name: Optional[str] = None) -> "Platform":
        """Map ``sys.platform`` (or *platform_name*) onto a supported platform."""
        name = platform_name if platform_name is not None else sys.platform
        if name.startswith("linux"):
            return cls.LINUX
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedPlatformError(name) from None


_BACKENDS = ("auto", "keychain", "keyring")


def create_provider(
    platform: Union[Platform, str, None] = None,
    *,
    backend: str = "auto",
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> SecretProvider:
    """Factory for secret providers.

    With ``backend="auto"`` the provider is chosen from *platform*
    (detected when omitted): the Keychain on macOS, the OS keyring on
    Linux and Windows.
    """
    if backend not in _BACKENDS:
        raise ConfigurationError(f"Unknown secret provider backend: {backend!r}")

    if isinstance(platform, Platform):
        resolved = platform
    else:
        resolved = Platform.detect(platform)

    if backend == "keyring":
        logger.debug("Using keyring provider (forced) on %s", resolved.value)
        return KeyringProvider()

    if resolved is Platform.DARWIN:
        logger.debug("Using macOS keychain provider")
        return KeychainProvider(timeout=timeout)

    if backend == "keychain":
        raise ConfigurationError(
            f"The keychain backend is only available on macOS (platform: {resolved.value})"
        )
    logger.debug("Using keyring provider on %s", resolved.value)
    return KeyringProvider()
