"""Custom exception classes for taemno-os."""

from typing import Optional


class TaemnoError(Exception):
    """Base class for all custom exceptions in taemno-os."""

    pass


class ConfigurationError(TaemnoError):
    """Raised when loading or validating configuration fails."""

    pass


class UnsupportedPlatformError(ConfigurationError):
    """Raised when no secret provider exists for the running platform."""

    def __init__(self, platform_name: str):
        self.platform_name = platform_name
        super().__init__(f"Unsupported platform: {platform_name}")


class ProviderError(TaemnoError):
    """Base class for failures raised by a secret provider."""

    pass


class ProviderBackendError(ProviderError):
    """
    Raised when the underlying secure-storage backend fails for any
    reason other than the secret not being found.
    """

    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        orig_exc: Optional[BaseException] = None,
    ):
        self.backend = backend
        self.orig_exc = orig_exc

        full_msg = "Secret backend error"
        if backend:
            full_msg += f" (backend: {backend})"
        full_msg += f": {message}"
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__})"
        super().__init__(full_msg)


class SecretNotFoundError(ProviderError):
    """Raised by ``get`` when no secret is stored for (service, account)."""

    def __init__(self, service: str, account: str):
        self.service = service
        self.account = account
        super().__init__(f"Secret not found: {service}/{account}")


class InvalidInputError(ProviderError):
    """
    Raised before any backend call when a service or account
    name fails input sanitization.
    """

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Invalid {field} name")


class MalformedReferenceError(TaemnoError):
    """
    Raised when a matched reference does not split into a non-empty
    service and a non-empty account.
    """

    def __init__(self, text: str, key: Optional[str] = None):
        self.text = text
        self.key = key

        full_msg = f"Malformed secret reference '{text}'"
        if key is not None:
            full_msg += f" in {key}"
        full_msg += ": expected <service>/<account>"
        super().__init__(full_msg)


class SecretResolutionError(TaemnoError):
    """Raised when a referenced secret cannot be retrieved during resolution."""

    def __init__(
        self,
        key: str,
        reference: Optional[str] = None,
        orig_exc: Optional[BaseException] = None,
    ):
        self.key = key
        self.reference = reference
        self.orig_exc = orig_exc

        full_msg = f"Failed to resolve secret for {key}"
        if orig_exc is not None:
            full_msg += f": {orig_exc}"
        super().__init__(full_msg)
