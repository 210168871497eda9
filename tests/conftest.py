"""Shared fixtures: an in-memory provider that records every call."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pytest

from taemno_os.display.logging_config import secret_redaction_filter
from taemno_os.errors import ProviderBackendError, SecretNotFoundError
from taemno_os.secrets.providers import SecretProvider


class FakeProvider(SecretProvider):
    """Dictionary-backed provider used as a test double."""

    name = "fake"

    def __init__(self, secrets: Optional[Dict[Tuple[str, str], str]] = None) -> None:
        self.secrets: Dict[Tuple[str, str], str] = dict(secrets or {})
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []
        self.broken = False

    def _record(self, op: str, *args: str) -> None:
        self.calls.append((op, args))
        if self.broken:
            raise ProviderBackendError("backend offline", backend=self.name)

    def calls_to(self, op: str) -> List[Tuple[str, ...]]:
        return [args for name, args in self.calls if name == op]

    def set(self, service: str, account: str, secret: str) -> bool:
        self._record("set", service, account, secret)
        self.secrets[(service, account)] = secret
        return True

    def get(self, service: str, account: str) -> str:
        self._record("get", service, account)
        try:
            return self.secrets[(service, account)]
        except KeyError:
            raise SecretNotFoundError(service, account) from None

    def exists(self, service: str, account: str) -> bool:
        self._record("exists", service, account)
        return (service, account) in self.secrets

    def delete(self, service: str, account: str) -> bool:
        self._record("delete", service, account)
        return self.secrets.pop((service, account), None) is not None


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        {
            ("service", "account"): "test-secret",
            ("service1", "account1"): "secret1",
            ("service2", "account2"): "secret2",
        }
    )


@pytest.fixture(autouse=True)
def _reset_redaction():
    yield
    secret_redaction_filter.clear()
