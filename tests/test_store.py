"""Tests for the SecretStore facade."""

import pytest

from taemno_os.config.schema import TaemnoConfig
from taemno_os.display.logging_config import secret_redaction_filter
from taemno_os.errors import ProviderBackendError, SecretNotFoundError
from taemno_os.secrets.providers import KeychainProvider, KeyringProvider
from taemno_os.secrets.store import SecretStore, TaemnoOS


class TestPassThrough:
    def test_set(self, provider):
        store = SecretStore(provider)
        assert store.set("service", "account", "secret") is True
        assert provider.calls == [("set", ("service", "account", "secret"))]

    def test_get(self, provider):
        store = SecretStore(provider)
        assert store.get("service", "account") == "test-secret"
        assert provider.calls == [("get", ("service", "account"))]

    def test_get_registers_secret_for_redaction(self, provider):
        SecretStore(provider).get("service", "account")
        assert secret_redaction_filter.redact("token=test-secret") == "token=***REDACTED***"

    def test_exists(self, provider):
        store = SecretStore(provider)
        assert store.exists("service", "account") is True
        assert store.exists("missing", "account") is False

    def test_delete(self, provider):
        store = SecretStore(provider)
        assert store.delete("service", "account") is True
        assert store.delete("service", "account") is False

    def test_round_trip(self, provider):
        store = SecretStore(provider)
        store.set("app", "token", "abc123")
        assert store.get("app", "token") == "abc123"
        store.delete("app", "token")
        assert store.exists("app", "token") is False

    def test_errors_surface_unchanged(self, provider):
        store = SecretStore(provider)
        with pytest.raises(SecretNotFoundError):
            store.get("nope", "none")
        provider.broken = True
        with pytest.raises(ProviderBackendError):
            store.delete("service", "account")


class TestEnvironment:
    def test_resolve(self, provider):
        store = SecretStore(provider)
        env = {"TOKEN": "Bearer $(taemno os://service/account)"}
        assert store.resolve_environment(env) == {"TOKEN": "Bearer test-secret"}

    def test_resolve_defaults_to_process_env(self, provider, monkeypatch):
        monkeypatch.setenv("TAEMNO_TEST_REF", "$(taemno os://service1/account1)")
        resolved = SecretStore(provider).resolve_environment()
        assert resolved["TAEMNO_TEST_REF"] == "secret1"

    def test_verify(self, provider):
        store = SecretStore(provider)
        result = store.verify_environment({"A": "$(taemno os://missing/x)"})
        assert not result.success
        assert result.missing_secrets[0].key == "A"

    def test_custom_syntax(self, provider):
        store = SecretStore(provider, env_prefix="{{secret:", env_suffix="}}")
        assert store.resolve_environment({"K": "{{secret:service/account}}"}) == {"K": "test-secret"}
        assert store.verify_environment({"K": "$(taemno os://missing/x)"}).success


class TestFromConfig:
    def test_darwin(self):
        store = SecretStore.from_config(TaemnoConfig(), platform="darwin")
        assert isinstance(store.provider, KeychainProvider)

    def test_linux(self):
        store = SecretStore.from_config(TaemnoConfig(env_prefix="$(os://"), platform="linux")
        assert isinstance(store.provider, KeyringProvider)
        assert store.matcher.prefix == "$(os://"

    def test_alias(self):
        assert TaemnoOS is SecretStore
