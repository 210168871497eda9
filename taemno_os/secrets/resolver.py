"""Secret resolver — replaces embedded secret references in environment values.

Usage::

    from taemno_os.secrets.providers import create_provider
    from taemno_os.secrets.resolver import resolve_environment

    env = {"DATABASE_URL": "postgres://app:$(taemno os://db/app)@localhost/app"}
    resolved = resolve_environment(env, create_provider())
    # resolved["DATABASE_URL"] == "postgres://app:<secret>@localhost/app"

Values that contain no reference, and values that are not strings, are
copied through unchanged.  :func:`verify_environment` performs the same
scan without retrieving anything and reports which secrets are absent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from taemno_os.constants import DEFAULT_ENV_PREFIX, DEFAULT_ENV_SUFFIX
from taemno_os.display.logging_config import secret_redaction_filter
from taemno_os.errors import SecretResolutionError
from taemno_os.secrets.providers import SecretProvider
from taemno_os.secrets.reference import ReferenceMatcher, SecretReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissingSecret:
    """A reference whose backing secret is not stored."""

    key: str
    service: str
    account: str


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of :func:`verify_environment`."""

    missing_secrets: Tuple[MissingSecret, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return not self.missing_secrets

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "missingSecrets": [
                {"key": m.key, "service": m.service, "account": m.account}
                for m in self.missing_secrets
            ],
        }


def _matcher(
    prefix: str, suffix: str, matcher: Optional[ReferenceMatcher]
) -> ReferenceMatcher:
    return matcher if matcher is not None else ReferenceMatcher(prefix, suffix)


def resolve_environment(
    env: Mapping[str, Any],
    provider: SecretProvider,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    suffix: str = DEFAULT_ENV_SUFFIX,
    matcher: Optional[ReferenceMatcher] = None,
) -> Dict[str, Any]:
    """Return a copy of *env* with every secret reference substituted.

    Parameters
    ----------
    env:
        The key/value mapping to resolve (not mutated — a copy is returned).
    provider:
        Backend used to ``get`` each referenced secret.
    prefix, suffix:
        Reference delimiters; ignored when *matcher* is given.

    Raises
    ------
    SecretResolutionError
        If the provider fails for any reference.  No partial mapping is
        returned.
    MalformedReferenceError
        If a reference does not name both a service and an account.
    """
    ref_matcher = _matcher(prefix, suffix, matcher)
    # Each distinct (service, account) is fetched once per call.
    fetched: Dict[Tuple[str, str], str] = {}
    resolved: Dict[str, Any] = {}

    for key, value in env.items():
        if not isinstance(value, str):
            resolved[key] = value
            continue

        refs = list(ref_matcher.references(value, key=key))
        if not refs:
            resolved[key] = value
            continue

        secrets_by_text: Dict[str, str] = {}
        for ref in refs:
            if ref.full_text in secrets_by_text:
                continue
            if ref.pair not in fetched:
                fetched[ref.pair] = _fetch(provider, key, ref)
            secrets_by_text[ref.full_text] = fetched[ref.pair]

        # Single left-to-right pass; substituted secrets are not rescanned.
        resolved[key] = ref_matcher.pattern.sub(
            lambda m: secrets_by_text[m.group(0)], value
        )
        logger.debug("Resolved %d secret reference(s) in %s", len(refs), key)

    return resolved


def _fetch(provider: SecretProvider, key: str, ref: SecretReference) -> str:
    try:
        secret = provider.get(ref.service, ref.account)
    except Exception as exc:
        logger.debug(
            "Could not resolve %s/%s referenced by %s: %s", ref.service, ref.account, key, exc
        )
        raise SecretResolutionError(key, reference=ref.full_text, orig_exc=exc) from exc

    # Register the resolved value for log redaction
    secret_redaction_filter.register(secret)
    return secret


def verify_environment(
    env: Mapping[str, Any],
    provider: SecretProvider,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    suffix: str = DEFAULT_ENV_SUFFIX,
    matcher: Optional[ReferenceMatcher] = None,
) -> VerificationResult:
    """Check that every referenced secret in *env* exists.

    Only ``provider.exists`` is called, once per distinct
    (service, account).  Every reference whose secret is absent is
    reported, in encounter order, so a repeated reference appears once
    per occurrence.
    An ``exists`` call that raises aborts verification.
    """
    ref_matcher = _matcher(prefix, suffix, matcher)
    present: Dict[Tuple[str, str], bool] = {}
    missing: List[MissingSecret] = []

    for key, value in env.items():
        if not isinstance(value, str):
            continue
        for ref in ref_matcher.references(value, key=key):
            if ref.pair not in present:
                present[ref.pair] = provider.exists(ref.service, ref.account)
            if present[ref.pair]:
                continue
            missing.append(MissingSecret(key=key, service=ref.service, account=ref.account))

    if missing:
        logger.info("%d referenced secret(s) missing", len(missing))
    return VerificationResult(missing_secrets=tuple(missing))


def find_secret_references(
    env: Mapping[str, Any],
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    suffix: str = DEFAULT_ENV_SUFFIX,
) -> List[Tuple[str, SecretReference]]:
    """Return ``(key, reference)`` for every reference in *env*, in order."""
    ref_matcher = ReferenceMatcher(prefix, suffix)
    refs: List[Tuple[str, SecretReference]] = []
    for key, value in env.items():
        if isinstance(value, str):
            refs.extend((key, ref) for ref in ref_matcher.references(value, key=key))
    return refs
