"""Secret reference syntax — finds ``<prefix><service>/<account><suffix>`` in text.

Usage::

    from taemno_os.secrets.reference import ReferenceMatcher

    matcher = ReferenceMatcher()
    refs = list(matcher.references("pre-$(taemno os://github/token)-post"))
    # refs[0].service == "github", refs[0].account == "token"

Prefix and suffix are matched literally; any regex metacharacters they
contain are escaped before the pattern is compiled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from taemno_os.constants import DEFAULT_ENV_PREFIX, DEFAULT_ENV_SUFFIX, REFERENCE_SEPARATOR
from taemno_os.errors import ConfigurationError, MalformedReferenceError


@dataclass(frozen=True)
class ReferenceMatch:
    """A raw match: the full reference text and the text between prefix and suffix."""

    full_text: str
    capture: str
    start: int
    end: int


@dataclass(frozen=True)
class SecretReference:
    """A parsed reference designating one (service, account) pair."""

    full_text: str
    service: str
    account: str

    @property
    def pair(self) -> tuple[str, str]:
        return (self.service, self.account)


class ReferenceMatcher:
    """Lazy, non-overlapping matcher for embedded secret references.

    Parameters
    ----------
    prefix:
        Literal text opening a reference (default ``$(taemno os://``).
    suffix:
        Literal text closing a reference (default ``)``).  The capture
        stops at the first suffix after the prefix.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_ENV_PREFIX,
        suffix: str = DEFAULT_ENV_SUFFIX,
    ) -> None:
        if not prefix or not suffix:
            raise ConfigurationError("Reference prefix and suffix must be non-empty.")
        self._prefix = prefix
        self._suffix = suffix
        # Empty captures are matched on purpose so they can be rejected.
        self._pattern = re.compile(f"{re.escape(prefix)}(.*?){re.escape(suffix)}")

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def suffix(self) -> str:
        return self._suffix

    @property
    def pattern(self) -> re.Pattern[str]:
        return self._pattern

    def find_all(self, text: str) -> Iterator[ReferenceMatch]:
        """Yield every reference in *text*, left to right."""
        for m in self._pattern.finditer(text):
            yield ReferenceMatch(
                full_text=m.group(0),
                capture=m.group(1),
                start=m.start(),
                end=m.end(),
            )

    def parse(self, match: ReferenceMatch, key: Optional[str] = None) -> SecretReference:
        """Split a match's capture on the first ``/`` into service and account.

        Raises :class:`MalformedReferenceError` when the separator is
        missing or either half is empty.
        """
        service, sep, account = match.capture.partition(REFERENCE_SEPARATOR)
        if not sep or not service or not account:
            raise MalformedReferenceError(match.full_text, key=key)
        return SecretReference(full_text=match.full_text, service=service, account=account)

    def references(self, text: str, key: Optional[str] = None) -> Iterator[SecretReference]:
        """Yield parsed references in *text*, left to right."""
        for match in self.find_all(text):
            yield self.parse(match, key=key)

    def contains_reference(self, text: str) -> bool:
        return self._pattern.search(text) is not None

    def format(self, service: str, account: str) -> str:
        """Build the reference text designating *service*/*account*."""
        return f"{self._prefix}{service}{REFERENCE_SEPARATOR}{account}{self._suffix}"

    def __repr__(self) -> str:
        return f"ReferenceMatcher(prefix={self._prefix!r}, suffix={self._suffix!r})"
