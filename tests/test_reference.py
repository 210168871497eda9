"""Tests for the secret reference matcher."""

import pytest

from taemno_os.errors import ConfigurationError, MalformedReferenceError
from taemno_os.secrets.reference import ReferenceMatcher, SecretReference


class TestFindAll:
    def test_no_references(self):
        assert list(ReferenceMatcher().find_all("plain value")) == []

    def test_single_reference(self):
        matches = list(ReferenceMatcher().find_all("pre-$(taemno os://svc/acct)-post"))
        assert len(matches) == 1
        assert matches[0].full_text == "$(taemno os://svc/acct)"
        assert matches[0].capture == "svc/acct"
        assert matches[0].start == 4

    def test_lazy_capture_stops_at_first_suffix(self):
        text = "$(taemno os://a/b) and (x) $(taemno os://c/d)"
        captures = [m.capture for m in ReferenceMatcher().find_all(text)]
        assert captures == ["a/b", "c/d"]

    def test_restartable(self):
        matcher = ReferenceMatcher()
        text = "$(taemno os://a/b)"
        assert list(matcher.find_all(text)) == list(matcher.find_all(text))

    def test_empty_capture_is_matched(self):
        matches = list(ReferenceMatcher().find_all("$(taemno os://)"))
        assert [m.capture for m in matches] == [""]

    def test_metacharacters_are_literal(self):
        matcher = ReferenceMatcher(prefix="[[*", suffix="+]]")
        matches = list(matcher.find_all("x=[[*svc/acct+]] y=[[svc/acct]]"))
        assert [m.capture for m in matches] == ["svc/acct"]

    def test_custom_short_syntax(self):
        matcher = ReferenceMatcher(prefix="$(os://", suffix=")")
        refs = list(matcher.references("pre-$(os://svc/acct)-post"))
        assert refs == [SecretReference("$(os://svc/acct)", "svc", "acct")]


class TestParse:
    def test_splits_on_first_separator(self):
        refs = list(ReferenceMatcher().references("$(taemno os://svc/nested/acct)"))
        assert refs[0].service == "svc"
        assert refs[0].account == "nested/acct"

    @pytest.mark.parametrize(
        "text",
        [
            "$(taemno os://onlyservice)",
            "$(taemno os:///account)",
            "$(taemno os://service/)",
            "$(taemno os://)",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(MalformedReferenceError, match="Malformed"):
            list(ReferenceMatcher().references(text, key="KEY"))

    def test_malformed_carries_key(self):
        with pytest.raises(MalformedReferenceError) as exc_info:
            list(ReferenceMatcher().references("$(taemno os://nope)", key="API_KEY"))
        assert exc_info.value.key == "API_KEY"
        assert exc_info.value.text == "$(taemno os://nope)"


class TestMatcherConfig:
    def test_empty_prefix_rejected(self):
        with pytest.raises(ConfigurationError):
            ReferenceMatcher(prefix="")

    def test_empty_suffix_rejected(self):
        with pytest.raises(ConfigurationError):
            ReferenceMatcher(suffix="")

    def test_format_round_trips(self):
        matcher = ReferenceMatcher()
        text = matcher.format("github", "token")
        assert text == "$(taemno os://github/token)"
        assert list(matcher.references(text)) == [SecretReference(text, "github", "token")]

    def test_contains_reference(self):
        matcher = ReferenceMatcher()
        assert matcher.contains_reference("x $(taemno os://a/b)")
        assert not matcher.contains_reference("x $(other://a/b)")
