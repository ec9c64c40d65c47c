"""End-to-end resolution of configuration files through ``read_file``.

Covers both ingestion paths (YAML and Jsonnet), both schema versions, and the
error surface callers rely on (not-found classification and details).
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from lib_versioned_config import (
    LATEST_VERSION,
    ConfigError,
    ExpressionError,
    LegacyParseError,
    ParseError,
    UnknownFieldError,
    UnsupportedVersionError,
    details,
    find_error,
    is_not_found,
    read_bytes,
    read_file,
    read_version,
    with_cause,
)
from lib_versioned_config.domain import v1alpha2
from lib_versioned_config.domain.schema import strict_decode

LATEST_DOC = """\
version: v1alpha2
author:
  name: Ada
  email: ada@example.com
labels:
  - name: news
rules:
  - filter:
      or:
        - from: news@example.com
        - list: announce@example.com
    actions:
      archive: true
      labels: [news]
"""

LEGACY_DOC = """\
version: v1alpha1
author:
  name: Ada
consts:
  news:
    values: [news@example.com, digest@example.com]
filters:
  - filters:
      consts:
        from: [news]
    actions:
      archive: true
      labels: [news]
"""


class FakeEvaluator:
    """Records calls and returns a fixed JSON document."""

    def __init__(self, output: str) -> None:
        self.output = output
        self.calls: list[tuple[str, str]] = []

    def evaluate(self, label: str, source: str) -> str:
        self.calls.append((label, source))
        return self.output


class FailingEvaluator:
    def evaluate(self, label: str, source: str) -> str:
        raise with_cause(ExpressionError("invalid jsonnet"), RuntimeError(f"{label}:1:1 syntax error"))


class CrashingEvaluator:
    """Raises a plain exception, as a third-party evaluator might."""

    def evaluate(self, label: str, source: str) -> str:
        raise RuntimeError(f"{label}:1:1 syntax error")


def write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_latest_document_equals_strict_decode(tmp_path: Path) -> None:
    config = read_file(write(tmp_path / "config.yaml", LATEST_DOC))
    assert config == strict_decode(v1alpha2.Config, yaml.safe_load(LATEST_DOC))
    assert config.version == LATEST_VERSION == "v1alpha2"
    assert config.rules[0].filter.or_[1].list_ == "announce@example.com"


def test_legacy_document_is_upgraded(tmp_path: Path) -> None:
    config = read_file(write(tmp_path / "config.yml", LEGACY_DOC))
    assert config.version == "v1alpha2"
    assert config.author.name == "Ada"
    rule = config.rules[0]
    assert [node.from_ for node in rule.filter.or_] == ["news@example.com", "digest@example.com"]
    assert rule.actions.archive is True
    assert rule.actions.labels == ["news"]


def test_minimal_legacy_example() -> None:
    config = read_bytes(b"version: v1alpha1\nauthor:\n  name: x\n")
    assert config.version == "v1alpha2"
    assert config.author.name == "x"


@pytest.mark.parametrize("content", ["author:\n  name: x\n", "version: v3\n", "version: ''\n", ""])
def test_missing_or_unknown_version_is_rejected(content: str) -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(content.encode("utf-8"), hint=".yaml")
    err = excinfo.value
    assert find_error(err, UnsupportedVersionError) is not None
    assert "supported versions: v1alpha2, v1alpha1" in details(err)


def test_unknown_version_tag_is_reported() -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"version: v0\nrules: []\n")
    assert find_error(excinfo.value, UnsupportedVersionError).version == "v0"
    assert str(excinfo.value) == "unsupported version 'v0'"


def test_unknown_field_at_latest_version_is_rejected() -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"version: v1alpha2\nfilters: []\n")
    err = excinfo.value
    assert find_error(err, UnknownFieldError) is not None
    assert "check the field names for typos" in details(err)


def test_same_field_is_valid_at_predecessor_version() -> None:
    config = read_bytes(b"version: v1alpha1\nfilters: []\n")
    assert config.rules == []


def test_invalid_legacy_document_reports_legacy_symptom() -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"version: v1alpha1\nrules: []\n")
    err = excinfo.value
    assert find_error(err, LegacyParseError) is not None
    assert str(err).startswith("error parsing v1alpha1 config")
    assert details(err)


def test_invalid_yaml_is_a_version_parse_error() -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"version: [v1alpha2\n")
    err = excinfo.value
    assert str(err).startswith("error parsing the config version: invalid YAML")
    assert find_error(err, ParseError) is not None
    assert "top-level 'version' field" in details(err)


def test_garbled_body_with_valid_version_fails_after_sniffing() -> None:
    payload = b"version: v1alpha2\nrules: not-a-list\n"
    assert read_version(payload) == "v1alpha2"
    with pytest.raises(ParseError, match="rules: Input should be a valid list"):
        read_bytes(payload)


def test_read_version_ignores_body_shape() -> None:
    assert read_version(b"version: v1alpha1\nwhatever: {deep: [1, {x: y}]}\n") == "v1alpha1"
    assert read_version(b"other: 1\n") == ""
    assert read_version(b"") == ""
    with pytest.raises(ParseError):
        read_version(b"version: {nested: true}\n")
    with pytest.raises(ParseError):
        read_version(b"key: [unclosed\n")


def test_missing_file_is_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_file(tmp_path / "nope.yaml")
    assert is_not_found(excinfo.value)


def test_other_failures_are_not_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_file(write(tmp_path / "config.yaml", "version: v9\n"))
    assert not is_not_found(excinfo.value)


def test_jsonnet_round_trip_matches_literal_document(tmp_path: Path) -> None:
    literal = yaml.safe_load(LATEST_DOC)
    evaluator = FakeEvaluator(json.dumps(literal))
    path = write(tmp_path / "config.jsonnet", "local x = 1; {}")
    from_jsonnet = read_file(path, evaluator=evaluator)
    assert from_jsonnet == read_file(write(tmp_path / "config.yaml", LATEST_DOC))
    assert evaluator.calls == [(str(path), "local x = 1; {}")]


def test_jsonnet_hint_is_case_insensitive() -> None:
    evaluator = FakeEvaluator('{"version": "v1alpha2"}')
    config = read_bytes(b"{}", hint=".JSONNET", evaluator=evaluator)
    assert config == v1alpha2.Config(version="v1alpha2")
    assert len(evaluator.calls) == 1


def test_jsonnet_rejects_legacy_versions() -> None:
    evaluator = FakeEvaluator('{"version": "v1alpha1", "filters": []}')
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"{}", hint=".jsonnet", evaluator=evaluator)
    err = excinfo.value
    assert find_error(err, UnsupportedVersionError).version == "v1alpha1"
    assert "jsonnet configs must declare version 'v1alpha2'" in details(err)


def test_jsonnet_output_is_decoded_strictly() -> None:
    evaluator = FakeEvaluator('{"version": "v1alpha2", "rulez": []}')
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"{}", hint=".jsonnet", evaluator=evaluator)
    assert find_error(excinfo.value, UnknownFieldError) is not None


def test_jsonnet_evaluator_failure_is_expression_error() -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"{", hint=".jsonnet", label="broken.jsonnet", evaluator=FailingEvaluator())
    err = excinfo.value
    assert find_error(err, ExpressionError) is not None
    assert "broken.jsonnet:1:1 syntax error" in str(err)


def test_jsonnet_invalid_json_output() -> None:
    with pytest.raises(ParseError, match="invalid JSON"):
        read_bytes(b"{}", hint=".jsonnet", evaluator=FakeEvaluator("not json"))


def test_jsonnet_file_with_real_evaluator(tmp_path: Path) -> None:
    pytest.importorskip("_jsonnet")
    source = """
local sender(addr) = { from: addr };
{
  version: 'v1alpha2',
  rules: [
    { filter: sender('a@example.com'), actions: { archive: true } },
  ],
}
"""
    config = read_file(write(tmp_path / "config.jsonnet", source))
    assert config.rules[0].filter.from_ == "a@example.com"
    assert config.rules[0].actions.archive is True


def test_jsonnet_source_must_be_utf8() -> None:
    evaluator = FakeEvaluator('{"version": "v1alpha2"}')
    with pytest.raises(ParseError, match="not valid UTF-8"):
        read_bytes(b"\xff\xfe{", hint=".jsonnet", evaluator=evaluator)
    assert evaluator.calls == []


def test_plain_evaluator_exception_becomes_expression_error() -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(b"{", hint=".jsonnet", label="x.jsonnet", evaluator=CrashingEvaluator())
    err = excinfo.value
    assert str(err) == "invalid jsonnet: x.jsonnet:1:1 syntax error"
    assert find_error(err, ExpressionError) is not None
    assert isinstance(find_error(err, RuntimeError), RuntimeError)


def test_unquoted_yaml_scalars_load_into_string_fields() -> None:
    payload = b"""\
version: v1alpha2
rules:
  - filter: {subject: 2024}
    actions:
      labels: [2024, true]
"""
    rule = read_bytes(payload).rules[0]
    assert rule.filter.subject == "2024"
    assert rule.actions.labels == ["2024", "true"]


@pytest.mark.parametrize(
    "payload",
    [
        b"version: v1alpha2\nauthor: {name: a}\nauthor: {name: b}\n",
        b"version: v1alpha2\nauthor:\n  name: a\n  name: b\n",
    ],
)
def test_duplicate_keys_are_rejected(payload: bytes) -> None:
    with pytest.raises(ConfigError) as excinfo:
        read_bytes(payload)
    err = excinfo.value
    assert find_error(err, ParseError) is not None
    assert "duplicate key" in str(err)
