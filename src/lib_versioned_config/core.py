"""Composition root for ``lib_versioned_config``.

Purpose
-------
Provide the entry points that turn a configuration file of any supported
version and format into the latest in-memory configuration. The module wires
the file reader, the format loaders, the version sniffer and the migrator, and
decorates failures with the symptom each stage was working on.

Contents
--------
* :data:`LATEST_VERSION` – tag of the schema every resolution returns.
* :func:`read_file` – read a path and resolve it.
* :func:`read_bytes` – resolve an in-memory buffer given a format hint.
* :func:`read_version` – sniff the top-level ``version`` of a YAML buffer.

System Role
-----------
Control flow: ``read_file`` → :class:`FileReader` → ``read_bytes``. Jsonnet
documents (``.jsonnet`` hint) go through the evaluator and must already be in
the latest schema; everything else is parsed as YAML, sniffed, and handed to
:func:`lib_versioned_config.application.migrate.migrate`. Each call is
independent; nothing is cached between calls.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final, Mapping

from .adapters.evaluators.jsonnet import JsonnetEvaluator
from .adapters.file_loaders.structured import FileReader, JSONDocumentLoader, YAMLDocumentLoader
from .application.migrate import SUPPORTED_VERSIONS, migrate
from .application.ports import ExpressionEvaluator
from .domain import v1alpha2
from .domain.document import RawDocument
from .domain.errors import (
    ConfigError,
    ExpressionError,
    ParseError,
    UnknownFieldError,
    UnsupportedVersionError,
    find_error,
    with_cause,
    with_details,
)
from .domain.schema import strict_decode
from .observability import log_debug, log_error, log_info, make_event, resolution_trace

LATEST_VERSION: Final[str] = v1alpha2.VERSION

_FILE_READER = FileReader()
_YAML_LOADER = YAMLDocumentLoader()
_JSON_LOADER = JSONDocumentLoader()

_VERSION_HINT: Final[str] = "the config file must be a YAML mapping with a top-level 'version' field"
_UNKNOWN_FIELD_HINT: Final[str] = "unknown fields are rejected; check the field names for typos"


def read_file(path: str | Path, *, evaluator: ExpressionEvaluator | None = None) -> v1alpha2.Config:
    """Read *path* and return its content as a latest-version config.

    Why
    ----
    Callers hand over whatever file the user pointed at; the version and
    format are discovered here.

    Parameters
    ----------
    path:
        Configuration file. A ``.jsonnet`` suffix selects the Jsonnet path.
    evaluator:
        Optional :class:`ExpressionEvaluator`; defaults to
        :class:`JsonnetEvaluator`.

    Raises
    ------
    ConfigError
        On every failure. Missing files satisfy
        :func:`~lib_versioned_config.domain.errors.is_not_found`.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "config.yaml"
    >>> _ = target.write_text("version: v1alpha1\\nauthor:\\n  name: Ada\\n", encoding="utf-8")
    >>> config = read_file(target)
    >>> config.version, config.author.name
    ('v1alpha2', 'Ada')
    >>> tmp.cleanup()
    """

    with resolution_trace():
        payload = _FILE_READER.read(path)
        return read_bytes(payload, hint=Path(path).suffix, label=str(path), evaluator=evaluator)


def read_bytes(
    payload: bytes,
    *,
    hint: str | None = None,
    label: str = "<config>",
    evaluator: ExpressionEvaluator | None = None,
) -> v1alpha2.Config:
    """Resolve an in-memory configuration document.

    Parameters
    ----------
    payload:
        Raw document bytes.
    hint:
        Format hint, usually the file suffix (``".jsonnet"``, ``".yaml"``).
    label:
        Name used in evaluator diagnostics and log events.
    evaluator:
        Optional :class:`ExpressionEvaluator` for Jsonnet documents.

    Examples
    --------
    >>> read_bytes(b"version: v1alpha2\\nauthor:\\n  email: ada@example.com\\n").author.email
    'ada@example.com'
    """

    document = RawDocument(payload, hint)
    with resolution_trace():
        try:
            if document.is_expression:
                config = _read_expression(document, label, evaluator or JsonnetEvaluator())
            else:
                config = _read_structured(document, label)
        except ConfigError as exc:
            log_error("config_rejected", **make_event("resolve", label, {"error": str(exc)}))
            raise
        log_info(
            "config_resolved",
            **make_event("resolve", label, {"version": config.version, "rules": len(config.rules)}),
        )
    return config


def read_version(buf: bytes) -> str:
    """Return the top-level ``version`` of the YAML document in *buf*.

    Only the top level is inspected, so documents whose body does not match any
    schema still report their version. Absence yields ``""``.

    Raises
    ------
    ParseError
        When *buf* is not valid YAML or its root is not a mapping.

    Examples
    --------
    >>> read_version(b"version: v1alpha1\\nfilters: {whatever: [1, 2]}")
    'v1alpha1'
    >>> read_version(b"author: {name: x}")
    ''
    """

    return _version_of(_YAML_LOADER.load(buf))


def _read_structured(document: RawDocument, label: str) -> v1alpha2.Config:
    try:
        data = _YAML_LOADER.load(document.payload, source=label)
        version = _version_of(data)
    except ParseError as exc:
        raise with_details(with_cause(ParseError("error parsing the config version"), exc), _VERSION_HINT) from exc
    log_debug("config_version_read", **make_event("version", label, {"version": version}))
    return _dispatch(version, data or {}, label)


def _read_expression(document: RawDocument, label: str, evaluator: ExpressionEvaluator) -> v1alpha2.Config:
    source = document.text()
    try:
        text = evaluator.evaluate(label, source)
    except ConfigError:
        raise
    except Exception as exc:
        log_error("config_expression_invalid", **make_event("expression", label, {"error": str(exc)}))
        raise with_cause(ExpressionError("invalid jsonnet"), exc) from exc
    data = _JSON_LOADER.loads(text, source=label)
    version = _version_of(data)
    if version != LATEST_VERSION:
        raise with_details(
            UnsupportedVersionError(version),
            f"jsonnet configs must declare version '{LATEST_VERSION}'",
        )
    try:
        return strict_decode(v1alpha2.Config, data)
    except UnknownFieldError as exc:
        raise with_details(exc, _UNKNOWN_FIELD_HINT) from exc


def _dispatch(version: str, data: Mapping[str, object], label: str) -> v1alpha2.Config:
    try:
        return migrate(version, data, source=label)
    except UnsupportedVersionError as exc:
        raise with_details(exc, f"supported versions: {', '.join(SUPPORTED_VERSIONS)}") from exc
    except ConfigError as exc:
        if find_error(exc, UnknownFieldError) is None:
            raise
        raise with_details(exc, _UNKNOWN_FIELD_HINT) from exc


def _version_of(data: Mapping[str, object] | None) -> str:
    if data is None:
        return ""
    value = data.get("version")
    if value is None:
        return ""
    if isinstance(value, (Mapping, list)):
        raise ParseError(f"version must be a scalar, got {type(value).__name__}")
    return str(value)


__all__ = [
    "LATEST_VERSION",
    "read_bytes",
    "read_file",
    "read_version",
]
