"""Structured-data readers for configuration documents.

Purpose
-------
Read configuration bytes from disk and turn YAML or JSON text into plain
mappings. Adapters are thin wrappers around ``Path.read_bytes``,
PyYAML's safe loader and ``json.loads`` so error classification and logging
live in one place.

Contents
--------
* :class:`FileReader` – reads a file, tagging missing files as not found.
* :class:`YAMLDocumentLoader` – parses YAML bytes (the structured format).
  Duplicate mapping keys are rejected.
* :class:`JSONDocumentLoader` – parses the JSON text produced by the
  expression-language evaluator.

System Role
-----------
Invoked by :mod:`lib_versioned_config.core` before version sniffing and
migration. Only syntax is checked here; schema checks belong to
:mod:`lib_versioned_config.domain.schema`.
"""

from __future__ import annotations

import json
from collections.abc import Hashable
from pathlib import Path
from typing import Any, Mapping

import yaml

from ...domain.errors import FileReadError, NotFoundError, ParseError, with_cause
from ...observability import log_debug, log_error


class _UniqueKeyLoader(yaml.SafeLoader):
    """Safe loader that refuses a key repeated within one mapping."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class FileReader:
    """Read configuration files as bytes."""

    def read(self, path: str | Path) -> bytes:
        """Return the contents of *path*.

        Raises
        ------
        NotFoundError
            When *path* does not exist; wraps a :class:`FileReadError`
            annotated with the original :class:`FileNotFoundError`.
        FileReadError
            (annotated) for any other I/O failure.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"version: v1alpha2")
        >>> tmp.close()
        >>> FileReader().read(tmp.name)[:7]
        b'version'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        try:
            payload = file_path.read_bytes()
        except FileNotFoundError as exc:
            log_debug("config_file_missing", stage="read", path=str(path))
            raise NotFoundError(with_cause(FileReadError(f"config file {path} not found"), exc)) from exc
        except OSError as exc:
            log_error("config_file_unreadable", stage="read", path=str(path), error=str(exc))
            raise with_cause(FileReadError(f"cannot read config file {path}"), exc) from exc
        log_debug("config_file_read", stage="read", path=str(path), size=len(payload))
        return payload


class YAMLDocumentLoader:
    """Parse YAML documents with the safe loader, rejecting duplicate keys."""

    def load(self, payload: bytes | str, *, source: str | None = None) -> Mapping[str, object] | None:
        """Return the top-level mapping of *payload*, or ``None`` for an empty document.

        Examples
        --------
        >>> YAMLDocumentLoader().load(b"version: v1alpha2\\nrules: []")["version"]
        'v1alpha2'
        >>> YAMLDocumentLoader().load(b"# nothing here") is None
        True
        """

        try:
            data = yaml.load(payload, Loader=_UniqueKeyLoader)
        except yaml.YAMLError as exc:
            log_error("config_file_invalid", stage="parse", path=source, format="yaml", error=str(exc))
            raise ParseError(f"invalid YAML: {exc}") from exc
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ParseError(f"config root must be a mapping, got {type(data).__name__}")
        return data


class JSONDocumentLoader:
    """Parse JSON documents."""

    def loads(self, text: str, *, source: str | None = None) -> Mapping[str, object]:
        """Return the top-level mapping of *text*.

        Examples
        --------
        >>> JSONDocumentLoader().loads('{"version": "v1alpha2"}')
        {'version': 'v1alpha2'}
        """

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log_error("config_file_invalid", stage="parse", path=source, format="json", error=str(exc))
            raise ParseError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ParseError(f"config root must be a mapping, got {type(data).__name__}")
        return data
