"""Public package surface for ``lib_versioned_config``.

Exports the resolver entry points from :mod:`lib_versioned_config.core`, the
latest schema, and the error model so consumers never reach into adapter
modules directly.
"""

from __future__ import annotations

from .core import LATEST_VERSION, read_bytes, read_file, read_version
from .domain.errors import (
    AnnotatedError,
    ConfigError,
    ConfigImportError,
    DetailedError,
    ErrorKind,
    ExpressionError,
    FileReadError,
    LegacyParseError,
    NotFoundError,
    ParseError,
    UnknownFieldError,
    UnsupportedVersionError,
    details,
    find_error,
    is_error,
    is_not_found,
    not_found,
    with_cause,
    with_details,
)
from .domain.v1alpha2 import Config
from .observability import bind_trace_id, get_logger

__all__ = [
    "AnnotatedError",
    "Config",
    "ConfigError",
    "ConfigImportError",
    "DetailedError",
    "ErrorKind",
    "ExpressionError",
    "FileReadError",
    "LATEST_VERSION",
    "LegacyParseError",
    "NotFoundError",
    "ParseError",
    "UnknownFieldError",
    "UnsupportedVersionError",
    "bind_trace_id",
    "details",
    "find_error",
    "get_logger",
    "is_error",
    "is_not_found",
    "not_found",
    "read_bytes",
    "read_file",
    "read_version",
    "with_cause",
    "with_details",
]
