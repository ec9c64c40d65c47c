"""Structured logging helpers for the resolution pipeline.

Purpose
    Give every stage of a resolution (file read, version sniffing, migration,
    expression evaluation) the same structured log shape without forcing a
    logging backend on host applications.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the package logger (silent by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``resolution_trace``: scopes one generated trace identifier to a single
      resolution so its read, version, migrate and resolve events correlate.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: builds the ``stage``/``path`` payload shared by all events.

System Integration
    Used by the file loaders, the evaluator adapter, the migrator and the
    composition root. The domain layer stays free of logging.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Final, Iterator, Mapping
from uuid import uuid4

TRACE_ID: ContextVar[str | None] = ContextVar("lib_versioned_config_trace_id", default=None)
"""Trace identifier attached to every log entry emitted in the current context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_versioned_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('resolve-1')
    >>> TRACE_ID.get()
    'resolve-1'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


@contextmanager
def resolution_trace() -> Iterator[str]:
    """Run one resolution under a trace identifier.

    A caller-bound identifier (see :func:`bind_trace_id`) is reused; otherwise a
    fresh one is generated and cleared again when the block exits, so nested
    calls such as ``read_file`` → ``read_bytes`` share one identifier.

    Examples
    --------
    >>> with resolution_trace() as trace_id:
    ...     TRACE_ID.get() == trace_id
    True
    >>> TRACE_ID.get() is None
    True
    """

    current = TRACE_ID.get()
    if current is not None:
        yield current
        return
    trace_id = uuid4().hex[:12]
    token = TRACE_ID.set(trace_id)
    try:
        yield trace_id
    finally:
        TRACE_ID.reset(token)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(
    stage: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured payload for a resolution event.

    Inputs
        stage: Pipeline stage emitting the event (``"read"``, ``"version"``,
            ``"migrate"``, ``"expression"``).
        path: Label of the document being resolved, if known.
        payload: Optional extra fields.

    Examples
    --------
    >>> make_event('migrate', 'config.yaml', {'from_version': 'v1alpha1'})
    {'stage': 'migrate', 'path': 'config.yaml', 'from_version': 'v1alpha1'}
    """

    event: dict[str, Any] = {"stage": stage, "path": path}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    _LOGGER.log(level, message, extra={"context": context})
