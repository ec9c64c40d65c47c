"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour
relied on by the resolution pipeline.
"""

from __future__ import annotations

import logging

import pytest

from lib_versioned_config import bind_trace_id, get_logger, read_bytes
from lib_versioned_config.observability import TRACE_ID, log_info, make_event, resolution_trace


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_versioned_config")
    bind_trace_id("trace-123")
    try:
        log_info("config_resolved", stage="resolve", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "stage": "resolve", "path": None}


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    event = make_event("version", "config.yaml", {"version": "v1alpha1"})
    assert event == {"stage": "version", "path": "config.yaml", "version": "v1alpha1"}


def test_resolution_emits_migration_and_result_events(caplog: pytest.LogCaptureFixture) -> None:
    """Resolving a predecessor document logs the sniffed version, the migration and the result."""

    caplog.set_level(logging.DEBUG, logger="lib_versioned_config")
    read_bytes(b"version: v1alpha1\n", hint=".yaml", label="legacy.yaml")
    events = {record.getMessage(): getattr(record, "context") for record in caplog.records}
    trace_id = events["config_resolved"]["trace_id"]
    assert events["config_version_read"]["version"] == "v1alpha1"
    assert events["config_migrated"] == {
        "trace_id": trace_id,
        "stage": "migrate",
        "path": "legacy.yaml",
        "from_version": "v1alpha1",
        "to_version": "v1alpha2",
    }
    assert events["config_resolved"]["version"] == "v1alpha2"


def test_each_resolution_gets_its_own_trace(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_versioned_config")
    read_bytes(b"version: v1alpha2\n", label="a.yaml")
    read_bytes(b"version: v1alpha2\n", label="b.yaml")
    traces: dict[str, set[str]] = {}
    for record in caplog.records:
        context = getattr(record, "context")
        traces.setdefault(context["path"], set()).add(context["trace_id"])
    assert len(traces["a.yaml"]) == 1
    assert len(traces["b.yaml"]) == 1
    assert traces["a.yaml"] != traces["b.yaml"]
    assert None not in traces["a.yaml"] | traces["b.yaml"]
    assert TRACE_ID.get() is None


def test_bound_trace_id_is_reused_by_resolution(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="lib_versioned_config")
    bind_trace_id("request-7")
    try:
        with resolution_trace() as trace_id:
            assert trace_id == "request-7"
        read_bytes(b"version: v1alpha2\n")
    finally:
        bind_trace_id(None)
    assert getattr(caplog.records[-1], "context")["trace_id"] == "request-7"
