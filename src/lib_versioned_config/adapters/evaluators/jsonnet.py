"""Jsonnet evaluator adapter backed by the ``jsonnet`` distribution.

The C extension is imported on first evaluation.
"""

from __future__ import annotations

from ...domain.errors import ExpressionError, with_cause
from ...observability import log_debug, log_error


class JsonnetEvaluator:
    """Evaluate Jsonnet snippets with ``_jsonnet.evaluate_snippet``."""

    def evaluate(self, label: str, source: str) -> str:
        import _jsonnet

        try:
            output = _jsonnet.evaluate_snippet(label, source)
        except RuntimeError as exc:
            log_error("config_expression_invalid", stage="expression", path=label, error=str(exc))
            raise with_cause(ExpressionError("invalid jsonnet"), exc) from exc
        log_debug("config_expression_evaluated", stage="expression", path=label, size=len(output))
        return output
