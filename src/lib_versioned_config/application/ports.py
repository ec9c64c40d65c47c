"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contract of the expression-language evaluator so the
composition root can run Jsonnet documents without depending on a concrete
binding. Tests substitute a fake evaluator through the same contract.

Contents
--------
* :class:`ExpressionEvaluator` – compiles expression-language source into
  structured-data text.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ExpressionEvaluator(Protocol):
    """Compile expression-language source into JSON text.

    Why
    ----
    The evaluator is an external collaborator: the resolver only needs
    "source in, JSON out", evaluated once per call.
    """

    def evaluate(self, label: str, source: str) -> str:
        """Return the JSON text produced by *source*.

        *label* names the document in evaluator diagnostics (usually the file
        path). Failures raise :class:`~lib_versioned_config.domain.errors.ConfigError`
        subclasses, typically an annotated
        :class:`~lib_versioned_config.domain.errors.ExpressionError`.
        """
