"""Raw input value object handed from the file reader to the format loaders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .errors import ParseError

EXPRESSION_HINTS: Final[frozenset[str]] = frozenset({".jsonnet"})
"""Format hints routed to the expression-language evaluator."""


@dataclass(frozen=True, slots=True)
class RawDocument:
    """Immutable bytes plus an optional format hint (a file suffix such as ``".yaml"``).

    Examples
    --------
    >>> RawDocument(b"{}", ".JSONNET").is_expression
    True
    >>> RawDocument(b"version: v1alpha2", None).is_expression
    False
    """

    payload: bytes
    hint: str | None = None

    def __post_init__(self) -> None:
        if self.hint is not None:
            object.__setattr__(self, "hint", self.hint.lower())

    @property
    def is_expression(self) -> bool:
        return self.hint in EXPRESSION_HINTS

    def text(self) -> str:
        """Return the payload decoded as UTF-8, raising :class:`ParseError` otherwise."""

        try:
            return self.payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"config is not valid UTF-8: {exc}") from exc
