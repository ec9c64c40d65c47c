"""Domain-level exception hierarchy and error composition helpers.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the migrator, and the
composition root, together with the small algebra used to layer errors:
pairing a root cause with the symptom it produced, stacking human-readable
details, and tagging failures as "not found".

Contents
--------
* :class:`ErrorKind` – classification carried by every library error.
* :class:`ConfigError` – umbrella base class for all configuration failures.
* :class:`AnnotatedError` / :func:`with_cause` – symptom + cause pairs.
* :class:`DetailedError` / :func:`with_details` / :func:`details` – stacked
  diagnostic messages.
* :class:`NotFoundError` / :func:`not_found` / :func:`is_not_found` – the
  not-found marker and its predicate.
* :func:`iter_chain` / :func:`is_error` / :func:`find_error` – matching that
  composes through every wrapper above.
* Leaf types: :class:`ParseError`, :class:`UnknownFieldError`,
  :class:`LegacyParseError`, :class:`UnsupportedVersionError`,
  :class:`ExpressionError`, :class:`FileReadError`,
  :class:`ConfigImportError`.

System Role
-----------
Every failure path of :func:`lib_versioned_config.core.read_file` raises a
:class:`ConfigError`. Callers should classify failures with
:func:`is_not_found`, :func:`find_error`, and :func:`details` instead of
relying on the concrete type of the outermost exception, because components
re-wrap lower-level failures with higher-level symptoms.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Iterator, TypeVar, overload

E = TypeVar("E", bound=BaseException)


class ErrorKind(Enum):
    """Coarse classification consulted by :func:`is_not_found`."""

    GENERIC = "generic"
    NOT_FOUND = "not_found"


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_versioned_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.GENERIC


class ParseError(ConfigError):
    """Raised when a document is not syntactically valid or has the wrong shape."""


class UnknownFieldError(ParseError):
    """Raised by strict decoding when a document carries an undeclared field."""


class LegacyParseError(ParseError):
    """Symptom raised when a predecessor-version document fails to decode."""


class ExpressionError(ConfigError):
    """Raised when the expression-language evaluator rejects its input."""


class FileReadError(ConfigError):
    """Raised when the configuration file cannot be read."""


class ConfigImportError(ConfigError):
    """Raised when a predecessor config cannot be expressed in the latest schema."""


class UnsupportedVersionError(ConfigError):
    """Raised when the version tag is missing or not one of the supported ones.

    The offending tag is kept on :attr:`version` (``""`` when absent).

    Examples
    --------
    >>> str(UnsupportedVersionError("v0"))
    "unsupported version 'v0'"
    >>> str(UnsupportedVersionError(""))
    'missing config version'
    """

    def __init__(self, version: str) -> None:
        self.version = version
        if version:
            super().__init__(f"unsupported version '{version}'")
        else:
            super().__init__("missing config version")


class AnnotatedError(ConfigError):
    """Pair a deeper *cause* with the higher-level *symptom* it produced.

    Why
    ----
    Components want to say what they were attempting ("error parsing the
    config version") without hiding the original failure from programmatic
    inspection.

    What
    ----
    Both errors stay reachable: :func:`is_error` and :func:`find_error` match
    against the symptom first and then the cause, recursively. The cause is
    also recorded as ``__cause__`` so tracebacks show it. The message reads
    ``"<symptom>: <cause>"``: the attempted step comes first, then the cause.

    Examples
    --------
    >>> err = AnnotatedError(ParseError("error parsing the config version"), ValueError("bad token"))
    >>> str(err)
    'error parsing the config version: bad token'
    >>> find_error(err, ValueError) is err.cause
    True
    """

    def __init__(self, symptom: BaseException, cause: BaseException) -> None:
        super().__init__(symptom, cause)
        self.symptom = symptom
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.symptom}: {self.cause}"


class DetailedError(ConfigError):
    """Attach a human-readable *detail* to *error* without changing its message."""

    def __init__(self, error: BaseException, detail: str) -> None:
        super().__init__(error, detail)
        self.error = error
        self.detail = detail
        self.__cause__ = error

    def __str__(self) -> str:
        return str(self.error)


class NotFoundError(ConfigError):
    """Tag an arbitrary error as a "not found" condition.

    Examples
    --------
    >>> err = NotFoundError(FileNotFoundError("config.yaml"))
    >>> is_not_found(with_cause(ParseError("cannot load"), err))
    True
    """

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND

    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error = error
        self.__cause__ = error

    def __str__(self) -> str:
        return str(self.error)


@overload
def with_cause(symptom: BaseException, cause: BaseException) -> AnnotatedError: ...


@overload
def with_cause(symptom: BaseException | None, cause: BaseException | None) -> BaseException | None: ...


def with_cause(symptom: BaseException | None, cause: BaseException | None) -> BaseException | None:
    """Annotate *symptom* with *cause*.

    When either side is ``None`` the other one is returned untouched, so
    absence never gets wrapped.
    """

    if cause is None:
        return symptom
    if symptom is None:
        return cause
    return AnnotatedError(symptom, cause)


@overload
def with_details(err: BaseException, detail: str) -> DetailedError: ...


@overload
def with_details(err: None, detail: str) -> None: ...


def with_details(err: BaseException | None, detail: str) -> DetailedError | None:
    """Wrap *err* with *detail*; ``None`` propagates unchanged.

    Examples
    --------
    >>> with_details(None, "ignored") is None
    True
    """

    if err is None:
        return None
    return DetailedError(err, detail)


def details(err: BaseException | None) -> str:
    r"""Render every detail attached to *err* as an indented bullet list.

    Details are listed outer to inner; newlines inside a detail are indented so
    they stay under their bullet.

    Examples
    --------
    >>> err = with_details(with_details(ParseError("boom"), "a"), "b")
    >>> details(err)
    '\n  - b\n  - a'
    >>> details(ParseError("boom"))
    ''
    """

    detailed = find_error(err, DetailedError)
    if detailed is None:
        return ""
    return "\n  - " + detailed.detail.replace("\n", "\n    ") + details(detailed.error)


def not_found(err: BaseException | None) -> NotFoundError | None:
    """Return *err* tagged as not found, or ``None`` when *err* is ``None``."""

    if err is None:
        return None
    return NotFoundError(err)


def is_not_found(err: BaseException | None) -> bool:
    """Return ``True`` when any error in the chain of *err* is a not-found one."""

    return any(getattr(candidate, "kind", ErrorKind.GENERIC) is ErrorKind.NOT_FOUND for candidate in iter_chain(err))


def iter_chain(err: BaseException | None) -> Iterator[BaseException]:
    """Yield *err* and every error reachable from it, depth first.

    Annotated errors yield their symptom branch before their cause branch;
    detailed and not-found errors yield the error they wrap; any other
    exception continues through ``__cause__``.
    """

    seen: set[int] = set()
    stack = [err] if err is not None else []
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.extend(reversed(_children(current)))


def is_error(err: BaseException | None, target: BaseException | type[BaseException]) -> bool:
    """Return ``True`` when *target* appears in the chain of *err*.

    *target* is either a specific exception instance (matched by identity) or
    an exception class (matched with :func:`isinstance`).
    """

    if isinstance(target, type):
        return find_error(err, target) is not None
    return any(candidate is target for candidate in iter_chain(err))


def find_error(err: BaseException | None, cls: type[E]) -> E | None:
    """Return the first error in the chain of *err* that is an instance of *cls*."""

    for candidate in iter_chain(err):
        if isinstance(candidate, cls):
            return candidate
    return None


def _children(err: BaseException) -> tuple[BaseException, ...]:
    if isinstance(err, AnnotatedError):
        return (err.symptom, err.cause)
    if isinstance(err, (DetailedError, NotFoundError)):
        return (err.error,)
    if err.__cause__ is not None:
        return (err.__cause__,)
    return ()
