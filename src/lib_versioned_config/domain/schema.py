"""Pydantic base model and strict decoding for the schema versions.

Purpose
-------
Turn the plain mappings produced by the YAML/JSON loaders into the frozen
models of a schema version, rejecting any field the schema does not declare.
Unknown fields usually mean a typo, and silently ignoring them would drop the
user's intent.

Contents
--------
* :class:`SchemaModel` – frozen pydantic base with ``extra="forbid"``.
* :data:`Text` – string field type that keeps the text of YAML scalars.
* :func:`strict_decode` – mapping → model, raising :class:`UnknownFieldError`
  or :class:`ParseError` instead of pydantic's ``ValidationError``.

System Role
-----------
Base of :mod:`lib_versioned_config.domain.v1alpha1` and
:mod:`lib_versioned_config.domain.v1alpha2`; used by the migrator and the
composition root. Rendering goes through ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, model_validator

from .errors import ParseError, UnknownFieldError

M = TypeVar("M", bound="SchemaModel")


def _scalar_text(value: Any) -> Any:
    # YAML resolves unquoted scalars (2024, true, 1.5, 2024-01-01); string
    # fields keep their text instead of failing.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


Text = Annotated[str, BeforeValidator(_scalar_text)]


class SchemaModel(BaseModel):
    """Base for every schema record.

    Document keys are the field aliases (``from``, ``markRead``); Python code
    may construct records by field name (``from_``, ``mark_read``), but
    documents are only ever validated by alias.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        validate_by_alias=True,
        validate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat ``key: null`` for a declared field like an absent key."""

        if not isinstance(data, Mapping):
            return data
        known = set(cls.model_fields)
        known.update(info.alias for info in cls.model_fields.values() if info.alias)
        return {key: value for key, value in data.items() if value is not None or key not in known}


def strict_decode(cls: type[M], data: object) -> M:
    """Validate *data* as an instance of the schema model *cls*.

    Raises
    ------
    UnknownFieldError
        When *data* contains a key that the schema does not declare.
    ParseError
        When a value does not have the declared shape.

    Examples
    --------
    >>> from lib_versioned_config.domain.v1alpha2 import Author
    >>> strict_decode(Author, {"name": "Ada"})
    Author(name='Ada', email='')
    >>> strict_decode(Author, {"nmae": "Ada"})
    Traceback (most recent call last):
    ...
    lib_versioned_config.domain.errors.UnknownFieldError: field 'nmae' not found in type Author
    """

    try:
        return cls.model_validate(data, by_alias=True, by_name=False)
    except ValidationError as exc:
        raise _schema_error(cls, exc) from exc


def _schema_error(cls: type[SchemaModel], exc: ValidationError) -> ParseError:
    issues = exc.errors(include_url=False)
    for issue in issues:
        if issue["type"] == "extra_forbidden":
            return UnknownFieldError(f"field '{_location(issue['loc'])}' not found in type {cls.__name__}")
    first = issues[0]
    return ParseError(f"{_location(first['loc']) or cls.__name__}: {first['msg']}")


def _location(loc: tuple[int | str, ...]) -> str:
    rendered = ""
    for part in loc:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered = f"{rendered}.{part}" if rendered else str(part)
    return rendered
