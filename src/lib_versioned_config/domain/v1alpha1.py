"""Predecessor configuration schema (``v1alpha1``).

Documents in this version list filters as flat criteria blocks: every
criterion field holds a list of alternatives, ``consts`` refers to values
defined once at the top level, and ``not`` holds criteria to exclude. They are
still accepted on read and converted by
:func:`lib_versioned_config.application.migrate.import_v1alpha1`.
"""

from __future__ import annotations

from typing import Final

from pydantic import Field, StrictBool

from .schema import SchemaModel, Text

VERSION: Final[str] = "v1alpha1"


class Author(SchemaModel):
    name: Text = ""
    email: Text = ""


class Const(SchemaModel):
    values: list[Text] = Field(default_factory=list)


class MatchFilters(SchemaModel):
    from_: list[Text] = Field(default_factory=list, alias="from")
    to: list[Text] = Field(default_factory=list)
    cc: list[Text] = Field(default_factory=list)
    subject: list[Text] = Field(default_factory=list)
    has: list[Text] = Field(default_factory=list)
    list_: list[Text] = Field(default_factory=list, alias="list")
    query: Text = ""


class ConstFilters(MatchFilters):
    """Criteria naming top-level consts instead of literal values."""

    not_: MatchFilters | None = Field(default=None, alias="not")


class CompositeFilters(MatchFilters):
    not_: MatchFilters | None = Field(default=None, alias="not")
    consts: ConstFilters | None = None


class Actions(SchemaModel):
    archive: StrictBool = False
    delete: StrictBool = False
    mark_read: StrictBool = Field(default=False, alias="markRead")
    star: StrictBool = False
    mark_spam: StrictBool = Field(default=False, alias="markSpam")
    mark_important: StrictBool | None = Field(default=None, alias="markImportant")
    category: Text = ""
    labels: list[Text] = Field(default_factory=list)


class Filter(SchemaModel):
    filters: CompositeFilters = Field(default_factory=CompositeFilters)
    actions: Actions = Field(default_factory=Actions)


class Config(SchemaModel):
    version: Text = ""
    author: Author = Field(default_factory=Author)
    consts: dict[Text, Const] = Field(default_factory=dict)
    filters: list[Filter] = Field(default_factory=list)
