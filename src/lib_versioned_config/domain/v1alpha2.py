"""Latest configuration schema (``v1alpha2``).

Purpose
-------
Define the configuration shape the rest of an application consumes. Every
successful resolution, whatever the input version or format, ends as a
:class:`Config` from this module.

Contents
--------
* :data:`VERSION` – the version tag documents must declare.
* :class:`Config` – root record: author, managed labels, and rules.
* :class:`Rule` – one filter expression plus the actions it triggers.
* :class:`FilterNode` – recursive boolean expression over message fields.
* :class:`Actions`, :class:`Author`, :class:`Label` – leaf records.

Field names use snake_case in Python and camelCase in documents; the document
name is the pydantic alias and is the only key accepted by
:func:`lib_versioned_config.domain.schema.strict_decode`.
"""

from __future__ import annotations

from typing import Final

from pydantic import Field, StrictBool

from .schema import SchemaModel, Text

VERSION: Final[str] = "v1alpha2"


class Author(SchemaModel):
    name: Text = ""
    email: Text = ""


class Label(SchemaModel):
    """A label whose lifecycle is managed by the configuration."""

    name: Text = ""


class FilterNode(SchemaModel):
    """Boolean expression over message fields.

    A node is either an operator (``and``, ``or``, ``not``) or a single field
    criterion; the schema does not enforce which, mirroring the document
    format.
    """

    and_: list[FilterNode] = Field(default_factory=list, alias="and")
    or_: list[FilterNode] = Field(default_factory=list, alias="or")
    not_: FilterNode | None = Field(default=None, alias="not")
    from_: Text = Field(default="", alias="from")
    to: Text = ""
    cc: Text = ""
    subject: Text = ""
    list_: Text = Field(default="", alias="list")
    has: Text = ""
    query: Text = ""


class Actions(SchemaModel):
    archive: StrictBool = False
    delete: StrictBool = False
    mark_read: StrictBool = Field(default=False, alias="markRead")
    star: StrictBool = False
    mark_spam: StrictBool | None = Field(default=None, alias="markSpam")
    mark_important: StrictBool | None = Field(default=None, alias="markImportant")
    category: Text = ""
    labels: list[Text] = Field(default_factory=list)
    forward: Text = ""


class Rule(SchemaModel):
    filter: FilterNode = Field(default_factory=FilterNode)
    actions: Actions = Field(default_factory=Actions)


class Config(SchemaModel):
    """Root of a ``v1alpha2`` document.

    Examples
    --------
    >>> Config(version=VERSION, author=Author(name="Ada")).author.name
    'Ada'
    """

    version: Text = ""
    author: Author = Field(default_factory=Author)
    labels: list[Label] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)
