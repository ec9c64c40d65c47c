"""Version dispatch and upgrade-on-read migration.

Purpose
-------
Map a parsed document of any supported version onto the latest schema. The
dispatch is a closed lookup table keyed by the exact version tag; there is no
best-effort parse for unknown tags.

Contents
    - ``MIGRATIONS``: read-only table ``version tag -> step``.
    - ``SUPPORTED_VERSIONS``: the tags accepted by :func:`migrate`.
    - ``migrate``: public entry point used by the composition root.
    - ``import_v1alpha1``: pure conversion from the predecessor schema.

System Role
-----------
Receives mappings from :mod:`lib_versioned_config.core` once the version tag
has been sniffed, and returns :class:`~lib_versioned_config.domain.v1alpha2.Config`
instances. Free of I/O.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Final, Mapping, Sequence

from ..domain import v1alpha1, v1alpha2
from ..domain.schema import strict_decode
from ..domain.errors import ConfigImportError, LegacyParseError, ParseError, UnsupportedVersionError, with_cause
from ..observability import log_debug, make_event

MigrationStep = Callable[[Mapping[str, object]], v1alpha2.Config]

_CRITERIA: Final[tuple[str, ...]] = ("from_", "to", "cc", "subject", "has", "list_", "query")


def _decode_latest(data: Mapping[str, object]) -> v1alpha2.Config:
    return strict_decode(v1alpha2.Config, data)


def _decode_v1alpha1(data: Mapping[str, object]) -> v1alpha2.Config:
    try:
        legacy = strict_decode(v1alpha1.Config, data)
    except ParseError as exc:
        raise with_cause(LegacyParseError(f"error parsing {v1alpha1.VERSION} config"), exc) from exc
    return import_v1alpha1(legacy)


MIGRATIONS: Final[Mapping[str, MigrationStep]] = MappingProxyType(
    {
        v1alpha2.VERSION: _decode_latest,
        v1alpha1.VERSION: _decode_v1alpha1,
    }
)

SUPPORTED_VERSIONS: Final[tuple[str, ...]] = tuple(MIGRATIONS)


def migrate(version: str, data: Mapping[str, object], *, source: str | None = None) -> v1alpha2.Config:
    """Decode *data* declared as *version* and return it in the latest schema.

    Raises
    ------
    UnsupportedVersionError
        When *version* is empty or not in :data:`SUPPORTED_VERSIONS`.
    UnknownFieldError / ParseError
        When a latest-version document fails strict decoding.
    LegacyParseError
        (annotated) when a predecessor document fails strict decoding.
    ConfigImportError
        When a predecessor document cannot be expressed in the latest schema.

    Examples
    --------
    >>> migrate("v1alpha1", {"version": "v1alpha1", "author": {"name": "x"}}).author.name
    'x'
    >>> migrate("v0", {})
    Traceback (most recent call last):
    ...
    lib_versioned_config.domain.errors.UnsupportedVersionError: unsupported version 'v0'
    """

    step = MIGRATIONS.get(version)
    if step is None:
        raise UnsupportedVersionError(version)
    config = step(data)
    if version != v1alpha2.VERSION:
        log_debug(
            "config_migrated",
            **make_event("migrate", source, {"from_version": version, "to_version": config.version}),
        )
    return config


def import_v1alpha1(config: v1alpha1.Config) -> v1alpha2.Config:
    """Convert a ``v1alpha1`` config into the latest schema.

    Every filter becomes one rule. Within a filter, each criterion field turns
    into a node (an ``or`` node when it lists several values), names under
    ``consts`` are replaced by the values of the matching top-level const, and
    the ``not`` blocks become a single negated node. Multiple nodes are joined
    with ``and``.

    Raises
    ------
    ConfigImportError
        When a filter names an undefined const or has no criteria at all.

    Examples
    --------
    >>> legacy = v1alpha1.Config(
    ...     version="v1alpha1",
    ...     filters=[v1alpha1.Filter(filters=v1alpha1.CompositeFilters(from_=["a@x", "b@x"]))],
    ... )
    >>> rule = import_v1alpha1(legacy).rules[0]
    >>> [node.from_ for node in rule.filter.or_]
    ['a@x', 'b@x']
    """

    rules = [_import_filter(index, item, config.consts) for index, item in enumerate(config.filters)]
    return v1alpha2.Config(
        version=v1alpha2.VERSION,
        author=v1alpha2.Author(name=config.author.name, email=config.author.email),
        rules=rules,
    )


def _import_filter(index: int, item: v1alpha1.Filter, consts: Mapping[str, v1alpha1.Const]) -> v1alpha2.Rule:
    filters = item.filters
    nodes = _criteria_nodes(_literal_criteria(filters))
    negated: list[v1alpha2.FilterNode] = []
    if filters.not_ is not None:
        negated.extend(_criteria_nodes(_literal_criteria(filters.not_)))
    if filters.consts is not None:
        nodes.extend(_criteria_nodes(_const_criteria(index, filters.consts, consts)))
        if filters.consts.not_ is not None:
            negated.extend(_criteria_nodes(_const_criteria(index, filters.consts.not_, consts)))
    if negated:
        nodes.append(v1alpha2.FilterNode(not_=_join(negated, operator="or_")))
    if not nodes:
        raise ConfigImportError(f"filter #{index}: no criteria specified")
    return v1alpha2.Rule(filter=_join(nodes, operator="and_"), actions=_import_actions(item.actions))


def _literal_criteria(match: v1alpha1.MatchFilters) -> dict[str, list[str]]:
    criteria = {name: list(getattr(match, name)) for name in _CRITERIA if name != "query"}
    criteria["query"] = [match.query] if match.query else []
    return criteria


def _const_criteria(
    index: int, match: v1alpha1.MatchFilters, consts: Mapping[str, v1alpha1.Const]
) -> dict[str, list[str]]:
    resolved: dict[str, list[str]] = {}
    for name, const_names in _literal_criteria(match).items():
        values: list[str] = []
        for const_name in const_names:
            const = consts.get(const_name)
            if const is None:
                raise ConfigImportError(f"filter #{index}: undefined const '{const_name}'")
            values.extend(const.values)
        resolved[name] = values
    return resolved


def _criteria_nodes(criteria: Mapping[str, Sequence[str]]) -> list[v1alpha2.FilterNode]:
    nodes: list[v1alpha2.FilterNode] = []
    for name in _CRITERIA:
        leaves = [v1alpha2.FilterNode(**{name: value}) for value in criteria.get(name, ())]
        if leaves:
            nodes.append(_join(leaves, operator="or_"))
    return nodes


def _join(nodes: Sequence[v1alpha2.FilterNode], *, operator: str) -> v1alpha2.FilterNode:
    if len(nodes) == 1:
        return nodes[0]
    return v1alpha2.FilterNode(**{operator: list(nodes)})


def _import_actions(actions: v1alpha1.Actions) -> v1alpha2.Actions:
    return v1alpha2.Actions(
        archive=actions.archive,
        delete=actions.delete,
        mark_read=actions.mark_read,
        star=actions.star,
        mark_spam=True if actions.mark_spam else None,
        mark_important=actions.mark_important,
        category=actions.category,
        labels=list(actions.labels),
    )
