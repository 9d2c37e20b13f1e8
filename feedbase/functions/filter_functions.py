"""
Translation of a generic filter request into searcher instructions.

A filter request is a mapping that callers usually build from an external
payload. Reserved keys:

- `_sortKey`: attribute name to order by.
- `_sortDirection`: `ASC`/`DESC`, or `ascending`/`descending`; anything else means `ASC`.
- `_offset`, `_length`: pagination, applied only when offset >= 0 and length > 0.

Every other key is an equality filter on the mapped attribute of that name.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, NamedTuple

from feedbase.models.fc_model import PropertyMapping
from feedbase.sql.searcher import SQLSearcher

logger = logging.getLogger(__name__)

FILTER_KEY_PATTERN = re.compile(r"^[a-zA-Z]\w*$")

_SORT_DIRECTION_SYNONYMS = {
    "ASC": "ASC",
    "DESC": "DESC",
    "ASCENDING": "ASC",
    "DESCENDING": "DESC",
}


class SortRule(NamedTuple):
    sort_key: str
    sort_direction: str


class LimitInfo(NamedTuple):
    offset: int
    length: int

    def is_active(self) -> bool:
        return self.offset >= 0 and self.length > 0


def build_sort_rule(params: Mapping[str, Any]) -> SortRule:
    direction = str(params.get("_sortDirection") or "ASC")
    return SortRule(
        sort_key=str(params.get("_sortKey") or ""),
        sort_direction=_SORT_DIRECTION_SYNONYMS.get(direction.upper(), "ASC"),
    )


def _as_int(value: Any) -> int:
    """Parse a pagination value; numeric strings such as "2.0" or "1e1" are accepted."""
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return -1


def build_limit_info(params: Mapping[str, Any]) -> LimitInfo:
    """Read `_offset`/`_length`; missing or unparsable values become -1."""
    return LimitInfo(offset=_as_int(params.get("_offset", -1)), length=_as_int(params.get("_length", -1)))


def extract_filter_conditions(params: Mapping[str, Any], mapping: PropertyMapping) -> dict[str, Any]:
    """
    Return the `{column: value}` equality filters of a filter request.

    A key becomes a filter only if it looks like an identifier, names a mapped
    attribute and carries a truthy value. Falsy values (0, "", None, False)
    are dropped rather than filtered on.
    """
    conditions: dict[str, Any] = {}
    for key, value in params.items():
        if not FILTER_KEY_PATTERN.match(key) or key not in mapping or not value:
            continue
        column = mapping.column_for(key)
        if column is not None:
            conditions[column] = value
    return conditions


def clean_filter_params(params: Mapping[str, Any], mapping: PropertyMapping) -> dict[str, Any]:
    """Return a copy of `params` restricted to mapped attribute names."""
    return {key: value for key, value in params.items() if key in mapping}


def apply_filter_options(processor: SQLSearcher, params: Mapping[str, Any], mapping: PropertyMapping) -> SQLSearcher:
    """Configure `processor` with the sort rule, equality filters and pagination of a filter request."""
    sort_rule = build_sort_rule(params)
    sort_column = mapping.column_for(sort_rule.sort_key) if sort_rule.sort_key else None
    if sort_column:
        processor.add_order_rule(sort_column, sort_rule.sort_direction)
    elif sort_rule.sort_key:
        logger.debug("Ignoring unmapped sort key '%s'", sort_rule.sort_key)

    for column, value in extract_filter_conditions(params, mapping).items():
        processor.add_condition_kv(column, value)

    limit_info = build_limit_info(params)
    if limit_info.is_active():
        processor.set_limit_info(limit_info.offset, limit_info.length)
    return processor
