"""
Query filter value and the composer that turns it into the final predicate.
"""

import copy
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

SOFT_DELETE_FIELD = "deleted_at"
ASCENDING = 1
DESCENDING = -1


class Filter(BaseModel):
    """Caller built query: match fields, regex fields, sort, skip and limit."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filter: Dict[str, Any] = Field(default_factory=dict)
    # field -> pattern, matched case-insensitively
    regex_filter: Dict[str, str] = Field(default_factory=dict)
    sort_by: str = ""
    sort_mode: int = 0  # 0 means ascending
    skip: Optional[int] = None
    limit: Optional[int] = None
    # Keep soft-deleted documents in scope (caller's deleted_at survives merging)
    with_deleted: bool = False

    @classmethod
    def coerce(cls, value: Union["Filter", Mapping[str, Any], None]) -> "Filter":
        """Accept a Filter, a plain match mapping or None."""
        if value is None:
            return cls()
        if isinstance(value, Filter):
            return value
        return cls(filter=dict(value))


FilterLike = Union[Filter, Mapping[str, Any], None]


def merge_filter(value: FilterLike) -> Filter:
    """
    Build the final filter.

    Regex fields replace whatever literal sits under the same key, then
    deleted_at is forced to None so only live documents match. The input is
    left untouched; merging an already merged filter yields an equal one.
    """
    source = Filter.coerce(value)
    merged = source.model_copy(update={"filter": copy.copy(source.filter)})
    for field, pattern in source.regex_filter.items():
        merged.filter[field] = {"$regex": pattern, "$options": "i"}
    if not source.with_deleted:
        merged.filter[SOFT_DELETE_FIELD] = None
    return merged


def sort_spec(value: Filter) -> Optional[List[Tuple[str, int]]]:
    if not value.sort_by:
        return None
    return [(value.sort_by, value.sort_mode or ASCENDING)]


def find_options(value: Filter, with_limit: bool = True) -> Dict[str, Any]:
    """Keyword arguments for find()/find_one(); only options that are set."""
    options: Dict[str, Any] = {}
    if value.skip is not None:
        options["skip"] = value.skip
    if with_limit and value.limit is not None:
        options["limit"] = value.limit
    sort = sort_spec(value)
    if sort is not None:
        options["sort"] = sort
    return options
