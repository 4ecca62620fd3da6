"""
Shared helpers for tool modules: filter conversion, query assembly and
result shaping.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from evateam_mcp.core.query import (
    Eq,
    Gt,
    GtOrEq,
    Like,
    Lt,
    LtOrEq,
    NotEq,
    Predicate,
    QueryBuilder,
)
from evateam_mcp.core.tools.errors import invalid_input

DEFAULT_LIMIT = 100
MAX_LIMIT = 500

_OPERATORS = {
    "==": Eq,
    "=": Eq,
    "!=": NotEq,
    "<>": NotEq,
    ">": Gt,
    ">=": GtOrEq,
    "<": Lt,
    "<=": LtOrEq,
    "LIKE": Like,
    "like": Like,
}


class Filter(BaseModel):
    """One condition: [field, operator, value]."""

    field: str
    operator: str = "=="
    value: Any = None

    model_config = ConfigDict(extra="forbid")


def filter_to_predicate(f: Filter, operation: str = "query") -> Predicate:
    if f.operator == "contains":
        raise invalid_input(
            operation, "'contains' is only available through the dedicated filters"
        )
    pred_cls = _OPERATORS.get(f.operator)
    if pred_cls is None:
        raise invalid_input(operation, f"unsupported operator: {f.operator}")
    if not f.field:
        raise invalid_input(operation, "filter field is required")
    return pred_cls(f.field, f.value)


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_LIMIT))


def build_query(
    qb: QueryBuilder,
    *,
    operation: str,
    fields: Optional[Sequence[str]] = None,
    filters: Optional[Sequence[Filter]] = None,
    order_by: Optional[Sequence[str]] = None,
    offset: int = 0,
    limit: Optional[int] = DEFAULT_LIMIT,
    include_archived: bool = False,
) -> QueryBuilder:
    """
    Apply common tool query params to a builder already bound to an entity.
    - limit is clamped to 1..MAX_LIMIT; limit=None sends no slice (counts)
    - negative offset -> InvalidInputError
    """
    if offset < 0:
        raise invalid_input(operation, "offset must be >= 0")

    if fields:
        qb.select(*fields)
    for f in filters or ():
        qb.where(filter_to_predicate(f, operation))
    if order_by:
        qb.order_by(*order_by)
    if limit is not None:
        qb.offset(offset).limit(_clamp_limit(limit))
    if include_archived:
        qb.include_archived()
    return qb


def with_raw_filter(kwargs: Dict[str, Any], triple: List[Any]) -> Dict[str, Any]:
    """AND one extra raw triple onto a kwargs filter (single or list form)."""
    current = kwargs.get("filter")
    if current is None:
        kwargs["filter"] = triple
    elif current and isinstance(current[0], list):
        kwargs["filter"] = [*current, triple]
    else:
        kwargs["filter"] = [current, triple]
    return kwargs


def dump(obj: Any) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", exclude_none=True)
    return obj


def list_result(items: Iterable[Any], limit: int) -> Dict[str, Any]:
    rows = [dump(i) for i in items]
    return {"items": rows, "has_more": len(rows) == _clamp_limit(limit)}


def count_result(count: int) -> Dict[str, Any]:
    return {"count": count}


def require(value: Optional[str], name: str, operation: str) -> str:
    if not value or not str(value).strip():
        raise invalid_input(operation, f"{name} is required")
    return str(value).strip()


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "Filter",
    "filter_to_predicate",
    "build_query",
    "with_raw_filter",
    "dump",
    "list_result",
    "count_result",
    "require",
]
