"""
Query builder that translates a SQL-like description into EVA API kwargs.

Example:

    qb = (
        QueryBuilder()
        .select("id", "name", "code")
        .from_(EntityName.PROJECT)
        .where(Eq("code", "PROJ-123"))
        .order_by("-cmf_created_at")
        .limit(50)
    )
    qb.to_kwargs()  # {"filter": ["code", "==", "PROJ-123"], ...}
    qb.to_method()  # "CmfProject.list"

Only flat conjunctions are representable on the wire: every where() call is
ANDed onto the root and there is no OR predicate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from .errors import QueryBuildError


@dataclass(frozen=True)
class _Comparison:
    field: str
    value: Any

    operator: ClassVar[str] = ""

    def triple(self) -> List[Any]:
        return [self.field, self.operator, self.value]


@dataclass(frozen=True)
class Eq(_Comparison):
    operator: ClassVar[str] = "=="


@dataclass(frozen=True)
class NotEq(_Comparison):
    operator: ClassVar[str] = "!="


@dataclass(frozen=True)
class Gt(_Comparison):
    operator: ClassVar[str] = ">"


@dataclass(frozen=True)
class GtOrEq(_Comparison):
    operator: ClassVar[str] = ">="


@dataclass(frozen=True)
class Lt(_Comparison):
    operator: ClassVar[str] = "<"


@dataclass(frozen=True)
class LtOrEq(_Comparison):
    operator: ClassVar[str] = "<="


@dataclass(frozen=True)
class Like(_Comparison):
    operator: ClassVar[str] = "LIKE"


@dataclass(frozen=True, init=False)
class And:
    predicates: Tuple["Predicate", ...]

    def __init__(self, *predicates: "Predicate"):
        for pred in predicates:
            _check_predicate(pred)
        object.__setattr__(self, "predicates", tuple(predicates))

    def __len__(self) -> int:
        return len(self.predicates)


Predicate = Union[Eq, NotEq, Gt, GtOrEq, Lt, LtOrEq, Like, And]

_COMPARISONS = (Eq, NotEq, Gt, GtOrEq, Lt, LtOrEq, Like)


def _check_predicate(pred: Any) -> None:
    if not isinstance(pred, (_COMPARISONS, And)):
        raise TypeError(
            f"Unsupported predicate {type(pred).__name__}; expected one of "
            "Eq, NotEq, Gt, GtOrEq, Lt, LtOrEq, Like, And"
        )


def filter_triples(pred: Predicate) -> List[List[Any]]:
    """Flatten a predicate into [field, operator, value] triples (implicit AND)."""
    if isinstance(pred, And):
        triples: List[List[Any]] = []
        for child in pred.predicates:
            triples.extend(filter_triples(child))
        return triples
    if isinstance(pred, _COMPARISONS):
        return [pred.triple()]
    raise TypeError(f"Unsupported predicate {type(pred).__name__}")


def between(field: str, low: Any, high: Any) -> And:
    """Inclusive range filter: field >= low AND field <= high."""
    return And(GtOrEq(field, low), LtOrEq(field, high))


class QueryBuilder:
    """Mutable fluent builder; every mutator returns the same instance."""

    def __init__(self) -> None:
        self._columns: List[str] = []
        self._entity: Optional[str] = None
        self._root = And()
        self._order_by: List[str] = []
        self._offset = 0
        self._limit = 0
        self._paginated = False
        self._include_archived = False
        self._no_meta = False

    @property
    def entity(self) -> Optional[str]:
        return self._entity

    @property
    def predicate(self) -> And:
        return self._root

    def select(self, *columns: str) -> "QueryBuilder":
        self._columns.extend(c for c in columns if c)
        return self

    def from_(self, entity: str) -> "QueryBuilder":
        self._entity = str(entity) if entity else None
        return self

    def where(self, pred: Predicate) -> "QueryBuilder":
        _check_predicate(pred)
        self._root = And(*self._root.predicates, pred)
        return self

    def order_by(self, *keys: str) -> "QueryBuilder":
        self._order_by.extend(k for k in keys if k)
        return self

    def offset(self, n: int) -> "QueryBuilder":
        if n < 0:
            raise ValueError("offset must be >= 0")
        self._offset = n
        self._paginated = True
        return self

    def limit(self, n: int) -> "QueryBuilder":
        if n < 0:
            raise ValueError("limit must be >= 0")
        self._limit = n
        self._paginated = True
        return self

    def include_archived(self) -> "QueryBuilder":
        self._include_archived = True
        return self

    def no_meta(self) -> "QueryBuilder":
        self._no_meta = True
        return self

    def to_kwargs(self) -> Dict[str, Any]:
        """
        Translate to the API kwargs map.

        Keys: filter, fields, order_by, slice, include_archived, no_meta.
        Absent keys mean "server default".
        """
        kwargs: Dict[str, Any] = {}

        triples = filter_triples(self._root)
        if len(triples) == 1:
            kwargs["filter"] = triples[0]
        elif triples:
            kwargs["filter"] = triples

        if self._columns:
            kwargs["fields"] = list(self._columns)

        if self._order_by:
            kwargs["order_by"] = list(self._order_by)

        # slice is [start, end], not [start, count]
        if self._paginated:
            kwargs["slice"] = [self._offset, self._offset + self._limit]

        if self._include_archived:
            kwargs["include_archived"] = True
        if self._no_meta:
            kwargs["no_meta"] = True

        return kwargs

    def validate(self) -> None:
        if not self._entity:
            raise QueryBuildError(
                "missing from_() clause: specify the entity to query"
            )

    def to_method(self, verb: str = "list") -> str:
        """Remote method name for the entity, e.g. "CmfTask.list"."""
        self.validate()
        return f"{self._entity}.{verb}"

    def __repr__(self) -> str:
        return (
            f"QueryBuilder(entity={self._entity!r}, kwargs={self.to_kwargs()!r})"
        )


__all__ = [
    "Eq",
    "NotEq",
    "Gt",
    "GtOrEq",
    "Lt",
    "LtOrEq",
    "Like",
    "And",
    "Predicate",
    "QueryBuilder",
    "between",
    "filter_triples",
]
