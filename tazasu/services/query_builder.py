# File: tazasu/services/query_builder.py

"""
Composable filters for list endpoints.

Each predicate is a small typed object that renders to a SQLAlchemy clause,
so user-supplied values always travel as bound parameters and are never
pasted into SQL text. ``build_list_query`` ANDs the clauses onto a base
``select()`` and appends the ordering and pagination.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, Select, or_
from sqlalchemy.dialects import sqlite
from sqlalchemy.engine import Dialect


class Predicate:
    """A single optional filter. ``clause()`` returns None when inactive."""

    def clause(self) -> Optional[ColumnElement[bool]]:
        raise NotImplementedError


@dataclass(frozen=True)
class EnumPredicate(Predicate):
    """Exact match against one of ``allowed``; anything else is dropped."""

    column: Any
    value: Optional[str]
    allowed: Sequence[str]

    def clause(self):
        if self.value is None or self.value not in self.allowed:
            return None
        return self.column == self.value


@dataclass(frozen=True)
class StatusPredicate(EnumPredicate):
    pass


@dataclass(frozen=True)
class SearchPredicate(Predicate):
    """Case-insensitive substring match ORed across several text columns."""

    columns: Sequence[Any]
    term: Optional[str]

    def clause(self):
        term = (self.term or "").strip()
        if not term or not self.columns:
            return None
        pattern = f"%{term}%"
        return or_(*(column.ilike(pattern) for column in self.columns))


@dataclass(frozen=True)
class OwnerPredicate(Predicate):
    column: Any
    owner_id: Optional[int]

    def clause(self):
        if self.owner_id is None:
            return None
        return self.column == self.owner_id


def where_clauses(predicates: Iterable[Predicate]) -> List[ColumnElement[bool]]:
    """Active clauses of ``predicates`` in their original order."""
    clauses = []
    for predicate in predicates:
        clause = predicate.clause()
        if clause is not None:
            clauses.append(clause)
    return clauses


def apply_filters(stmt: Select, predicates: Iterable[Predicate]) -> Select:
    clauses = where_clauses(predicates)
    if clauses:
        stmt = stmt.where(*clauses)
    return stmt


def build_list_query(
    base: Select,
    predicates: Iterable[Predicate],
    order_by: Sequence[Any],
    limit: int,
    offset: int,
) -> Select:
    """
    Filtered, ordered, paginated version of ``base``.

    ``order_by`` is applied as given (callers pass ``created_at DESC`` first);
    ``limit`` and ``offset`` become bound parameters.
    """
    stmt = apply_filters(base, predicates)
    return stmt.order_by(*order_by).limit(limit).offset(offset)


def render(stmt: Select, dialect: Optional[Dialect] = None) -> Tuple[str, List[Any]]:
    """
    Compile ``stmt`` into SQL text plus its positional parameter list.

    Defaults to the SQLite dialect, whose ``?`` placeholders are positional.
    """
    dialect = dialect or sqlite.dialect()
    compiled = stmt.compile(dialect=dialect)
    params = compiled.params
    if compiled.positiontup is not None:
        return str(compiled), [params[name] for name in compiled.positiontup]
    return str(compiled), list(params.values())
