"""
Record Filters

Translates declarative (field, operator, value) filters into EXISTS
predicates over the cell table. Values only ever travel as bound
parameters.
"""

import operator
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field
from sqlalchemy import and_, literal_column, select
from sqlalchemy.sql import ColumnElement

from ..core.exceptions import ErrorCode, ValidationError
from ..database.models import Cell, Record, to_cell_value


class FilterOperator(str, Enum):
    """Comparison operators supported by record filters."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"


class Filter(BaseModel):
    """
    A single condition on one field of a record.

    Cells hold text, so comparisons are textual: `gt`/`gte`/`lt`/`lte`
    order lexicographically and "100" sorts before "28".
    """

    field_id: str = Field(..., description="Field the condition applies to")
    operator: Optional[FilterOperator] = Field(
        default=None,
        description="Comparison operator, equality when omitted",
    )
    value: Any = Field(default=None, description="Value to compare against")


COMPARATORS: Dict[FilterOperator, Callable[[Any, Any], ColumnElement]] = {
    FilterOperator.EQ: operator.eq,
    FilterOperator.NEQ: operator.ne,
    FilterOperator.GT: operator.gt,
    FilterOperator.GTE: operator.ge,
    FilterOperator.LT: operator.lt,
    FilterOperator.LTE: operator.le,
}


def build_filter_clause(record_filter: Filter, project_id: str) -> ColumnElement:
    """
    Build the predicate for one filter.

    The result is true for a record when one of its cells belongs to the
    filter's field and its value compares true against the filter's value.

    Raises:
        ValidationError: If the operator has no SQL comparison.
    """
    op = record_filter.operator or FilterOperator.EQ
    comparator = COMPARATORS.get(op)
    if comparator is None:
        raise ValidationError(
            message=f"Unsupported filter operator: {op}",
            field="operator",
            code=ErrorCode.INVALID_FILTER,
        )

    return (
        select(literal_column("1"))
        .select_from(Cell)
        .where(
            and_(
                # project_id first so the lookup can use the cell index
                Cell.project_id == project_id,
                Cell.field_id == record_filter.field_id,
                Cell.record_id == Record.id,
                comparator(Cell.value, to_cell_value(record_filter.value)),
            )
        )
        .exists()
    )


def build_filter_clauses(
    filters: Optional[Sequence[Filter]],
    project_id: str,
) -> List[ColumnElement]:
    """Build one predicate per filter; callers AND them together."""
    return [build_filter_clause(f, project_id) for f in filters or []]


__all__ = [
    "FilterOperator",
    "Filter",
    "COMPARATORS",
    "build_filter_clause",
    "build_filter_clauses",
]
