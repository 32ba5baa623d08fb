from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pydantic
from pydantic import TypeAdapter
from sqlalchemy import and_, or_

from markstash.errors import ValidationError
from markstash.models import Bookmark, as_utc
from markstash.services.schemas import ListQuery

MISSING_FILTER_VALUE = "BOOKMARKS_MISSING_FILTER_VALUE"
INVALID_DATE = "BOOKMARKS_INVALID_DATE"

COLUMNS = {
    "createdAt": Bookmark.created_at,
    "updatedAt": Bookmark.updated_at,
    "favorites": Bookmark.favorites,
    "link": Bookmark.link,
}

_DATETIME = TypeAdapter(datetime)


@dataclass(frozen=True)
class FilterSpec:
    field: str | None = None
    equals_value: object = None
    range_from: datetime | None = None
    range_to: datetime | None = None
    sort_field: str = "createdAt"
    sort_direction: str = "asc"
    limit: int = 50
    offset: int = 0

    @property
    def has_equality(self) -> bool:
        return self.field is not None and self.equals_value is not None

    @property
    def has_range(self) -> bool:
        return self.range_from is not None and self.range_to is not None


def parse_datetime(field: str, raw: str) -> datetime:
    try:
        return as_utc(_DATETIME.validate_python(raw))
    except pydantic.ValidationError:
        raise ValidationError.single(
            field, INVALID_DATE, f"{field} must be a valid date-time"
        ) from None


def _favorites_spec(query: ListQuery) -> dict:
    if query.filter_value is None:
        raise ValidationError.single(
            "filter_value", MISSING_FILTER_VALUE, "select a filter_value"
        )
    return {"equals_value": query.filter_value == "true"}


def _created_at_spec(query: ListQuery) -> dict:
    has_range = query.filter_from is not None and query.filter_to is not None
    if query.filter_value is None and not has_range:
        raise ValidationError.single(
            "filter_value",
            MISSING_FILTER_VALUE,
            "select a filter_value or both filter_from and filter_to",
        )

    values: dict = {}
    if query.filter_value is not None:
        values["equals_value"] = parse_datetime("filter_value", query.filter_value)
    if has_range:
        values["range_from"] = parse_datetime("filter_from", query.filter_from)
        values["range_to"] = parse_datetime("filter_to", query.filter_to)
    return values


_FIELD_RULES = {
    "favorites": _favorites_spec,
    "createdAt": _created_at_spec,
}


def build_filter_spec(raw_args: dict, default_limit: int = 50) -> FilterSpec:
    """Validate raw query-string values into a :class:`FilterSpec`.

    Raises :class:`ValidationError` before anything touches the database.
    """
    try:
        query = ListQuery.model_validate(dict(raw_args))
    except pydantic.ValidationError as exc:
        raise ValidationError.from_pydantic(exc) from None

    values: dict = {}
    if query.filter is not None:
        values = _FIELD_RULES[query.filter](query)

    return FilterSpec(
        field=query.filter,
        sort_field=query.sort_by,
        sort_direction=query.sort_dir,
        limit=default_limit if query.limit is None else query.limit,
        offset=query.offset,
        **values,
    )


def filter_clause(spec: FilterSpec):
    """Return the WHERE clause for ``spec`` or ``None`` for an unconstrained listing."""
    if spec.field is None:
        return None

    column = COLUMNS[spec.field]
    predicates = []
    if spec.has_equality:
        predicates.append(column == spec.equals_value)
    if spec.has_range:
        predicates.append(and_(column >= spec.range_from, column <= spec.range_to))

    if not predicates:
        return None
    if len(predicates) == 1:
        return predicates[0]
    return or_(*predicates)


def order_clauses(spec: FilterSpec) -> list:
    column = COLUMNS[spec.sort_field]
    if spec.sort_direction == "desc":
        return [column.desc(), Bookmark.id.desc()]
    return [column.asc(), Bookmark.id.asc()]
