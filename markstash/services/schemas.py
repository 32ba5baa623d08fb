"""Request schemas for the bookmark endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from markstash.services.validators import run_check

FILTERABLE_FIELDS = ("createdAt", "favorites")
SORTABLE_FIELDS = ("createdAt", "updatedAt", "favorites", "link")
SORT_DIRECTIONS = ("asc", "desc")

LINK_MAX_LENGTH = 256
MAX_PAGE_SIZE = 1000
MAX_OFFSET = 2**63 - 1


def _blocked_domains(info: ValidationInfo):
    context = info.context or {}
    return context.get("blocked_domains", ())


def _validate_link(value: str, info: ValidationInfo) -> str:
    result = run_check("link", value, blocked_domains=_blocked_domains(info))
    if not result.ok:
        raise PydanticCustomError(result.code, result.description)
    return value


class ListQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    limit: Optional[int] = Field(default=None, ge=0, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0, le=MAX_OFFSET)
    filter: Optional[str] = None
    filter_value: Optional[str] = None
    filter_from: Optional[str] = None
    filter_to: Optional[str] = None
    sort_by: str = "createdAt"
    sort_dir: str = "asc"

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data):
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value != ""}
        return data

    @field_validator("filter")
    @classmethod
    def known_filter(cls, value):
        if value is not None and value not in FILTERABLE_FIELDS:
            raise PydanticCustomError(
                "BOOKMARKS_INVALID_FILTER",
                "filter must be one of: {allowed}",
                {"allowed": ", ".join(FILTERABLE_FIELDS)},
            )
        return value

    @field_validator("sort_by")
    @classmethod
    def known_sort_field(cls, value):
        if value not in SORTABLE_FIELDS:
            raise PydanticCustomError(
                "BOOKMARKS_INVALID_SORT",
                "sort_by must be one of: {allowed}",
                {"allowed": ", ".join(SORTABLE_FIELDS)},
            )
        return value

    @field_validator("sort_dir")
    @classmethod
    def known_sort_direction(cls, value):
        direction = value.lower()
        if direction not in SORT_DIRECTIONS:
            raise PydanticCustomError(
                "BOOKMARKS_INVALID_SORT",
                "sort_dir must be asc or desc",
            )
        return direction


class BookmarkCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    link: StrictStr = Field(max_length=LINK_MAX_LENGTH)
    description: StrictStr = Field(min_length=1)
    favorites: StrictBool = False

    @field_validator("link")
    @classmethod
    def link_allowed(cls, value, info: ValidationInfo):
        return _validate_link(value, info)


class BookmarkPatch(BaseModel):
    """Partial update. Fields left out of the payload stay untouched and are
    absent from :meth:`changes`; ``null`` is rejected because no column is
    nullable."""

    model_config = ConfigDict(extra="forbid")

    link: Optional[StrictStr] = Field(default=None, max_length=LINK_MAX_LENGTH)
    description: Optional[StrictStr] = Field(default=None, min_length=1)
    favorites: Optional[StrictBool] = None

    @field_validator("link", "description", "favorites", mode="before")
    @classmethod
    def not_null(cls, value, info: ValidationInfo):
        if value is None:
            raise PydanticCustomError(
                "BOOKMARKS_NULL_VALUE",
                "{field} may not be null",
                {"field": info.field_name},
            )
        return value

    @field_validator("link")
    @classmethod
    def link_allowed(cls, value, info: ValidationInfo):
        return _validate_link(value, info)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
