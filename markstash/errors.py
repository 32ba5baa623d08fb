from __future__ import annotations

ErrorItems = dict[str, list[dict[str, str]]]


def error_item(code: str, description: str) -> dict[str, str]:
    return {"code": code, "description": description}


class MarkstashError(Exception):
    status_code = 400
    field = "backend"
    code = "BOOKMARKS_BACKEND"

    def __init__(self, description: str, errors: ErrorItems | None = None):
        super().__init__(description)
        self.description = description
        self._errors = errors

    @property
    def errors(self) -> ErrorItems:
        if self._errors is not None:
            return self._errors
        return {self.field: [error_item(self.code, self.description)]}

    def to_payload(self) -> dict:
        return {"errors": self.errors}


class ValidationError(MarkstashError):
    def __init__(self, errors: ErrorItems):
        super().__init__("invalid request", errors=errors)

    @classmethod
    def single(cls, field: str, code: str, description: str) -> "ValidationError":
        return cls({field: [error_item(code, description)]})

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        errors: ErrorItems = {}
        for detail in exc.errors():
            location = [str(part) for part in detail.get("loc") or ()]
            field = ".".join(location) or "request"
            errors.setdefault(field, []).append(
                error_item(detail["type"], detail["msg"])
            )
        return cls(errors)


class NotFoundError(MarkstashError):
    status_code = 404
    code = "BOOKMARKS_NOT_FOUND"

    def __init__(self, description: str = "Bookmark with that ID doesn't exist"):
        super().__init__(description)


class UpstreamFetchError(MarkstashError):
    code = "BOOKMARKS_FETCH_FAILED"

    def __init__(
        self, description: str = "Can't generate preview", reason: str | None = None
    ):
        super().__init__(description)
        self.reason = reason


class StoreError(MarkstashError):
    code = "BOOKMARKS_BACKEND"
