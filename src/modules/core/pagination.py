"""Offset pagination driven by ``page`` / ``limit`` query parameters.

``offset = (page - 1) * limit``.  Pages past the end yield an empty
list rather than a 404, so clients can page until they see ``[]``.
"""

from __future__ import annotations

from typing import Any, Mapping

from django.conf import settings
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class InvalidPageRequest(ValueError):
    """``page`` or ``limit`` is not a positive integer."""


class PageRequest(BaseModel):
    """Immutable page window for list queries."""

    model_config = ConfigDict(frozen=True)

    page: int = 1
    limit: int = 10

    @field_validator("page", "limit")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def slice(self, queryset: Any) -> list:
        """Apply the window to a queryset (or any sliceable sequence)."""
        return list(queryset[self.offset : self.offset + self.limit])

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> PageRequest:
        """Build a page request from query parameters.

        Missing values fall back to page 1 and ``DEFAULT_PAGE_LIMIT``;
        ``limit`` is capped at ``MAX_PAGE_LIMIT``.

        Raises:
            InvalidPageRequest: a value is not a positive integer.
        """
        raw_page = params.get("page") or 1
        raw_limit = params.get("limit") or settings.DEFAULT_PAGE_LIMIT
        try:
            request = cls(page=raw_page, limit=raw_limit)
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors())
            raise InvalidPageRequest(
                f"Invalid pagination parameters: {fields}."
            ) from exc
        if request.limit > settings.MAX_PAGE_LIMIT:
            request = cls(page=request.page, limit=settings.MAX_PAGE_LIMIT)
        return request
