"""Listing envelope shared by collection endpoints."""

from typing import Generic, List, Optional, Type, TypeVar

from app.schemas.base import BaseSchema
from app.services.collection_query import Page

T = TypeVar("T")


class PaginationMeta(BaseSchema):
    """Position of a page within the collection."""

    current_page: int
    per_page: int
    last_page: int
    total: int


class ListResponse(BaseSchema, Generic[T]):
    """Collection response; ``meta`` is null for an unpaginated listing."""

    data: List[T]
    meta: Optional[PaginationMeta] = None

    @classmethod
    def from_page(
        cls, page: Page, unbounded: bool, item_schema: Type[BaseSchema]
    ) -> "ListResponse":
        meta = None
        if not unbounded:
            meta = PaginationMeta(
                current_page=page.current_page,
                per_page=page.per_page,
                last_page=page.last_page,
                total=page.total,
            )
        return cls(
            data=[item_schema.model_validate(item) for item in page.items],
            meta=meta,
        )
