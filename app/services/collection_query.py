"""Pagination and ordering of list endpoints."""

import math
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import config
from core.db import MAX_INTEGER
from core.exceptions.base import ValidationException

T = TypeVar("T")

ORDER_DIRECTIONS = ("asc", "desc")

# Bound to what the database driver can bind as LIMIT/OFFSET operands
MAX_TAKE = MAX_INTEGER
MAX_PAGE = MAX_INTEGER


@dataclass(frozen=True)
class CollectionParams:
    """Resolved listing parameters.

    ``take == 0`` means the whole collection is returned unpaginated.
    """

    take: int
    order_by: str
    order_dir: str

    @property
    def unbounded(self) -> bool:
        return self.take == 0


@dataclass
class Page(Generic[T]):
    """One page of a collection (or the whole collection when unbounded)."""

    items: Sequence[T]
    total: int
    current_page: int
    per_page: int

    @property
    def last_page(self) -> int:
        if self.per_page == 0:
            return 1
        return max(1, math.ceil(self.total / self.per_page))


def default_params() -> CollectionParams:
    """Listing defaults from the application settings."""
    return CollectionParams(
        take=config.PAGINATION_DEFAULT_TAKE,
        order_by=config.PAGINATION_DEFAULT_ORDER_BY,
        order_dir=config.PAGINATION_DEFAULT_ORDER_DIR,
    )


def resolve(
    params: Mapping[str, Any],
    defaults: CollectionParams,
    allowed_order_fields: set[str],
) -> CollectionParams:
    """
    Merge request parameters over ``defaults``.

    Missing (or None) values fall back to the defaults. Values that are
    present are validated: ``take`` must be an integer from 0 to ``MAX_TAKE``,
    ``order_by`` one of ``allowed_order_fields`` and ``order_dir`` exactly
    ``asc`` or ``desc``.

    Raises:
        ValidationException: a supplied value is out of range
    """
    take = params.get("take")
    order_by = params.get("order_by")
    order_dir = params.get("order_dir")

    if take is None:
        take = defaults.take
    elif isinstance(take, bool) or not isinstance(take, int) or not 0 <= take <= MAX_TAKE:
        raise ValidationException(
            message=f"take must be an integer between 0 and {MAX_TAKE}",
            data={"field": "take", "value": take},
        )

    if order_by is None:
        order_by = defaults.order_by
    elif order_by not in allowed_order_fields:
        raise ValidationException(
            message=f"Cannot order by '{order_by}'",
            data={"field": "order[by]", "allowed": sorted(allowed_order_fields)},
        )

    if order_dir is None:
        order_dir = defaults.order_dir
    elif order_dir not in ORDER_DIRECTIONS:
        raise ValidationException(
            message="order[dir] must be 'asc' or 'desc'",
            data={"field": "order[dir]", "allowed": list(ORDER_DIRECTIONS)},
        )

    return CollectionParams(take=take, order_by=order_by, order_dir=order_dir)


def apply_ordering(query: Select, model, params: CollectionParams) -> Select:
    """Order ``query`` by the requested column, ties broken by primary key."""
    column = getattr(model, params.order_by)
    ordered = column.desc() if params.order_dir == "desc" else column.asc()
    if params.order_by == "id":
        return query.order_by(ordered)
    return query.order_by(ordered, model.id.asc())


async def fetch_page(
    db_session: AsyncSession,
    model,
    params: CollectionParams,
    page: int = 1,
    query: Optional[Select] = None,
) -> Page:
    """
    Run a listing query: ordering first, then pagination.

    Args:
        db_session: Database session
        model: Mapped class being listed
        params: Resolved listing parameters
        page: 1-based page number, ignored when ``params.take == 0``
        query: Pre-filtered select over ``model`` (defaults to all rows)
    """
    if page > MAX_PAGE:
        raise ValidationException(
            message=f"page must be at most {MAX_PAGE}",
            data={"field": "page", "value": page},
        )

    base_query = query if query is not None else select(model)

    count_result = await db_session.execute(
        select(func.count()).select_from(base_query.order_by(None).subquery())
    )
    total = count_result.scalar() or 0

    ordered = apply_ordering(base_query, model, params)
    if params.unbounded:
        result = await db_session.execute(ordered)
        return Page(items=result.scalars().all(), total=total, current_page=1, per_page=0)

    page = max(page, 1)
    result = await db_session.execute(
        ordered.offset((page - 1) * params.take).limit(params.take)
    )
    return Page(
        items=result.scalars().all(),
        total=total,
        current_page=page,
        per_page=params.take,
    )
