from typing import Callable, Optional

from fastapi import Query

from app.services.collection_query import (
    MAX_TAKE,
    CollectionParams,
    default_params,
    resolve,
)


def collection_params(allowed_order_fields: set[str]) -> Callable[..., CollectionParams]:
    """
    Build a dependency resolving ``take``/``order[by]``/``order[dir]``.

    Usage:
        @router.get("/")
        async def list_items(
            params: CollectionParams = Depends(collection_params({"id", "name"})),
        ):
            ...
    """

    async def dependency(
        take: Optional[int] = Query(
            None,
            ge=0,
            le=MAX_TAKE,
            description="Page size; 0 returns the whole collection",
        ),
        order_by: Optional[str] = Query(None, alias="order[by]"),
        order_dir: Optional[str] = Query(None, alias="order[dir]"),
    ) -> CollectionParams:
        return resolve(
            {"take": take, "order_by": order_by, "order_dir": order_dir},
            default_params(),
            allowed_order_fields,
        )

    return dependency
