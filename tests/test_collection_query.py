"""Tests for listing parameter resolution."""

import pytest

from app.models.organization import Organization
from app.services.collection_query import (
    MAX_PAGE,
    MAX_TAKE,
    CollectionParams,
    Page,
    fetch_page,
    resolve,
)
from core.exceptions.base import ValidationException

DEFAULTS = CollectionParams(take=10, order_by="id", order_dir="asc")
ALLOWED = {"id", "name", "created_at"}


class TestResolve:
    """Tests for resolve()."""

    def test_empty_params_return_defaults(self):
        assert resolve({}, DEFAULTS, ALLOWED) == DEFAULTS

    def test_none_values_return_defaults(self):
        params = {"take": None, "order_by": None, "order_dir": None}
        assert resolve(params, DEFAULTS, ALLOWED) == DEFAULTS

    def test_take_zero_means_unbounded(self):
        resolved = resolve({"take": 0}, DEFAULTS, ALLOWED)
        assert resolved.take == 0
        assert resolved.unbounded is True
        assert DEFAULTS.unbounded is False

    def test_overrides(self):
        resolved = resolve(
            {"take": 25, "order_by": "name", "order_dir": "desc"}, DEFAULTS, ALLOWED
        )
        assert resolved == CollectionParams(take=25, order_by="name", order_dir="desc")

    @pytest.mark.parametrize("order_dir", ["DESC", "Asc"])
    def test_direction_is_case_sensitive(self, order_dir):
        with pytest.raises(ValidationException):
            resolve({"order_dir": order_dir}, DEFAULTS, ALLOWED)

    def test_take_upper_bound(self):
        assert resolve({"take": MAX_TAKE}, DEFAULTS, ALLOWED).take == MAX_TAKE
        with pytest.raises(ValidationException):
            resolve({"take": MAX_TAKE + 1}, DEFAULTS, ALLOWED)
        with pytest.raises(ValidationException):
            resolve({"take": 10**19}, DEFAULTS, ALLOWED)

    @pytest.mark.parametrize("take", [-1, "10", 1.5, True])
    def test_invalid_take(self, take):
        with pytest.raises(ValidationException):
            resolve({"take": take}, DEFAULTS, ALLOWED)

    def test_unknown_order_field(self):
        with pytest.raises(ValidationException) as exc_info:
            resolve({"order_by": "password"}, DEFAULTS, ALLOWED)
        assert exc_info.value.code == 422
        assert exc_info.value.data["allowed"] == sorted(ALLOWED)

    def test_unknown_direction(self):
        with pytest.raises(ValidationException):
            resolve({"order_dir": "sideways"}, DEFAULTS, ALLOWED)


class TestPage:
    """Tests for Page.last_page."""

    @pytest.mark.parametrize(
        "total,per_page,expected",
        [(0, 10, 1), (10, 10, 1), (11, 10, 2), (30, 10, 3), (5, 0, 1)],
    )
    def test_last_page(self, total, per_page, expected):
        page = Page(items=[], total=total, current_page=1, per_page=per_page)
        assert page.last_page == expected


class TestFetchPage:
    """Tests for fetch_page() bounds."""

    @pytest.mark.asyncio
    async def test_page_beyond_limit_rejected(self, db_session):
        with pytest.raises(ValidationException) as exc_info:
            await fetch_page(db_session, Organization, DEFAULTS, page=MAX_PAGE + 1)
        assert exc_info.value.data["field"] == "page"

    @pytest.mark.asyncio
    async def test_last_allowed_page_is_empty(self, db_session, create_organization):
        await create_organization("Acme Corp")

        page = await fetch_page(db_session, Organization, DEFAULTS, page=MAX_PAGE)

        assert page.items == []
        assert page.total == 1
