"""Tests for slug normalization and collision handling."""

import time

import pytest

from app.services.slug_service import (
    SLUG_MAX_LENGTH,
    append_suffix,
    generate_slug,
    slugify,
)

pytestmark = pytest.mark.asyncio

FROZEN_TIME = 1_700_000_000


async def always_false(slug, exclude_id):
    return False


def taken(*slugs):
    """Existence check reporting only ``slugs`` as used."""

    async def check(slug, exclude_id):
        return slug in slugs

    return check


def frozen_clock():
    return FROZEN_TIME


class TestSlugify:
    """Tests for name normalization."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Acme Corp", "acme-corp"),
            ("  Acme   Corp  ", "acme-corp"),
            ("Acme & Sons, Ltd.", "acme-sons-ltd"),
            ("---Acme---", "acme"),
            ("Zakład Łódź Spółka", "zaklad-lodz-spolka"),
            ("Café Müller", "cafe-muller"),
            ("Straße 42", "strasse-42"),
            ("ACME2000", "acme2000"),
        ],
    )
    async def test_normalization(self, name, expected):
        assert slugify(name) == expected

    async def test_unrepresentable_name_is_empty(self):
        assert slugify("日本") == ""
        assert slugify("!!!") == ""


class TestAppendSuffix:
    """Tests for suffix appending."""

    async def test_short_candidate_kept(self):
        assert append_suffix("acme", "-1") == "acme-1"

    async def test_long_candidate_cut_to_exact_limit(self):
        slug = append_suffix("a" * 255, "-1700000000")
        assert len(slug) == SLUG_MAX_LENGTH
        assert slug.endswith("-1700000000")
        assert slug.startswith("a" * 244)


class TestGenerateSlug:
    """Tests for generate_slug."""

    async def test_no_collision_returns_candidate(self):
        assert await generate_slug("Acme Corp", None, always_false) == "acme-corp"

    async def test_collision_appends_timestamp(self):
        calls = []

        async def true_once(slug, exclude_id):
            calls.append((slug, exclude_id))
            return len(calls) == 1

        slug = await generate_slug("Acme Corp", None, true_once, clock=frozen_clock)
        assert slug == f"acme-corp-{FROZEN_TIME}"
        assert calls == [("acme-corp", None), (f"acme-corp-{FROZEN_TIME}", None)]

    async def test_collision_timestamp_matches_call_time(self):
        before = int(time.time())
        slug = await generate_slug("Acme Corp", None, taken("acme-corp"))
        after = int(time.time())

        prefix, _, suffix = slug.rpartition("-")
        assert prefix == "acme-corp"
        assert before <= int(suffix) <= after

    async def test_taken_suffix_moves_to_next_second(self):
        check = taken(
            "acme-corp",
            f"acme-corp-{FROZEN_TIME}",
            f"acme-corp-{FROZEN_TIME + 1}",
        )
        slug = await generate_slug("Acme Corp", None, check, clock=frozen_clock)
        assert slug == f"acme-corp-{FROZEN_TIME + 2}"

    async def test_existing_id_is_forwarded(self):
        seen = []

        async def check(slug, exclude_id):
            seen.append(exclude_id)
            return False

        await generate_slug("Acme Corp", 7, check)
        assert seen == [7]

    async def test_long_name_never_exceeds_limit(self):
        name = "Very Long Company Name " * 40
        candidate = slugify(name)[:SLUG_MAX_LENGTH]
        for check in (always_false, taken(candidate)):
            slug = await generate_slug(name, None, check, clock=frozen_clock)
            assert 0 < len(slug) <= SLUG_MAX_LENGTH

    async def test_long_name_collision_keeps_whole_suffix(self):
        slug = await generate_slug("x" * 600, None, taken("x" * 255), clock=frozen_clock)
        assert len(slug) == SLUG_MAX_LENGTH
        assert slug.endswith(f"-{FROZEN_TIME}")

    async def test_empty_name_falls_back_to_suffix(self):
        slug = await generate_slug("???", None, always_false, clock=frozen_clock)
        assert slug == f"-{FROZEN_TIME}"

    async def test_empty_name_suffix_collision(self):
        slug = await generate_slug("???", None, taken(f"-{FROZEN_TIME}"), clock=frozen_clock)
        assert slug == f"-{FROZEN_TIME + 1}"
