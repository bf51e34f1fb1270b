"""Tests for organization writes (slugs, deletes)."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.affiliation import affiliations
from app.models.organization import Organization
from app.models.person import Person
from app.schemas.organization import OrganizationCreate, OrganizationUpdate
from app.services.organization_service import OrganizationService
from app.services.relationship_sync import RelationshipSync
from core.exceptions.base import NotFoundException, TransientStorageException

pytestmark = pytest.mark.asyncio


class TestSlugs:
    """Slug assignment on create and update."""

    async def test_create_uses_normalized_name(self, create_organization):
        organization = await create_organization("Acme Corp")
        assert organization.slug == "acme-corp"

    async def test_duplicate_name_gets_timestamp_suffix(self, create_organization):
        first = await create_organization("Acme Corp")
        second = await create_organization("ACME corp!")

        assert first.slug == "acme-corp"
        assert second.slug.startswith("acme-corp-")
        assert second.slug.rpartition("-")[2].isdigit()

    async def test_resave_same_name_keeps_slug(
        self, db_session: AsyncSession, create_organization
    ):
        await create_organization("Acme Corp")
        second = await create_organization("Acme Corp")
        original_slug = second.slug

        updated = await OrganizationService(db_session).update(
            second.id, OrganizationUpdate(name="Acme Corp", city="Kraków")
        )

        assert updated.slug == original_slug
        assert updated.city == "Kraków"

    async def test_renaming_to_own_slug_is_not_a_collision(
        self, db_session: AsyncSession, create_organization
    ):
        organization = await create_organization("Acme Corp")

        updated = await OrganizationService(db_session).update(
            organization.id, OrganizationUpdate(name="ACME Corp")
        )

        assert updated.name == "ACME Corp"
        assert updated.slug == "acme-corp"

    async def test_rename_regenerates_slug(
        self, db_session: AsyncSession, create_organization
    ):
        organization = await create_organization("Acme Corp")

        updated = await OrganizationService(db_session).update(
            organization.id, OrganizationUpdate(name="Globex Inc")
        )

        assert updated.slug == "globex-inc"

    async def test_update_without_name_keeps_slug(
        self, db_session: AsyncSession, create_organization
    ):
        organization = await create_organization("Acme Corp")

        updated = await OrganizationService(db_session).update(
            organization.id, OrganizationUpdate(address="ul. Polna 5")
        )

        assert updated.slug == "acme-corp"
        assert updated.address == "ul. Polna 5"

    async def test_same_name_within_one_second(
        self, db_session: AsyncSession, tax_ids
    ):
        service = OrganizationService(db_session, clock=lambda: 1_700_000_000)
        slugs = []
        for _ in range(3):
            organization = await service.create(
                OrganizationCreate(
                    name="Acme Corp",
                    tax_id=tax_ids.generate(),
                    address="ul. Leśna 2",
                    city="Poznań",
                    postal_code="60-001",
                )
            )
            slugs.append(organization.slug)

        assert slugs == ["acme-corp", "acme-corp-1700000000", "acme-corp-1700000001"]

    async def test_concurrent_slug_conflict_is_retried(
        self, db_session: AsyncSession, create_organization, tax_ids
    ):
        await create_organization("Acme Corp")

        class StaleCheckService(OrganizationService):
            """First collision check misses the row committed by another writer."""

            checks = 0

            async def _slug_exists(self, slug, exclude_id=None):
                self.checks += 1
                if self.checks == 1:
                    return False
                return await super()._slug_exists(slug, exclude_id)

        service = StaleCheckService(db_session)
        organization = await service.create(
            OrganizationCreate(
                name="Acme Corp",
                tax_id=tax_ids.generate(),
                address="ul. Leśna 2",
                city="Poznań",
                postal_code="60-001",
            )
        )

        # stale miss, then the name and its suffixed form on retry
        assert service.checks == 3
        assert organization.slug.startswith("acme-corp-")

    async def test_second_conflict_surfaces_as_storage_error(
        self, db_session: AsyncSession, create_organization, tax_ids
    ):
        await create_organization("Acme Corp")

        class BlindService(OrganizationService):
            async def _slug_exists(self, slug, exclude_id=None):
                return False

        with pytest.raises(TransientStorageException):
            await BlindService(db_session).create(
                OrganizationCreate(
                    name="Acme Corp",
                    tax_id=tax_ids.generate(),
                    address="ul. Leśna 2",
                    city="Poznań",
                    postal_code="60-001",
                )
            )


class TestDelete:
    """Deleting organizations."""

    async def test_delete_removes_affiliations_but_keeps_people(
        self, db_session: AsyncSession, test_organization, test_people
    ):
        await RelationshipSync.for_organization(db_session).attach(
            test_organization.id, {p.id for p in test_people}
        )

        await OrganizationService(db_session).delete(test_organization.id)

        assert await Organization.get_by_id(db_session, test_organization.id) is None
        rows = await db_session.execute(select(affiliations))
        assert rows.all() == []
        for person in test_people:
            assert await Person.get_by_id(db_session, person.id) is not None

    async def test_delete_missing_organization(self, db_session: AsyncSession):
        with pytest.raises(NotFoundException):
            await OrganizationService(db_session).delete(424242)

    async def test_update_missing_organization(self, db_session: AsyncSession):
        with pytest.raises(NotFoundException):
            await OrganizationService(db_session).update(
                424242, OrganizationUpdate(city="Kraków")
            )
