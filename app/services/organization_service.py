"""Create, update and delete organizations."""

import time
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.affiliation import affiliations
from app.models.organization import Organization
from app.schemas.organization import OrganizationCreate, OrganizationUpdate
from app.services.slug_service import generate_slug
from core.db import run_in_transaction
from core.exceptions.base import NotFoundException, TransientStorageException
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class OrganizationService:
    """Write operations on organizations."""

    def __init__(self, db_session: AsyncSession, clock: Callable[[], float] = time.time):
        self.db_session = db_session
        self.clock = clock

    async def _slug_exists(self, slug: str, exclude_id=None) -> bool:
        return await Organization.slug_exists(self.db_session, slug, exclude_id)

    async def _save(self, callback: Callable[[], Awaitable[T]], description: str) -> T:
        """
        Run a slug-affecting write.

        The collision check and the write are separate statements, so a
        concurrent writer can take the same slug in between. The unique
        constraint catches that; the write is then retried once, which
        regenerates the slug against the now-visible row.
        """
        try:
            return await run_in_transaction(
                self.db_session, callback, description=description
            )
        except IntegrityError as e:
            logger.warning(f"Slug conflict during {description}, retrying: {e.orig!r}")

        try:
            return await run_in_transaction(
                self.db_session, callback, description=description
            )
        except IntegrityError as e:
            logger.error(f"{description} failed twice on slug conflict: {e.orig!r}")
            raise TransientStorageException() from e

    async def _get_or_404(self, organization_id: int) -> Organization:
        organization = await Organization.get_by_id(self.db_session, organization_id)
        if not organization:
            raise NotFoundException(f"Organization {organization_id} not found")
        return organization

    async def create(self, data: OrganizationCreate) -> Organization:
        """Create an organization with a freshly generated slug."""

        async def _create() -> Organization:
            slug = await generate_slug(
                data.name, None, self._slug_exists, clock=self.clock
            )
            organization = Organization(
                name=data.name,
                slug=slug,
                tax_id=data.tax_id,
                address=data.address,
                city=data.city,
                postal_code=data.postal_code,
            )
            self.db_session.add(organization)
            await self.db_session.flush()
            return organization

        organization = await self._save(_create, description="create organization")
        await self.db_session.refresh(organization)
        logger.info(f"Created organization {organization.id} ({organization.slug})")
        return organization

    async def update(self, organization_id: int, data: OrganizationUpdate) -> Organization:
        """
        Apply the fields present in ``data``.

        The slug is only regenerated when the name actually changes.
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        async def _update() -> Organization:
            organization = await self._get_or_404(organization_id)
            new_name = changes.get("name")
            if new_name is not None and new_name != organization.name:
                organization.slug = await generate_slug(
                    new_name, organization.id, self._slug_exists, clock=self.clock
                )
            for field, value in changes.items():
                setattr(organization, field, value)
            await self.db_session.flush()
            return organization

        organization = await self._save(
            _update, description=f"update organization {organization_id}"
        )
        await self.db_session.refresh(organization)
        logger.info(f"Updated organization {organization.id}: {sorted(changes)}")
        return organization

    async def delete(self, organization_id: int) -> None:
        """Delete an organization together with its affiliations."""

        async def _delete() -> None:
            organization = await self._get_or_404(organization_id)
            await self.db_session.execute(
                delete(affiliations).where(
                    affiliations.c.organization_id == organization.id
                )
            )
            await self.db_session.delete(organization)

        await run_in_transaction(
            self.db_session,
            _delete,
            description=f"delete organization {organization_id}",
        )
        logger.info(f"Deleted organization {organization_id}")
