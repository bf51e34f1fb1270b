"""Create, update and delete people."""

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.affiliation import affiliations
from app.models.person import Person
from app.schemas.person import PersonCreate, PersonUpdate
from app.services.relationship_sync import RelationshipSync
from core.db import run_in_transaction
from core.exceptions.base import (
    NotFoundException,
    TransientStorageException,
    ValidationException,
)
from core.logging import get_logger

logger = get_logger(__name__)


class PersonService:
    """Write operations on people."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.organizations = RelationshipSync.for_person(db_session)

    async def _get_or_404(self, person_id: int) -> Person:
        person = await Person.get_by_id(self.db_session, person_id)
        if not person:
            raise NotFoundException(f"Person {person_id} not found")
        return person

    async def _ensure_email_available(self, email: str, exclude_id=None) -> None:
        if await Person.email_exists(self.db_session, email, exclude_id):
            raise ValidationException(
                message="The email has already been taken",
                data={"field": "email"},
            )

    async def create(self, data: PersonCreate) -> Person:
        """Create a person and attach the given organizations."""

        async def _create() -> Person:
            await self._ensure_email_available(data.email)
            person = Person(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                phone=data.phone,
            )
            self.db_session.add(person)
            await self.db_session.flush()
            if data.companies:
                await self.organizations.attach_in_transaction(
                    person.id, set(data.companies)
                )
            return person

        try:
            person = await run_in_transaction(
                self.db_session, _create, description="create person"
            )
        except IntegrityError as e:
            logger.error(f"Create person rejected by a constraint: {e.orig!r}")
            raise TransientStorageException() from e

        await self.db_session.refresh(person)
        logger.info(f"Created person {person.id}")
        return person

    async def update(self, person_id: int, data: PersonUpdate) -> Person:
        """Apply the given fields; a non-empty ``companies`` replaces the affiliations."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        companies = changes.pop("companies", None)

        async def _update() -> Person:
            person = await self._get_or_404(person_id)
            if "email" in changes:
                await self._ensure_email_available(changes["email"], person.id)
            for field, value in changes.items():
                setattr(person, field, value)
            await self.db_session.flush()
            if companies:
                await self.organizations.replace_in_transaction(
                    person.id, set(companies)
                )
            return person

        try:
            person = await run_in_transaction(
                self.db_session, _update, description=f"update person {person_id}"
            )
        except IntegrityError as e:
            logger.error(f"Update of person {person_id} rejected by a constraint: {e.orig!r}")
            raise TransientStorageException() from e

        await self.db_session.refresh(person)
        logger.info(f"Updated person {person.id}: {sorted(changes)}")
        return person

    async def delete(self, person_id: int) -> None:
        """Delete a person together with their affiliations."""

        async def _delete() -> None:
            person = await self._get_or_404(person_id)
            await self.db_session.execute(
                delete(affiliations).where(affiliations.c.person_id == person.id)
            )
            await self.db_session.delete(person)

        await run_in_transaction(
            self.db_session, _delete, description=f"delete person {person_id}"
        )
        logger.info(f"Deleted person {person_id}")
