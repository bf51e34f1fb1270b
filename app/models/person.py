"""Person model (someone affiliated with zero or more organizations)."""

from typing import TYPE_CHECKING, Optional, Sequence

from sqlalchemy import Integer, String, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from app.models.affiliation import affiliations
from core.db import Base, TimestampMixin, fits_integer

if TYPE_CHECKING:
    from app.models.organization import Organization


class Person(Base, TimestampMixin):
    """Person listed in the directory."""

    __tablename__ = "people"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(31), nullable=True)

    @classmethod
    async def get_by_id(cls, db_session: AsyncSession, id: int) -> Optional["Person"]:
        """Get person by ID."""
        if not fits_integer(id):
            return None
        result = await db_session.execute(select(cls).where(cls.id == id))
        return result.scalars().first()

    @classmethod
    async def email_exists(
        cls,
        db_session: AsyncSession,
        email: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Check whether another person already uses ``email``."""
        query = select(cls.id).where(cls.email == email)
        if exclude_id is not None:
            query = query.where(cls.id != exclude_id)
        result = await db_session.execute(query.limit(1))
        return result.first() is not None

    @classmethod
    async def get_existing_ids(
        cls, db_session: AsyncSession, ids: set[int]
    ) -> set[int]:
        """Return the subset of ``ids`` that belong to stored people."""
        ids = {i for i in ids if fits_integer(i)}
        if not ids:
            return set()
        result = await db_session.execute(select(cls.id).where(cls.id.in_(ids)))
        return set(result.scalars().all())

    @classmethod
    async def get_organizations(
        cls, db_session: AsyncSession, person_id: int
    ) -> Sequence["Organization"]:
        """Get the organizations a person is affiliated with, ordered by ID."""
        from app.models.organization import Organization

        result = await db_session.execute(
            select(Organization)
            .join(affiliations, affiliations.c.organization_id == Organization.id)
            .where(affiliations.c.person_id == person_id)
            .order_by(Organization.id)
        )
        return result.scalars().all()

    def __repr__(self) -> str:
        return f"Person(id={self.id}, email={self.email})"
