"""Organization model (a company listed in the directory)."""

import re
from typing import TYPE_CHECKING, Optional, Sequence

from sqlalchemy import Integer, String, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from app.models.affiliation import affiliations
from app.services.slug_service import SLUG_MAX_LENGTH
from core.db import Base, TimestampMixin, fits_integer

if TYPE_CHECKING:
    from app.models.person import Person

_NUMERIC_ID = re.compile(r"[0-9]{1,10}")


class Organization(Base, TimestampMixin):
    """Organization listed in the directory."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(SLUG_MAX_LENGTH), nullable=False, unique=True
    )
    tax_id: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(255), nullable=False)

    @classmethod
    async def get_by_id(
        cls, db_session: AsyncSession, id: int
    ) -> Optional["Organization"]:
        """Get organization by ID."""
        if not fits_integer(id):
            return None
        result = await db_session.execute(select(cls).where(cls.id == id))
        return result.scalars().first()

    @classmethod
    async def get_by_id_or_slug(
        cls, db_session: AsyncSession, id_or_slug: str
    ) -> Optional["Organization"]:
        """Get organization by numeric ID or by slug."""
        condition = cls.slug == id_or_slug
        if _NUMERIC_ID.fullmatch(id_or_slug) and fits_integer(int(id_or_slug)):
            condition = or_(cls.id == int(id_or_slug), condition)
        result = await db_session.execute(
            select(cls).where(condition).order_by(cls.id).limit(1)
        )
        return result.scalars().first()

    @classmethod
    async def slug_exists(
        cls,
        db_session: AsyncSession,
        slug: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Check whether another organization already uses ``slug``."""
        query = select(cls.id).where(cls.slug == slug)
        if exclude_id is not None:
            query = query.where(cls.id != exclude_id)
        result = await db_session.execute(query.limit(1))
        return result.first() is not None

    @classmethod
    async def get_existing_ids(
        cls, db_session: AsyncSession, ids: set[int]
    ) -> set[int]:
        """Return the subset of ``ids`` that belong to stored organizations."""
        ids = {i for i in ids if fits_integer(i)}
        if not ids:
            return set()
        result = await db_session.execute(select(cls.id).where(cls.id.in_(ids)))
        return set(result.scalars().all())

    @classmethod
    async def get_members(
        cls, db_session: AsyncSession, organization_id: int
    ) -> Sequence["Person"]:
        """Get the people affiliated with an organization, ordered by ID."""
        from app.models.person import Person

        result = await db_session.execute(
            select(Person)
            .join(affiliations, affiliations.c.person_id == Person.id)
            .where(affiliations.c.organization_id == organization_id)
            .order_by(Person.id)
        )
        return result.scalars().all()

    def __repr__(self) -> str:
        return f"Organization(id={self.id}, slug={self.slug})"
