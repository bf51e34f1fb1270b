"""Attach, replace and detach organization/person affiliations."""

from typing import Iterable, Optional

from sqlalchemy import Column, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.affiliation import affiliations
from app.models.organization import Organization
from app.models.person import Person
from core.db import run_in_transaction
from core.exceptions.base import UnknownReferenceException
from core.logging import get_logger

logger = get_logger(__name__)


class RelationshipSync:
    """
    Maintains one side of the ``affiliations`` join table.

    ``owner_column`` holds the owner's ID and ``related_column`` the IDs
    being attached or detached; ``related_model`` is used to check that
    those IDs exist. Each public operation runs in its own bounded-retry
    transaction, so it is applied completely or not at all.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        owner_column: Column,
        related_column: Column,
        related_model,
        attempts: Optional[int] = None,
    ):
        self.db_session = db_session
        self.owner_column = owner_column
        self.related_column = related_column
        self.related_model = related_model
        self.attempts = attempts

    @classmethod
    def for_organization(
        cls, db_session: AsyncSession, attempts: Optional[int] = None
    ) -> "RelationshipSync":
        """People affiliated with an organization."""
        return cls(
            db_session,
            owner_column=affiliations.c.organization_id,
            related_column=affiliations.c.person_id,
            related_model=Person,
            attempts=attempts,
        )

    @classmethod
    def for_person(
        cls, db_session: AsyncSession, attempts: Optional[int] = None
    ) -> "RelationshipSync":
        """Organizations a person is affiliated with."""
        return cls(
            db_session,
            owner_column=affiliations.c.person_id,
            related_column=affiliations.c.organization_id,
            related_model=Organization,
            attempts=attempts,
        )

    async def current_ids(self, owner_id: int) -> set[int]:
        """IDs currently associated with ``owner_id``."""
        result = await self.db_session.execute(
            select(self.related_column).where(self.owner_column == owner_id)
        )
        return set(result.scalars().all())

    async def _ensure_exist(self, related_ids: set[int]) -> None:
        existing = await self.related_model.get_existing_ids(self.db_session, related_ids)
        missing = related_ids - existing
        if missing:
            raise UnknownReferenceException(missing)

    async def _insert(self, owner_id: int, related_ids: set[int]) -> None:
        if not related_ids:
            return
        await self.db_session.execute(
            insert(affiliations),
            [
                {self.owner_column.key: owner_id, self.related_column.key: related_id}
                for related_id in sorted(related_ids)
            ],
        )

    async def _delete(self, owner_id: int, related_ids: set[int]) -> None:
        if not related_ids:
            return
        await self.db_session.execute(
            delete(affiliations).where(
                self.owner_column == owner_id,
                self.related_column.in_(related_ids),
            )
        )

    async def attach_in_transaction(self, owner_id: int, related_ids: set[int]) -> set[int]:
        """Attach body, for callers that already run a transaction."""
        await self._ensure_exist(related_ids)
        added = related_ids - await self.current_ids(owner_id)
        await self._insert(owner_id, added)
        return added

    async def replace_in_transaction(
        self, owner_id: int, related_ids: set[int]
    ) -> tuple[set[int], set[int]]:
        """Replace body, for callers that already run a transaction."""
        await self._ensure_exist(related_ids)
        current = await self.current_ids(owner_id)
        added = related_ids - current
        removed = current - related_ids
        await self._delete(owner_id, removed)
        await self._insert(owner_id, added)
        return added, removed

    async def attach(self, owner_id: int, related_ids: Iterable[int]) -> set[int]:
        """
        Add every pair not already present; existing pairs are kept.

        Returns:
            IDs that were newly attached

        Raises:
            UnknownReferenceException: some ID has no matching row
        """
        ids = set(related_ids)
        added = await run_in_transaction(
            self.db_session,
            lambda: self.attach_in_transaction(owner_id, ids),
            attempts=self.attempts,
            description=f"attach to {self.owner_column.key}={owner_id}",
        )
        logger.info(
            f"Attached {sorted(added)} to {self.owner_column.key}={owner_id}"
        )
        return added

    async def replace(self, owner_id: int, related_ids: Iterable[int]) -> set[int]:
        """
        Make the associated set exactly ``related_ids``.

        Returns:
            The new associated set

        Raises:
            UnknownReferenceException: some ID has no matching row
        """
        ids = set(related_ids)
        added, removed = await run_in_transaction(
            self.db_session,
            lambda: self.replace_in_transaction(owner_id, ids),
            attempts=self.attempts,
            description=f"replace for {self.owner_column.key}={owner_id}",
        )
        logger.info(
            f"Replaced affiliations of {self.owner_column.key}={owner_id}: "
            f"added {sorted(added)}, removed {sorted(removed)}"
        )
        return ids

    async def detach(self, owner_id: int, related_ids: Iterable[int]) -> None:
        """Remove the given pairs; pairs that do not exist are ignored."""
        ids = set(related_ids)
        await run_in_transaction(
            self.db_session,
            lambda: self._delete(owner_id, ids),
            attempts=self.attempts,
            description=f"detach from {self.owner_column.key}={owner_id}",
        )
        logger.info(f"Detached {sorted(ids)} from {self.owner_column.key}={owner_id}")
