"""
Database seeding script to populate the directory with sample data.

Usage:
    python scripts/seed_database.py [--organizations N] [--people N] [--keep]
"""

import argparse
import asyncio
import random
import sys
from pathlib import Path

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.models import Organization, Person, affiliations  # noqa: E402
from app.services.relationship_sync import RelationshipSync  # noqa: E402
from app.services.slug_service import generate_slug  # noqa: E402
from app.services.tax_id_service import TaxIdService  # noqa: E402
from core.db import async_session_factory  # noqa: E402
from core.logging import get_logger, setup_logging  # noqa: E402

logger = get_logger(__name__)

COMPANY_PREFIXES = ["Nord", "Vista", "Blue", "Polar", "Granite", "Amber", "Silver", "Cedar"]
COMPANY_CORES = ["Logistics", "Systems", "Foods", "Textiles", "Energy", "Labs", "Media", "Works"]
COMPANY_SUFFIXES = ["Ltd", "Group", "& Co", "Holding", "S.A.", ""]
CITIES = ["Kraków", "Gdańsk", "Łódź", "Poznań", "Wrocław", "Warszawa"]
STREETS = ["Długa", "Piękna", "Kwiatowa", "Polna", "Leśna", "Słoneczna"]
FIRST_NAMES = ["Anna", "Piotr", "Zofia", "Jan", "Maria", "Tomasz", "Ewa", "Michał"]
LAST_NAMES = ["Nowak", "Kowalski", "Wiśniewska", "Wójcik", "Kamińska", "Lewandowski"]


class DatabaseSeeder:
    """Database seeding utility."""

    def __init__(self, rng: random.Random = None):
        self.rng = rng or random.Random()
        self.tax_ids = TaxIdService(self.rng)
        self.organizations: list[Organization] = []
        self.people: list[Person] = []

    async def clear_database(self, session: AsyncSession):
        """Remove all directory rows, join table first."""
        logger.info("Clearing existing data...")
        await session.execute(delete(affiliations))
        await session.execute(delete(Person))
        await session.execute(delete(Organization))
        await session.commit()

    def _company_name(self) -> str:
        parts = [
            self.rng.choice(COMPANY_PREFIXES),
            self.rng.choice(COMPANY_CORES),
            self.rng.choice(COMPANY_SUFFIXES),
        ]
        return " ".join(part for part in parts if part)

    async def seed_organizations(self, session: AsyncSession, count: int):
        """Create organizations with valid tax IDs and unique slugs."""
        logger.info(f"Seeding {count} organizations...")

        async def slug_exists(slug, exclude_id):
            return await Organization.slug_exists(session, slug, exclude_id)

        for _ in range(count):
            name = self._company_name()
            organization = Organization(
                name=name,
                slug=await generate_slug(name, None, slug_exists),
                tax_id=self.tax_ids.generate(),
                address=f"ul. {self.rng.choice(STREETS)} {self.rng.randint(1, 200)}",
                city=self.rng.choice(CITIES),
                postal_code=f"{self.rng.randint(0, 99):02d}-{self.rng.randint(0, 999):03d}",
            )
            session.add(organization)
            # Flush so the next slug check sees this one
            await session.flush()
            self.organizations.append(organization)

        await session.commit()

    async def seed_people(self, session: AsyncSession, count: int):
        """Create people with unique emails."""
        logger.info(f"Seeding {count} people...")

        for _ in range(count):
            first_name = self.rng.choice(FIRST_NAMES)
            last_name = self.rng.choice(LAST_NAMES)
            person = Person(
                first_name=first_name,
                last_name=last_name,
                email=f"{first_name.lower()}.{self.rng.getrandbits(32):08x}@example.com",
                phone=f"+48 {self.rng.randint(500, 899)} {self.rng.randint(100, 999)} {self.rng.randint(100, 999)}",
            )
            session.add(person)
            self.people.append(person)

        await session.commit()

    async def seed_affiliations(self, session: AsyncSession, max_per_organization: int = 5):
        """Attach a random handful of people to every organization."""
        logger.info("Seeding affiliations...")
        people_ids = [person.id for person in self.people]
        sync = RelationshipSync.for_organization(session)

        for organization in self.organizations:
            size = self.rng.randint(0, min(max_per_organization, len(people_ids)))
            await sync.attach(organization.id, self.rng.sample(people_ids, size))

    async def run(self, organizations: int, people: int, clear: bool = True):
        async with async_session_factory() as session:
            if clear:
                await self.clear_database(session)
            await self.seed_organizations(session, organizations)
            await self.seed_people(session, people)
            await self.seed_affiliations(session)

        logger.info(
            f"Seeded {len(self.organizations)} organizations and {len(self.people)} people"
        )


async def main():
    parser = argparse.ArgumentParser(description="Seed the directory database")
    parser.add_argument("--organizations", type=int, default=30)
    parser.add_argument("--people", type=int, default=60)
    parser.add_argument("--keep", action="store_true", help="Keep existing rows")
    args = parser.parse_args()

    setup_logging()
    await DatabaseSeeder().run(args.organizations, args.people, clear=not args.keep)


if __name__ == "__main__":
    asyncio.run(main())
