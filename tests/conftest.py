import os
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Ensure critical settings exist before the app/config modules import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import app.models  # noqa: E402,F401
from app.models.organization import Organization  # noqa: E402
from app.models.person import Person  # noqa: E402
from app.schemas.organization import OrganizationCreate  # noqa: E402
from app.services.organization_service import OrganizationService  # noqa: E402
from app.services.tax_id_service import TaxIdService  # noqa: E402
from core.db import get_db  # noqa: E402
from core.db.base import Base  # noqa: E402
from core.db.session import enable_sqlite_foreign_keys  # noqa: E402
from main import app  # noqa: E402

# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
enable_sqlite_foreign_keys(engine.sync_engine)
TestSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create and drop all tables for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for testing."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing."""

    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def tax_ids() -> TaxIdService:
    """Tax ID service with a fixed seed."""
    import random

    return TaxIdService(random.Random(1234))


@pytest.fixture
async def create_organization(db_session: AsyncSession, tax_ids: TaxIdService):
    """Factory fixture creating organizations through the service layer."""

    async def _create(name: str = "Acme Corp", **fields) -> Organization:
        data = OrganizationCreate(
            name=name,
            tax_id=fields.pop("tax_id", tax_ids.generate()),
            address=fields.pop("address", "ul. Długa 1"),
            city=fields.pop("city", "Gdańsk"),
            postal_code=fields.pop("postal_code", "80-001"),
        )
        return await OrganizationService(db_session).create(data)

    return _create


@pytest.fixture
async def create_person(db_session: AsyncSession):
    """Factory fixture creating people directly in the database."""
    counter = {"n": 0}

    async def _create(first_name: str = "Anna", last_name: str = "Nowak", **fields) -> Person:
        counter["n"] += 1
        person = Person(
            first_name=first_name,
            last_name=last_name,
            email=fields.pop("email", f"person{counter['n']}@example.com"),
            phone=fields.pop("phone", None),
        )
        db_session.add(person)
        await db_session.commit()
        await db_session.refresh(person)
        return person

    return _create


@pytest.fixture
async def test_organization(create_organization) -> Organization:
    """Create a test organization."""
    return await create_organization("Test Organization")


@pytest.fixture
async def test_people(create_person) -> list[Person]:
    """Create three test people."""
    return [
        await create_person("Anna", "Nowak"),
        await create_person("Piotr", "Kowalski"),
        await create_person("Zofia", "Wójcik"),
    ]
