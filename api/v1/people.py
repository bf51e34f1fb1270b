"""Person API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import collection_params
from app.models.affiliation import affiliations
from app.models.organization import Organization
from app.models.person import Person
from app.schemas.organization import OrganizationResponse
from app.schemas.pagination import ListResponse
from app.schemas.person import (
    PERSON_ORDER_FIELDS,
    PersonCreate,
    PersonResponse,
    PersonUpdate,
)
from app.services.collection_query import MAX_PAGE, CollectionParams, fetch_page
from app.services.person_service import PersonService
from core.db import get_db
from core.exceptions.base import NotFoundException, UnknownReferenceException
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/people", tags=["People"])


@router.get("/", response_model=ListResponse[PersonResponse])
async def list_people(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    companies: Optional[List[int]] = Query(
        None, description="Only people affiliated with any of these organizations"
    ),
    params: CollectionParams = Depends(collection_params(PERSON_ORDER_FIELDS)),
    db_session: AsyncSession = Depends(get_db),
) -> ListResponse[PersonResponse]:
    """
    List people.

    Same ordering and pagination rules as the organization listing, with an
    optional ``companies`` filter.
    """
    query = select(Person)

    if companies:
        company_ids = set(companies)
        missing = company_ids - await Organization.get_existing_ids(db_session, company_ids)
        if missing:
            raise UnknownReferenceException(missing)
        query = query.where(
            Person.id.in_(
                select(affiliations.c.person_id).where(
                    affiliations.c.organization_id.in_(company_ids)
                )
            )
        )

    result = await fetch_page(db_session, Person, params, page=page, query=query)
    return ListResponse[PersonResponse].from_page(
        result, params.unbounded, PersonResponse
    )


@router.get("/{person_id}", response_model=PersonResponse)
async def get_person(
    person_id: int,
    db_session: AsyncSession = Depends(get_db),
) -> PersonResponse:
    """Get person by ID."""
    person = await Person.get_by_id(db_session, person_id)
    if not person:
        raise NotFoundException(f"Person {person_id} not found")
    return PersonResponse.model_validate(person)


@router.get("/{person_id}/companies", response_model=list[OrganizationResponse])
async def list_person_organizations(
    person_id: int,
    db_session: AsyncSession = Depends(get_db),
) -> list[OrganizationResponse]:
    """List the organizations a person is affiliated with."""
    person = await Person.get_by_id(db_session, person_id)
    if not person:
        raise NotFoundException(f"Person {person_id} not found")
    organizations = await Person.get_organizations(db_session, person_id)
    return [OrganizationResponse.model_validate(o) for o in organizations]


@router.post("/", response_model=PersonResponse, status_code=status.HTTP_201_CREATED)
async def create_person(
    data: PersonCreate,
    db_session: AsyncSession = Depends(get_db),
) -> PersonResponse:
    """Create a new person, attaching the organizations in ``companies``."""
    person = await PersonService(db_session).create(data)
    return PersonResponse.model_validate(person)


@router.api_route(
    "/{person_id}",
    methods=["PUT", "PATCH"],
    response_model=PersonResponse,
)
async def update_person(
    person_id: int,
    data: PersonUpdate,
    db_session: AsyncSession = Depends(get_db),
) -> PersonResponse:
    """Update a person. A ``companies`` list replaces their affiliations."""
    person = await PersonService(db_session).update(person_id, data)
    return PersonResponse.model_validate(person)


@router.delete(
    "/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_person(
    person_id: int,
    db_session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a person; their organizations are kept."""
    await PersonService(db_session).delete(person_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
