"""Organization API endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import collection_params
from app.models.organization import Organization
from app.models.person import Person
from app.schemas.organization import (
    ORGANIZATION_ORDER_FIELDS,
    AffiliationRequest,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from app.schemas.pagination import ListResponse
from app.schemas.person import PersonResponse
from app.services.collection_query import MAX_PAGE, CollectionParams, fetch_page
from app.services.organization_service import OrganizationService
from app.services.relationship_sync import RelationshipSync
from core.db import get_db
from core.exceptions.base import NotFoundException, UnknownReferenceException
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


async def _get_organization_or_404(
    db_session: AsyncSession, organization_id: int
) -> Organization:
    organization = await Organization.get_by_id(db_session, organization_id)
    if not organization:
        raise NotFoundException(f"Organization {organization_id} not found")
    return organization


@router.get("/", response_model=ListResponse[OrganizationResponse])
async def list_organizations(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    params: CollectionParams = Depends(collection_params(ORGANIZATION_ORDER_FIELDS)),
    db_session: AsyncSession = Depends(get_db),
) -> ListResponse[OrganizationResponse]:
    """
    List organizations.

    Sorted by ``order[by]``/``order[dir]`` (default ``id`` ascending) and
    paginated by ``take`` (default 10). ``take=0`` returns every
    organization without pagination metadata.
    """
    result = await fetch_page(db_session, Organization, params, page=page)
    return ListResponse[OrganizationResponse].from_page(
        result, params.unbounded, OrganizationResponse
    )


@router.get("/{id_or_slug}", response_model=OrganizationResponse)
async def get_organization(
    id_or_slug: str,
    db_session: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    """Get organization by ID or slug."""
    organization = await Organization.get_by_id_or_slug(db_session, id_or_slug)
    if not organization:
        raise NotFoundException(f"Organization {id_or_slug} not found")
    return OrganizationResponse.model_validate(organization)


@router.post("/", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    data: OrganizationCreate,
    db_session: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    """Create a new organization."""
    logger.info(f"Creating organization: {data.name}")
    organization = await OrganizationService(db_session).create(data)
    return OrganizationResponse.model_validate(organization)


@router.api_route(
    "/{organization_id}",
    methods=["PUT", "PATCH"],
    response_model=OrganizationResponse,
)
async def update_organization(
    organization_id: int,
    data: OrganizationUpdate,
    db_session: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    """Update an organization. Changing the name regenerates the slug."""
    organization = await OrganizationService(db_session).update(organization_id, data)
    return OrganizationResponse.model_validate(organization)


@router.get("/{organization_id}/people", response_model=list[PersonResponse])
async def list_organization_people(
    organization_id: int,
    db_session: AsyncSession = Depends(get_db),
) -> list[PersonResponse]:
    """List the people affiliated with an organization."""
    await _get_organization_or_404(db_session, organization_id)
    members = await Organization.get_members(db_session, organization_id)
    return [PersonResponse.model_validate(p) for p in members]


@router.patch("/{organization_id}/attach", response_model=list[PersonResponse])
async def attach_people(
    organization_id: int,
    data: AffiliationRequest,
    db_session: AsyncSession = Depends(get_db),
) -> list[PersonResponse]:
    """
    Attach people to an organization.

    People already attached stay attached. Returns the updated member list.
    """
    await _get_organization_or_404(db_session, organization_id)
    await RelationshipSync.for_organization(db_session).attach(organization_id, data.ids)
    members = await Organization.get_members(db_session, organization_id)
    return [PersonResponse.model_validate(p) for p in members]


@router.delete(
    "/{organization_id}/detach",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def detach_people(
    organization_id: int,
    data: AffiliationRequest,
    db_session: AsyncSession = Depends(get_db),
) -> Response:
    """
    Detach people from an organization.

    Every ID must belong to an existing person; people who are not
    attached to this organization are skipped.
    """
    await _get_organization_or_404(db_session, organization_id)
    ids = set(data.ids)
    missing = ids - await Person.get_existing_ids(db_session, ids)
    if missing:
        raise UnknownReferenceException(missing)
    await RelationshipSync.for_organization(db_session).detach(organization_id, ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{organization_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_organization(
    organization_id: int,
    db_session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete an organization; its people are kept."""
    await OrganizationService(db_session).delete(organization_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
