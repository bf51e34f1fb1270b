"""Organization-related schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.base import BaseSchema
from app.services.tax_id_service import TaxIdService

ORGANIZATION_ORDER_FIELDS = {
    "id",
    "name",
    "slug",
    "tax_id",
    "address",
    "city",
    "postal_code",
    "created_at",
    "updated_at",
}


def _check_tax_id(value: Optional[str]) -> Optional[str]:
    if value is not None and not TaxIdService.is_valid(value):
        raise ValueError("tax_id must be a valid tax identification number")
    return value


class OrganizationCreate(BaseSchema):
    """Create a new organization."""

    name: str = Field(..., min_length=1, max_length=255)
    tax_id: str = Field(..., max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    postal_code: str = Field(..., min_length=1, max_length=255)

    @field_validator("tax_id")
    @classmethod
    def validate_tax_id(cls, v: str) -> str:
        return _check_tax_id(v)


class OrganizationUpdate(BaseSchema):
    """Update an organization. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    tax_id: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=255)
    postal_code: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("tax_id")
    @classmethod
    def validate_tax_id(cls, v: Optional[str]) -> Optional[str]:
        return _check_tax_id(v)


class OrganizationResponse(BaseSchema):
    """Organization response."""

    id: int
    name: str
    slug: str
    tax_id: str
    address: str
    city: str
    postal_code: str
    created_at: datetime
    updated_at: datetime


class AffiliationRequest(BaseSchema):
    """IDs of people to attach to or detach from an organization."""

    ids: List[int] = Field(..., alias="list", min_length=1)
