"""Person-related schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from app.schemas.base import BaseSchema

PERSON_ORDER_FIELDS = {
    "id",
    "first_name",
    "last_name",
    "email",
    "phone",
    "created_at",
    "updated_at",
}


class PersonCreate(BaseSchema):
    """Create a new person, optionally affiliated with organizations."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=31)
    companies: Optional[List[int]] = None


class PersonUpdate(BaseSchema):
    """Update a person.

    A non-empty ``companies`` list replaces the person's affiliations;
    an empty one is ignored.
    """

    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=31)
    companies: Optional[List[int]] = None


class PersonResponse(BaseSchema):
    """Person response."""

    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime
