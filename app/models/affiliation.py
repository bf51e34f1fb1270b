"""Join table pairing organizations with the people affiliated to them."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from core.db import Base

affiliations = Table(
    "affiliations",
    Base.metadata,
    Column(
        "organization_id",
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "person_id",
        Integer,
        ForeignKey("people.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
