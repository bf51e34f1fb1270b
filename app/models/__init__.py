from app.models.affiliation import affiliations
from app.models.organization import Organization
from app.models.person import Person

__all__ = [
    "Organization",
    "Person",
    "affiliations",
]
