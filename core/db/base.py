from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names so migrations can refer to them
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# Largest value an Integer column holds on every supported backend
MAX_INTEGER = 2**31 - 1


def fits_integer(value: int) -> bool:
    """Whether ``value`` can be bound to an Integer column without overflow."""
    return -MAX_INTEGER - 1 <= value <= MAX_INTEGER
