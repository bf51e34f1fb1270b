from core.exceptions.base import (
    CustomException,
    NotFoundException,
    ValidationException,
    UnknownReferenceException,
    TransientStorageException,
)

__all__ = [
    "CustomException",
    "NotFoundException",
    "ValidationException",
    "UnknownReferenceException",
    "TransientStorageException",
]
