from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema for request and response bodies."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
