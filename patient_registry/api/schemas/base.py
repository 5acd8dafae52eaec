"""Shared configuration for API schemas: camelCase on the wire."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for every request/response body.

    Fields are declared in snake_case and exchanged as camelCase. Domain
    records can be passed straight to ``model_validate``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
