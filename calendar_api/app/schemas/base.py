"""Shared Pydantic base model with camelCase aliases."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel


# Free-text fields that are trimmed on input. Credentials are never trimmed.
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]
NonEmptyTrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    message: str
