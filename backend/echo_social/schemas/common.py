"""Common API schemas."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Largest value a signed 64-bit INTEGER column can hold.
MAX_ID = 2**63 - 1

Id = Annotated[int, Field(ge=1, le=MAX_ID)]


class CamelModel(BaseModel):
    """Base model exchanged as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UpdateRequest(CamelModel):
    """Partial update command; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    def provided_fields(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True, by_alias=False)


class StatusMessage(BaseModel):
    """Plain ``{"message": ...}`` body used for errors and acknowledgements."""

    message: str
