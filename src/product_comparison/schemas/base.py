"""camelCase base models for request and response bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


_CAMEL_CASE = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    serialize_by_alias=True,
    validate_default=True,
)


class APIRequest(BaseModel):
    """Inbound body; unknown properties are dropped."""

    model_config = ConfigDict(**_CAMEL_CASE, extra="ignore")


class APIResponse(BaseModel):
    """Outbound body; only declared properties are serialized."""

    model_config = ConfigDict(**_CAMEL_CASE, extra="forbid")
