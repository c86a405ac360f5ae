"""
Typed create payloads, one per importable entity type.

A resolver validates identifier fields merged with create values against
one of these before persisting, so a bad row fails with a clear message
instead of a database error.
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timeport.db.models import PLACEHOLDER_ROLE
from timeport.utils.colors import is_valid_color


class _CreateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)


class UserCreate(_CreateSchema):
    email: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    timezone: str = "UTC"
    is_placeholder: bool = True

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value


class MemberCreate(_CreateSchema):
    user_id: str
    organization_id: str
    role: str = PLACEHOLDER_ROLE


class ClientCreate(_CreateSchema):
    name: str = Field(min_length=1, max_length=255)
    organization_id: str


class ProjectCreate(_CreateSchema):
    name: str = Field(min_length=1, max_length=255)
    organization_id: str
    client_id: Optional[str] = None
    color: str
    billable_rate: Optional[int] = None
    is_public: bool = False
    is_billable: bool = False
    estimated_time: Optional[int] = None
    archived_at: Optional[datetime] = None

    @field_validator("color")
    @classmethod
    def _hex_color(cls, value: str) -> str:
        if not is_valid_color(value):
            raise ValueError(f"Invalid color '{value}'")
        return value


class TaskCreate(_CreateSchema):
    name: str = Field(min_length=1, max_length=500)
    project_id: str
    organization_id: str


class TagCreate(_CreateSchema):
    name: str = Field(min_length=1, max_length=255)
    organization_id: str
