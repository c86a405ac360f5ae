from typing import Any, Literal, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from timeport.core.config import settings
from .exceptions import ParseError


class ImportOptions(BaseModel):
    """Format-specific context passed along with the payload."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    timezone: str = settings.import_default_timezone
    # Day/month order for formats exporting slash-separated dates (Clockify).
    date_format: Literal["MM/DD/YYYY", "DD/MM/YYYY"] = "MM/DD/YYYY"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def parse(cls, options: Optional[Mapping[str, Any]]) -> "ImportOptions":
        if isinstance(options, ImportOptions):
            return options
        try:
            return cls.model_validate(dict(options or {}))
        except ValidationError as exc:
            errors = "; ".join(error["msg"] for error in exc.errors())
            raise ParseError(f"Invalid import options: {errors}") from exc
