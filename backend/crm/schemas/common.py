"""
Shared schema building blocks.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Iterable, Optional

from pydantic import BaseModel, BeforeValidator, EmailStr, StringConstraints, ValidationInfo, field_validator



def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_datetime(value: Any) -> Any:
    """Accept ISO dates and datetimes; store naive UTC."""
    value = _blank_to_none(value)
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def choice(values: Iterable[str]) -> BeforeValidator:
    """Case-insensitive enum matching that normalizes to the canonical spelling."""
    canonical = {v.lower(): v for v in values}

    def _match(value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().lower()
            if key in canonical:
                return canonical[key]
            raise ValueError(f"must be one of {', '.join(canonical.values())}")
        return value
    return BeforeValidator(_match)


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none)]
OptionalDateTime = Annotated[Optional[datetime], BeforeValidator(_parse_datetime)]


class FileRef(BaseModel):
    """Reference to an uploaded file; storage itself lives elsewhere."""
    name: str
    url: str
    size: Optional[int] = None
    mime_type: Optional[str] = None


class PatchModel(BaseModel):
    """Partial update: only submitted fields are applied.

    Fields listed in NON_NULLABLE may be omitted but not sent as null.
    """
    NON_NULLABLE: ClassVar[tuple] = ()

    @field_validator('*', mode='before')
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name in cls.NON_NULLABLE:
            raise ValueError('cannot be null')
        return value

    def changes(self) -> dict:
        """Submitted fields as plain python values."""
        return self.model_dump(exclude_unset=True)
