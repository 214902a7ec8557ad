"""
Prospect schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from crm.models.prospect import Prospect
from crm.schemas.common import Name, OptionalEmail, OptionalText, PatchModel, Tag, choice

ProspectStatus = Annotated[str, choice(Prospect.ALL_STATUSES)]


class ProspectCreate(BaseModel):
    """Create a new prospect."""
    full_name: Name
    company_id: OptionalText = None
    email: OptionalEmail = None
    phone: OptionalText = None
    status: ProspectStatus = Prospect.STATUS_NEW
    tags: List[Tag] = Field(default_factory=list)
    notes: OptionalText = None
    owner_id: OptionalText = None


class ProspectUpdate(PatchModel):
    """Update an existing prospect."""
    NON_NULLABLE = ('full_name', 'status', 'tags', 'owner_id')

    full_name: Optional[Name] = None
    company_id: OptionalText = None
    email: OptionalEmail = None
    phone: OptionalText = None
    status: Optional[ProspectStatus] = None
    tags: Optional[List[Tag]] = None
    notes: OptionalText = None
    owner_id: Optional[str] = None
