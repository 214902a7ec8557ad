"""
Company schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from crm.models.company import Company
from crm.schemas.common import FileRef, Name, OptionalEmail, OptionalText, PatchModel, Tag, choice

CompanyStatus = Annotated[str, choice(Company.ALL_STATUSES)]


class CompanyCreate(BaseModel):
    """Create a new company."""
    full_name: Name
    industry: Name
    email: OptionalEmail = None
    phone: OptionalText = None
    website: OptionalText = None
    status: CompanyStatus = Company.STATUS_ACTIVE
    tags: List[Tag] = Field(default_factory=list)
    assignees: List[Tag] = Field(default_factory=list)
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
    owner_id: OptionalText = None


class CompanyUpdate(PatchModel):
    """Update an existing company."""
    NON_NULLABLE = ('full_name', 'industry', 'status', 'tags', 'assignees', 'owner_id')

    full_name: Optional[Name] = None
    industry: Optional[Name] = None
    email: OptionalEmail = None
    phone: OptionalText = None
    website: OptionalText = None
    status: Optional[CompanyStatus] = None
    tags: Optional[List[Tag]] = None
    assignees: Optional[List[Tag]] = None
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
    owner_id: Optional[str] = None
