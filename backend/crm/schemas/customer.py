"""
Customer schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from crm.models.customer import Customer
from crm.schemas.common import FileRef, Name, OptionalEmail, OptionalText, PatchModel, Tag, choice

CustomerStatus = Annotated[str, choice(Customer.ALL_STATUSES)]


class CustomerCreate(BaseModel):
    """Create a new customer."""
    full_name: Name
    company_id: OptionalText = None
    email: OptionalEmail = None
    phone: OptionalText = None
    status: CustomerStatus = Customer.STATUS_ACTIVE
    tags: List[Tag] = Field(default_factory=list)
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
    owner_id: OptionalText = None


class CustomerUpdate(PatchModel):
    """Update an existing customer."""
    NON_NULLABLE = ('full_name', 'status', 'tags', 'owner_id')

    full_name: Optional[Name] = None
    company_id: OptionalText = None
    email: OptionalEmail = None
    phone: OptionalText = None
    status: Optional[CustomerStatus] = None
    tags: Optional[List[Tag]] = None
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
    owner_id: Optional[str] = None
