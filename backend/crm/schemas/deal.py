"""
Deal schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from crm.models.deal import Deal
from crm.schemas.common import FileRef, Name, OptionalDateTime, OptionalText, PatchModel, Tag, choice

Stage = Annotated[str, choice(Deal.ALL_STAGES)]
Currency = Annotated[str, choice(Deal.ALL_CURRENCIES)]


class DealCreate(BaseModel):
    """Create a new deal."""
    deal_name: Name
    company_id: OptionalText = None
    contact_id: OptionalText = None
    stage: Stage = Deal.STAGE_NEW
    amount: float = Field(ge=0)
    currency: Currency = 'USD'
    owner_id: OptionalText = None
    close_date: OptionalDateTime = None
    tags: List[Tag] = Field(default_factory=list, max_length=10)
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None


class DealUpdate(PatchModel):
    """Update an existing deal."""
    NON_NULLABLE = ('deal_name', 'stage', 'amount', 'currency', 'owner_id', 'tags')

    deal_name: Optional[Name] = None
    company_id: OptionalText = None
    contact_id: OptionalText = None
    stage: Optional[Stage] = None
    amount: Optional[float] = Field(default=None, ge=0)
    currency: Optional[Currency] = None
    owner_id: Optional[str] = None
    close_date: OptionalDateTime = None
    tags: Optional[List[Tag]] = Field(default=None, max_length=10)
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
