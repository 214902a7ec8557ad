"""
Meeting schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, model_validator

from crm.models.meeting import Meeting
from crm.schemas.common import FileRef, Name, OptionalDateTime, OptionalText, PatchModel, Tag, choice

MeetingStatus = Annotated[str, choice(Meeting.ALL_STATUSES)]
Frequency = Annotated[str, choice(Meeting.ALL_FREQUENCIES)]
Ends = Annotated[str, choice(Meeting.ALL_ENDS)]


class MeetingCreate(BaseModel):
    """Schedule a meeting. ``linked_id`` and ``assigned_id`` default to the acting user."""
    title: Name
    start_date: OptionalDateTime = None
    start_time: OptionalDateTime = None
    end_time: OptionalDateTime = None
    repeat_meeting: bool = False
    frequency: Frequency = 'Daily'
    repeat_on: OptionalText = None
    repeat_every: int = Field(default=0, ge=0)
    ends: Ends = 'Never'
    location: OptionalText = None
    link: OptionalText = None
    linked_id: OptionalText = None
    assigned_id: OptionalText = None
    participants: List[Tag] = Field(default_factory=list)
    status: MeetingStatus = Meeting.STATUS_SCHEDULED
    tags: List[Tag] = Field(default_factory=list)
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None

    @model_validator(mode='after')
    def _end_after_start(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError('end_time must not be before start_time')
        return self


class MeetingUpdate(PatchModel):
    """Update an existing meeting."""
    NON_NULLABLE = ('title', 'repeat_meeting', 'frequency', 'repeat_every', 'ends', 'linked_id',
                    'participants', 'status', 'tags')

    title: Optional[Name] = None
    start_date: OptionalDateTime = None
    start_time: OptionalDateTime = None
    end_time: OptionalDateTime = None
    repeat_meeting: Optional[bool] = None
    frequency: Optional[Frequency] = None
    repeat_on: OptionalText = None
    repeat_every: Optional[int] = Field(default=None, ge=0)
    ends: Optional[Ends] = None
    location: OptionalText = None
    link: OptionalText = None
    linked_id: Optional[str] = None
    assigned_id: OptionalText = None
    participants: Optional[List[Tag]] = None
    status: Optional[MeetingStatus] = None
    tags: Optional[List[Tag]] = None
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
