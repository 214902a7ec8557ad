"""
Email notification settings schema.
"""
from typing import Optional

from pydantic import BaseModel, Field

from crm.schemas.common import OptionalEmail, OptionalText


class EmailSettingsUpdate(BaseModel):
    host: OptionalText = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    sender: OptionalEmail = None
    username: OptionalText = None
    password: OptionalText = None
