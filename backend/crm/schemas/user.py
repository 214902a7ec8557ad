"""
User and authentication schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel, EmailStr, Field

from crm.models.user import User
from crm.schemas.common import Name, OptionalText, PatchModel, choice

UserStatus = Annotated[str, choice(User.ALL_STATUSES)]


class SignupRequest(BaseModel):
    """Register a new (inactive) account."""
    email: EmailStr
    password: str = Field(min_length=1)
    name: OptionalText = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class VerifyRequest(BaseModel):
    email: EmailStr


class UpdatePasswordRequest(BaseModel):
    """Set a password from an activation token and activate the account."""
    email: EmailStr
    password: str = Field(min_length=1)
    token: str = Field(min_length=1)


class UserUpdate(PatchModel):
    NON_NULLABLE = ('status',)

    name: Optional[Name] = None
    status: Optional[UserStatus] = None


class BulkDeleteRequest(BaseModel):
    ids: List[Name] = Field(min_length=1)
