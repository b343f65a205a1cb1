"""
Pydantic schemas for registration, login and user accounts.

Email format and password length are checked by ``UserAccountService`` so
they surface as ``MalformedEmail`` / ``ValidationFailed`` (400); the schema
only requires the fields to be present.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from equityhub.models.user import UserAccountStatus


class UserRegister(BaseModel):
    """Schema for ``POST /users``."""

    first_name: str = Field(..., min_length=1, max_length=100, examples=["Ada"])
    last_name: str = Field(default="", max_length=100, examples=["Lovelace"])
    phone: Optional[str] = Field(default=None, max_length=50)
    email: str = Field(..., min_length=1, max_length=320, examples=["ada@example.com"])
    password: str = Field(..., min_length=1, max_length=128)


class UserAccountResponse(BaseModel):
    """Account as returned by the API; the password hash is never exposed."""

    id: UUID
    user_profile_id: UUID
    email: str
    status: UserAccountStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
