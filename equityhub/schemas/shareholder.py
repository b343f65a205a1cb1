"""
Pydantic schemas for shareholders and share accounts.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from equityhub.models.shareholder import ShareholderType, ShareType


class ShareholderCreate(BaseModel):
    """Schema for ``POST /shareholders``."""

    company_id: UUID
    user_profile_id: UUID
    shareholder_type: ShareholderType = Field(default=ShareholderType.EMPLOYEE)


class ShareholderResponse(BaseModel):
    id: UUID
    company_id: UUID
    user_profile_id: UUID
    shareholder_type: ShareholderType
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ShareAccountResponse(BaseModel):
    id: UUID
    shareholder_id: UUID
    share_type: ShareType
    share_amount: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
