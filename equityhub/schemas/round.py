"""
Pydantic schemas for rounds and round investors.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator


class RoundCreate(BaseModel):
    """Schema for ``POST /rounds``."""

    company_id: UUID
    name: str = Field(..., min_length=1, max_length=255, examples=["Series A"])
    pre_round_shares: int = Field(..., ge=0, examples=[8_000_000])
    post_round_shares: int = Field(..., ge=0, examples=[10_000_000])

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class RoundResponse(BaseModel):
    id: UUID
    company_id: UUID
    name: str
    pre_round_shares: int
    post_round_shares: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoundInvestorBase(BaseModel):
    """Fields shared by round-investor create and update payloads."""

    investor_name: str = Field(..., min_length=1, max_length=255, examples=["Northwind Ventures"])
    investor_email: Optional[EmailStr] = Field(default=None)
    shares_amount: int = Field(default=0, ge=0)
    invested_value: Decimal = Field(default=Decimal("0"), ge=0, examples=[2_500_000.00])

    @field_validator("investor_name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("investor_name must not be blank")
        return v.strip()


class RoundInvestorCreate(RoundInvestorBase):
    """Schema for ``POST /round-investors``."""

    round_id: UUID


class RoundInvestorUpdate(RoundInvestorBase):
    """Schema for ``PUT /round-investors/{id}``; the round cannot change."""

    pass


class RoundInvestorResponse(BaseModel):
    id: UUID
    round_id: UUID
    investor_name: str
    investor_email: Optional[str] = None
    shares_amount: int
    invested_value: Decimal
    created_at: datetime

    @field_serializer("invested_value")
    def serialize_value(self, v: Decimal) -> float:
        return float(v)

    model_config = ConfigDict(from_attributes=True)
