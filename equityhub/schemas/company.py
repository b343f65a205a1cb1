"""
Pydantic schemas for company requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from equityhub.core.config import settings


class CompanySortField(str, Enum):
    """Columns a company search may be ordered by."""

    NAME = "name"
    CAPITAL = "capital"
    TOTAL_SHARES = "total_shares"
    OPTION_POOL_AMOUNT = "option_pool_amount"
    CREATED_AT = "created_at"


class CompanyBase(BaseModel):
    """Fields shared by create and update payloads."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Acme Robotics"])
    description: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)
    capital: Decimal = Field(default=Decimal("0"), ge=0, examples=[1_000_000.00])
    total_shares: int = Field(..., ge=0, description="Authorized shares", examples=[10_000_000])
    option_pool_amount: int = Field(
        default=0, ge=0, description="Shares reserved in the option pool", examples=[1_000_000]
    )
    categories: List[str] = Field(default_factory=list, examples=[["robotics", "b2b"]])
    photo_url: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def validate_pool_within_total(self) -> "CompanyBase":
        if self.option_pool_amount > self.total_shares:
            raise ValueError("option_pool_amount cannot exceed total_shares")
        return self


class CompanyCreate(CompanyBase):
    """Schema for ``POST /companies``; the admin is the authenticated caller."""

    pass


class CompanyUpdate(CompanyBase):
    """
    Schema for ``PUT /companies/{id}`` (full replacement of mutable fields).

    ``version`` is the value the client last read; the write is rejected
    with 409 if the company has changed since.
    """

    option_pool_amount: int = Field(..., ge=0)
    version: int = Field(..., ge=1, description="Version the update was based on")


class CompanyResponse(BaseModel):
    """Company as returned by the API."""

    id: UUID
    admin_profile_id: UUID
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    capital: Decimal
    total_shares: int
    option_pool_amount: int
    categories: List[str] = Field(default_factory=list)
    photo_url: Optional[str] = None
    version: int
    created_at: datetime

    @field_serializer("capital")
    def serialize_capital(self, v: Decimal) -> float:
        """Emit capital as a JSON number, not Pydantic's default string."""
        return float(v)

    model_config = ConfigDict(from_attributes=True)


class CompanySearchResult(CompanyResponse):
    """Search row: the company plus its admin's display name."""

    admin_name: str


class CompanySearchParams(BaseModel):
    """Validated search/sort/pagination options."""

    company_name: Optional[str] = Field(default=None, max_length=255)
    sort_field: CompanySortField = CompanySortField.NAME
    is_sort_desc: bool = False
    page: int = Field(default=1, ge=1)
    page_size: int = Field(
        default=settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE
    )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class OptionPoolIncrease(BaseModel):
    """Body of ``PATCH /companies/option-pool``."""

    company_id: UUID
    shares_amount: int = Field(..., gt=0, description="New shares issued into the pool")


class RestrictedSharesGrant(BaseModel):
    """Body of the restricted-share allocation endpoint."""

    restricted_amount: int = Field(..., gt=0, description="Shares moved out of the option pool")
