"""
Company domain model.

Holds the two numbers the option-pool rules operate on:

- ``total_shares``        — authorized share count.
- ``option_pool_amount``  — shares reserved in the unallocated option pool.

The database enforces ``0 <= option_pool_amount <= total_shares``.  Every
change to either number goes through an atomic ``UPDATE`` in
:class:`~equityhub.repositories.company_repo.CompanyRepository`, which also
bumps ``version``.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, BigInteger, CheckConstraint, Column, DateTime
from sqlmodel import Field, SQLModel


class Company(SQLModel, table=True):
    """SQLModel / SQLAlchemy table definition for companies."""

    __tablename__ = "companies"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_companies_name_not_empty"),
        CheckConstraint("total_shares >= 0", name="ck_companies_total_shares_non_negative"),
        CheckConstraint("option_pool_amount >= 0", name="ck_companies_pool_non_negative"),
        CheckConstraint(
            "option_pool_amount <= total_shares", name="ck_companies_pool_within_total"
        ),
        CheckConstraint("capital >= 0", name="ck_companies_capital_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    admin_profile_id: uuid.UUID = Field(foreign_key="user_profiles.id", index=True)
    name: str = Field(index=True, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)
    capital: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    total_shares: int = Field(default=0, sa_type=BigInteger)  # type: ignore[arg-type]
    option_pool_amount: int = Field(default=0, sa_type=BigInteger)  # type: ignore[arg-type]
    categories: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    photo_url: Optional[str] = Field(default=None, max_length=1000)
    version: int = Field(default=1, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Company id={self.id} name='{self.name}' "
            f"total={self.total_shares} pool={self.option_pool_amount}>"
        )
