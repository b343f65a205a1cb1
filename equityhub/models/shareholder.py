"""
Shareholder and share-account models.

A ``Shareholder`` links a user profile to a company.  Each shareholder owns
at most one ``ShareAccount`` per :class:`ShareType`; restricted shares
granted out of the option pool land in the ``Restricted`` account.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import BigInteger, CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class ShareholderType(str, Enum):
    FOUNDER = "Founder"
    EMPLOYEE = "Employee"
    INVESTOR = "Investor"


class ShareType(str, Enum):
    RESTRICTED = "Restricted"
    COMMON = "Common"


class Shareholder(SQLModel, table=True):
    """Membership of a user profile in a company's cap table."""

    __tablename__ = "shareholders"  # type: ignore[assignment]

    __table_args__ = (
        UniqueConstraint("company_id", "user_profile_id", name="uq_shareholders_company_user"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    company_id: uuid.UUID = Field(foreign_key="companies.id", index=True, ondelete="CASCADE")
    user_profile_id: uuid.UUID = Field(
        foreign_key="user_profiles.id", index=True, ondelete="CASCADE"
    )
    shareholder_type: ShareholderType = Field(default=ShareholderType.EMPLOYEE)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return (
            f"<Shareholder id={self.id} company={self.company_id} "
            f"user={self.user_profile_id} type={self.shareholder_type.value}>"
        )


class ShareAccount(SQLModel, table=True):
    """Running balance of one share type held by one shareholder."""

    __tablename__ = "share_accounts"  # type: ignore[assignment]

    __table_args__ = (
        UniqueConstraint("shareholder_id", "share_type", name="uq_share_accounts_holder_type"),
        CheckConstraint("share_amount >= 0", name="ck_share_accounts_amount_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    shareholder_id: uuid.UUID = Field(
        foreign_key="shareholders.id", index=True, ondelete="CASCADE"
    )
    share_type: ShareType = Field(default=ShareType.RESTRICTED)
    share_amount: int = Field(default=0, sa_type=BigInteger)  # type: ignore[arg-type]
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return (
            f"<ShareAccount holder={self.shareholder_id} "
            f"type={self.share_type.value} amount={self.share_amount}>"
        )
