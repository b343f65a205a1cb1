"""
Financing round models.

A ``Round`` records pre-/post-round share counts for a company; nothing ties
those counts to ``Company.total_shares``.  ``RoundInvestor`` rows list who
took part in a round.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class Round(SQLModel, table=True):
    """SQLModel / SQLAlchemy table definition for rounds."""

    __tablename__ = "rounds"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_rounds_name_not_empty"),
        CheckConstraint("pre_round_shares >= 0", name="ck_rounds_pre_non_negative"),
        CheckConstraint("post_round_shares >= 0", name="ck_rounds_post_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    company_id: uuid.UUID = Field(foreign_key="companies.id", index=True, ondelete="CASCADE")
    name: str = Field(max_length=255)
    pre_round_shares: int = Field(default=0, sa_type=BigInteger)  # type: ignore[arg-type]
    post_round_shares: int = Field(default=0, sa_type=BigInteger)  # type: ignore[arg-type]
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Round id={self.id} company={self.company_id} name='{self.name}'>"


class RoundInvestor(SQLModel, table=True):
    """An investor's participation in a round."""

    __tablename__ = "round_investors"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(investor_name) > 0", name="ck_round_investors_name_not_empty"),
        CheckConstraint("shares_amount >= 0", name="ck_round_investors_shares_non_negative"),
        CheckConstraint("invested_value >= 0", name="ck_round_investors_value_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    round_id: uuid.UUID = Field(foreign_key="rounds.id", index=True, ondelete="CASCADE")
    investor_name: str = Field(max_length=255)
    investor_email: Optional[str] = Field(default=None, max_length=320)
    shares_amount: int = Field(default=0, sa_type=BigInteger)  # type: ignore[arg-type]
    invested_value: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return f"<RoundInvestor id={self.id} round={self.round_id} name='{self.investor_name}'>"
