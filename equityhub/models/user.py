"""
User domain models.

A ``UserProfile`` is the person (admin, shareholder); a ``UserAccount`` holds
the login credentials bound to exactly one profile.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class UserAccountStatus(str, Enum):
    """Lifecycle of a login account."""

    GUEST = "Guest"
    ACTIVE = "Active"
    DISABLED = "Disabled"


class UserProfile(SQLModel, table=True):
    """Person known to the system; referenced as company admin and shareholder."""

    __tablename__ = "user_profiles"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(first_name) > 0", name="ck_user_profiles_first_name_not_empty"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(default="", max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} name='{self.full_name}'>"


class UserAccount(SQLModel, table=True):
    """
    Login credentials.

    - ``email`` is stored lower-cased with a unique index.
    - ``password_hash`` is never plaintext; ``password_hash_algorithm`` names
      the passlib scheme that produced it.
    """

    __tablename__ = "user_accounts"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_profile_id: uuid.UUID = Field(
        foreign_key="user_profiles.id",
        unique=True,
        index=True,
        ondelete="CASCADE",
    )
    email: str = Field(unique=True, index=True, max_length=320)
    password_hash: str = Field(max_length=255)
    password_hash_algorithm: str = Field(max_length=50)
    status: UserAccountStatus = Field(default=UserAccountStatus.GUEST)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return f"<UserAccount id={self.id} email='{self.email}' status={self.status.value}>"
