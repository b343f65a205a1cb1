"""
Shared pytest fixtures.

Every test runs with ``USE_SQLITE=true`` and file logging off.  Service and
API tests use mocked repositories/services; the allocation tests in
``test_share_allocation.py`` run against a throw-away SQLite file so the
atomic ``UPDATE`` statements are exercised for real.
"""

import os

os.environ.setdefault("USE_SQLITE", "true")
os.environ.setdefault("LOG_TO_FILE", "false")

import uuid  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import equityhub.models  # noqa: E402,F401
from equityhub.core.resilience import db_circuit_breaker  # noqa: E402
from equityhub.core.security import create_access_token, hash_password  # noqa: E402
from equityhub.db.session import enable_sqlite_foreign_keys, make_session_factory  # noqa: E402
from equityhub.models.company import Company  # noqa: E402
from equityhub.models.round import Round, RoundInvestor  # noqa: E402
from equityhub.models.shareholder import (  # noqa: E402
    ShareAccount,
    Shareholder,
    ShareholderType,
    ShareType,
)
from equityhub.models.user import UserAccount, UserAccountStatus, UserProfile  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Fixed identifiers
# ────────────────────────────────────────────────────────────────────────────

ADMIN_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
COMPANY_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")
SHAREHOLDER_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")
MEMBER_ID = uuid.UUID("44444444-4444-4444-4444-444444444444")
ROUND_ID = uuid.UUID("55555555-5555-5555-5555-555555555555")
INVESTOR_ID = uuid.UUID("66666666-6666-6666-6666-666666666666")
ACCOUNT_ID = uuid.UUID("77777777-7777-7777-7777-777777777777")
COMPANY_ID_2 = uuid.UUID("88888888-8888-8888-8888-888888888888")

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers
# ────────────────────────────────────────────────────────────────────────────


def make_profile(
    *, id: uuid.UUID = ADMIN_ID, first_name: str = "Ada", last_name: str = "Lovelace"
) -> UserProfile:
    return UserProfile(
        id=id,
        first_name=first_name,
        last_name=last_name,
        created_at=datetime.now(timezone.utc),
    )


def make_account(
    *,
    id: uuid.UUID = ACCOUNT_ID,
    user_profile_id: uuid.UUID = ADMIN_ID,
    email: str = "ada@example.com",
    password: str = "correct-horse",
    status: UserAccountStatus = UserAccountStatus.GUEST,
) -> UserAccount:
    return UserAccount(
        id=id,
        user_profile_id=user_profile_id,
        email=email,
        password_hash=hash_password(password),
        password_hash_algorithm="pbkdf2_sha256",
        status=status,
        created_at=datetime.now(timezone.utc),
    )


def make_company(
    *,
    id: uuid.UUID = COMPANY_ID,
    admin_profile_id: uuid.UUID = ADMIN_ID,
    name: str = "Acme Robotics",
    capital: Decimal = Decimal("1000000.00"),
    total_shares: int = 1000,
    option_pool_amount: int = 100,
    version: int = 1,
) -> Company:
    """Create a Company with sensible test defaults."""
    return Company(
        id=id,
        admin_profile_id=admin_profile_id,
        name=name,
        capital=capital,
        total_shares=total_shares,
        option_pool_amount=option_pool_amount,
        categories=["robotics"],
        version=version,
        created_at=datetime.now(timezone.utc),
    )


def make_shareholder(
    *,
    id: uuid.UUID = SHAREHOLDER_ID,
    company_id: uuid.UUID = COMPANY_ID,
    user_profile_id: uuid.UUID = MEMBER_ID,
    shareholder_type: ShareholderType = ShareholderType.EMPLOYEE,
) -> Shareholder:
    return Shareholder(
        id=id,
        company_id=company_id,
        user_profile_id=user_profile_id,
        shareholder_type=shareholder_type,
        created_at=datetime.now(timezone.utc),
    )


def make_share_account(
    *,
    shareholder_id: uuid.UUID = SHAREHOLDER_ID,
    share_type: ShareType = ShareType.RESTRICTED,
    share_amount: int = 0,
) -> ShareAccount:
    return ShareAccount(
        id=uuid.uuid4(),
        shareholder_id=shareholder_id,
        share_type=share_type,
        share_amount=share_amount,
        updated_at=datetime.now(timezone.utc),
    )


def make_round(*, id: uuid.UUID = ROUND_ID, company_id: uuid.UUID = COMPANY_ID) -> Round:
    return Round(
        id=id,
        company_id=company_id,
        name="Seed",
        pre_round_shares=800,
        post_round_shares=1000,
        created_at=datetime.now(timezone.utc),
    )


def make_round_investor(
    *, id: uuid.UUID = INVESTOR_ID, round_id: uuid.UUID = ROUND_ID
) -> RoundInvestor:
    return RoundInvestor(
        id=id,
        round_id=round_id,
        investor_name="Northwind Ventures",
        investor_email="deals@northwind.com",
        shares_amount=200,
        invested_value=Decimal("250000.00"),
        created_at=datetime.now(timezone.utc),
    )


def auth_headers(user_profile_id: uuid.UUID = ADMIN_ID) -> dict:
    """``Authorization`` header carrying a valid token for ``user_profile_id``."""
    return {"Authorization": f"Bearer {create_access_token(user_profile_id)}"}


# ────────────────────────────────────────────────────────────────────────────
# Pytest fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_circuit_breaker():
    """The DB breaker is process-wide; start every test with it closed."""
    db_circuit_breaker.reset()
    yield
    db_circuit_breaker.reset()


@pytest.fixture()
def mock_db():
    """A mocked AsyncSession that tracks add/commit/refresh/rollback calls."""
    session = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.merge = AsyncMock()
    session.delete = AsyncMock()
    session.flush = AsyncMock()
    return session


@pytest.fixture()
async def sqlite_session_factory(tmp_path):
    """
    Session factory bound to a fresh SQLite *file* with all tables created.

    A file (not ``:memory:``) with ``NullPool`` gives every session its own
    connection, so concurrent sessions contend on real database locks.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'equityhub-test.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield make_session_factory(engine)
    await engine.dispose()
