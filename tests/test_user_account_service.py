"""
Unit tests for UserAccountService.

Tests cover:
- normalize_email: lower-casing, malformed input
- register: success, malformed email, short password, duplicate (pre-check and race)
- authenticate: success, wrong password, unknown email, disabled account
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from equityhub.core.exceptions import (
    ConflictException,
    MalformedEmailException,
    NotFoundException,
    UnauthorizedException,
    ValidationFailedException,
)
from equityhub.core.security import verify_password
from equityhub.models.user import UserAccountStatus
from equityhub.schemas.user import UserRegister
from equityhub.services.user_account_service import UserAccountService, normalize_email

from .conftest import ACCOUNT_ID, make_account


@pytest.fixture()
def account_repo():
    repo = AsyncMock()
    repo.get_by_email.return_value = None
    repo.create.side_effect = lambda entity, commit=True: entity
    return repo


@pytest.fixture()
def profile_repo():
    repo = AsyncMock()
    repo.create.side_effect = lambda entity, commit=True: entity
    return repo


@pytest.fixture()
def user_service(account_repo, profile_repo):
    return UserAccountService(account_repo, profile_repo)


def _register(**overrides) -> UserRegister:
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "Ada@Example.com",
        "password": "correct-horse",
    }
    data.update(overrides)
    return UserRegister(**data)


class TestNormalizeEmail:
    def test_lower_cases(self):
        assert normalize_email("  Ada@Example.COM ") == "ada@example.com"

    @pytest.mark.parametrize("email", ["not-an-email", "a@", "@example.com", "a b@example.com"])
    def test_malformed(self, email):
        with pytest.raises(MalformedEmailException):
            normalize_email(email)


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_profile_and_account(self, user_service, account_repo, profile_repo):
        account = await user_service.register(_register())

        profile = profile_repo.create.call_args.args[0]
        assert profile.first_name == "Ada"
        assert account.user_profile_id == profile.id
        assert account.email == "ada@example.com"
        assert account.status == UserAccountStatus.GUEST
        assert account.password_hash_algorithm == "pbkdf2_sha256"
        assert account.password_hash != "correct-horse"
        assert verify_password("correct-horse", account.password_hash)
        account_repo.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_email(self, user_service, account_repo):
        with pytest.raises(MalformedEmailException) as exc_info:
            await user_service.register(_register(email="nope"))
        assert exc_info.value.status_code == 400
        account_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_short_password(self, user_service, account_repo):
        with pytest.raises(ValidationFailedException, match="at least 8"):
            await user_service.register(_register(password="short"))
        account_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email(self, user_service, account_repo, profile_repo):
        account_repo.get_by_email.return_value = make_account()

        with pytest.raises(ConflictException):
            await user_service.register(_register())
        account_repo.get_by_email.assert_awaited_once_with("ada@example.com")
        profile_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email_race(self, user_service, account_repo):
        account_repo.commit.side_effect = IntegrityError("stmt", {}, Exception("unique"))

        with pytest.raises(ConflictException):
            await user_service.register(_register())
        account_repo.rollback.assert_awaited_once()


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_valid_credentials(self, user_service, account_repo):
        account = make_account(status=UserAccountStatus.ACTIVE)
        account_repo.get_by_email.return_value = account

        assert await user_service.authenticate("ada@example.com", "correct-horse") is account

    @pytest.mark.asyncio
    async def test_guest_can_log_in(self, user_service, account_repo):
        account_repo.get_by_email.return_value = make_account()

        assert await user_service.authenticate("ada@example.com", "correct-horse")

    @pytest.mark.asyncio
    async def test_wrong_password(self, user_service, account_repo):
        account_repo.get_by_email.return_value = make_account()

        with pytest.raises(UnauthorizedException, match="Incorrect email or password"):
            await user_service.authenticate("ada@example.com", "wrong-horse")

    @pytest.mark.asyncio
    async def test_unknown_email(self, user_service, account_repo):
        with pytest.raises(UnauthorizedException, match="Incorrect email or password"):
            await user_service.authenticate("nobody@example.com", "whatever1")

    @pytest.mark.asyncio
    async def test_disabled_account(self, user_service, account_repo):
        account_repo.get_by_email.return_value = make_account(status=UserAccountStatus.DISABLED)

        with pytest.raises(UnauthorizedException, match="Incorrect email or password"):
            await user_service.authenticate("ada@example.com", "correct-horse")


class TestGetUserAccount:
    @pytest.mark.asyncio
    async def test_found(self, user_service, account_repo):
        account_repo.get.return_value = make_account()

        result = await user_service.get_user_account(ACCOUNT_ID)

        assert result.email == "ada@example.com"

    @pytest.mark.asyncio
    async def test_not_found(self, user_service, account_repo):
        account_repo.get.return_value = None

        with pytest.raises(NotFoundException):
            await user_service.get_user_account(uuid4())
