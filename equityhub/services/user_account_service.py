"""
User account service — registration, look-up and login.

Registration rules:
- the email must be syntactically valid (``email-validator``) → 400;
- the password must be at least ``PASSWORD_MIN_LENGTH`` characters → 400;
- the email must not already be registered → 409.

Passwords are stored only as passlib hashes (see ``core.security``).
"""

import logging
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError

from equityhub.core.config import settings
from equityhub.core.exceptions import (
    ConflictException,
    MalformedEmailException,
    NotFoundException,
    UnauthorizedException,
    ValidationFailedException,
)
from equityhub.core.security import PASSWORD_SCHEME, hash_password, verify_password
from equityhub.models.user import UserAccount, UserAccountStatus, UserProfile
from equityhub.repositories.user_repo import UserAccountRepository, UserProfileRepository
from equityhub.schemas.user import UserRegister

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Validated, lower-cased form of ``email``; raises :class:`MalformedEmailException`."""
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise MalformedEmailException(email)
    return result.normalized.lower()


class UserAccountService:
    """Encapsulates registration and authentication for :class:`UserAccount`."""

    def __init__(self, account_repo: UserAccountRepository, profile_repo: UserProfileRepository):
        self._repo = account_repo
        self._profile_repo = profile_repo

    async def get_user_account(self, account_id: UUID) -> UserAccount:
        account = await self._repo.get(account_id)
        if not account:
            raise NotFoundException("User account", account_id)
        return account

    async def register(self, user_in: UserRegister) -> UserAccount:
        """Create a profile and its login account in one commit."""
        email = normalize_email(user_in.email)
        if len(user_in.password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationFailedException(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )
        if await self._repo.get_by_email(email):
            raise ConflictException(f"An account with email '{email}' already exists")

        profile = UserProfile(
            first_name=user_in.first_name.strip(),
            last_name=user_in.last_name.strip(),
            phone=user_in.phone,
        )
        try:
            profile = await self._profile_repo.create(profile, commit=False)
            account = await self._repo.create(
                UserAccount(
                    user_profile_id=profile.id,
                    email=email,
                    password_hash=hash_password(user_in.password),
                    password_hash_algorithm=PASSWORD_SCHEME,
                    status=UserAccountStatus.GUEST,
                ),
                commit=False,
            )
            await self._repo.commit()
        except IntegrityError:
            await self._repo.rollback()
            logger.warning("IntegrityError registering '%s' (duplicate email race)", email)
            raise ConflictException(f"An account with email '{email}' already exists")

        logger.info("Registered account %s for profile %s", account.id, profile.id)
        return account

    async def authenticate(self, email: str, password: str) -> UserAccount:
        """
        Return the account for valid credentials.

        Unknown email, wrong password and disabled accounts all raise the
        same :class:`UnauthorizedException` message.
        """
        rejected = UnauthorizedException("Incorrect email or password")
        account = await self._repo.get_by_email(email.strip())
        if not account or not verify_password(password, account.password_hash):
            logger.info("Failed login for '%s'", email)
            raise rejected
        if account.status == UserAccountStatus.DISABLED:
            logger.info("Login attempt for disabled account %s", account.id)
            raise rejected
        return account
