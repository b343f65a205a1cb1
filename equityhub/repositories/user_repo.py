"""
User profile and user account repositories.

Email look-up backs duplicate detection and login.
"""

from typing import Optional

from sqlalchemy.future import select

from equityhub.models.user import UserAccount, UserProfile
from equityhub.repositories.base import BaseRepository


class UserProfileRepository(BaseRepository[UserProfile]):
    """Concrete repository for :class:`UserProfile` entities."""

    pass


class UserAccountRepository(BaseRepository[UserAccount]):
    """Concrete repository for :class:`UserAccount` entities."""

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Look up an account by (lower-cased) email; ``None`` if absent."""

        async def _get_by_email() -> Optional[UserAccount]:
            stmt = select(self.model).where(self.model.email == email.lower())
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._guarded(_get_by_email)
