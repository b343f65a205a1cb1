"""
Shareholder and share-account repositories.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.future import select

from equityhub.models.shareholder import ShareAccount, Shareholder, ShareType
from equityhub.repositories.base import BaseRepository


class ShareholderRepository(BaseRepository[Shareholder]):
    """Concrete repository for :class:`Shareholder` entities."""

    async def get_by_company(self, company_id: UUID) -> List[Shareholder]:
        return await self.find(
            Shareholder.company_id == company_id,
            order_by=[Shareholder.created_at, Shareholder.id],
        )

    async def get_membership(
        self, company_id: UUID, user_profile_id: UUID
    ) -> Optional[Shareholder]:
        async def _get_membership() -> Optional[Shareholder]:
            stmt = select(self.model).where(
                self.model.company_id == company_id,
                self.model.user_profile_id == user_profile_id,
            )
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._guarded(_get_membership)


class ShareAccountRepository(BaseRepository[ShareAccount]):
    """Concrete repository for :class:`ShareAccount` entities."""

    async def get_by_shareholder(self, shareholder_id: UUID) -> List[ShareAccount]:
        return await self.find(
            ShareAccount.shareholder_id == shareholder_id,
            order_by=[ShareAccount.share_type],
        )

    async def get_account(
        self, shareholder_id: UUID, share_type: ShareType
    ) -> Optional[ShareAccount]:
        """Current row for the account, overwriting any stale identity-map copy."""

        async def _get_account() -> Optional[ShareAccount]:
            stmt = (
                select(self.model)
                .where(
                    self.model.shareholder_id == shareholder_id,
                    self.model.share_type == share_type,
                )
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._guarded(_get_account)

    async def credit(self, shareholder_id: UUID, share_type: ShareType, amount: int) -> bool:
        """
        Atomically add ``amount`` to an existing account (staged, not committed).

        Returns ``False`` when the account does not exist yet.
        """

        async def _credit() -> bool:
            stmt = (
                update(ShareAccount)
                .where(
                    ShareAccount.shareholder_id == shareholder_id,
                    ShareAccount.share_type == share_type,
                )
                .values(
                    share_amount=ShareAccount.share_amount + amount,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            return result.rowcount == 1

        return await self._guarded(_credit)
