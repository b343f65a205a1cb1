"""
Share-account service — balances held by shareholders.

``add_restricted_shares`` only *stages* its write on the shared session: it
is a collaborator of :class:`~equityhub.services.company_service.CompanyService`,
which commits the pool decrement and the credit together.
"""

import logging
from typing import List
from uuid import UUID

from equityhub.core.exceptions import NotFoundException, ValidationFailedException
from equityhub.models.shareholder import ShareAccount, ShareType
from equityhub.repositories.shareholder_repo import (
    ShareAccountRepository,
    ShareholderRepository,
)

logger = logging.getLogger(__name__)


class ShareAccountService:
    """Reads and credits :class:`ShareAccount` balances."""

    def __init__(
        self,
        account_repo: ShareAccountRepository,
        shareholder_repo: ShareholderRepository,
    ):
        self._repo = account_repo
        self._shareholder_repo = shareholder_repo

    async def get_accounts(self, shareholder_id: UUID) -> List[ShareAccount]:
        """All accounts of a shareholder; 404 when the shareholder is unknown."""
        shareholder = await self._shareholder_repo.get(shareholder_id)
        if not shareholder:
            raise NotFoundException("Shareholder", shareholder_id)
        return await self._repo.get_by_shareholder(shareholder_id)

    async def add_restricted_shares(self, shareholder_id: UUID, amount: int) -> ShareAccount:
        """
        Stage a credit of ``amount`` restricted shares; the caller commits.

        The balance is incremented in SQL so concurrent credits to the same
        account add up.  A missing account is created holding ``amount``.
        """
        if amount < 0:
            raise ValidationFailedException("Restricted share amount cannot be negative")

        account = None
        if await self._repo.credit(shareholder_id, ShareType.RESTRICTED, amount):
            account = await self._repo.get_account(shareholder_id, ShareType.RESTRICTED)
        if account is None:
            account = await self._repo.create(
                ShareAccount(
                    shareholder_id=shareholder_id,
                    share_type=ShareType.RESTRICTED,
                    share_amount=amount,
                ),
                commit=False,
            )
        logger.debug(
            "Staged +%d restricted shares for shareholder %s (balance %d)",
            amount,
            shareholder_id,
            account.share_amount,
        )
        return account
