"""
Shareholder service — who sits on a company's cap table.

Duplicate memberships are caught by a pre-check and, for the race where two
requests slip past it, by the ``(company_id, user_profile_id)`` unique
constraint; both surface as 409.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from equityhub.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from equityhub.models.shareholder import Shareholder
from equityhub.repositories.company_repo import CompanyRepository
from equityhub.repositories.shareholder_repo import ShareholderRepository
from equityhub.repositories.user_repo import UserProfileRepository
from equityhub.schemas.shareholder import ShareholderCreate

logger = logging.getLogger(__name__)


class ShareholderService:
    """Encapsulates CRUD + business rules for :class:`Shareholder`."""

    def __init__(
        self,
        shareholder_repo: ShareholderRepository,
        company_repo: CompanyRepository,
        profile_repo: UserProfileRepository,
    ):
        self._repo = shareholder_repo
        self._company_repo = company_repo
        self._profile_repo = profile_repo

    async def get_shareholders_by_company(self, company_id: UUID) -> List[Shareholder]:
        if not await self._company_repo.get(company_id):
            raise NotFoundException("Company", company_id)
        return await self._repo.get_by_company(company_id)

    async def add_shareholder(
        self, user_id: Optional[UUID], shareholder_in: ShareholderCreate
    ) -> Shareholder:
        """Put a user profile on a company's cap table.  Company admin only."""
        if not user_id:
            raise UnauthorizedException()
        company = await self._company_repo.get(shareholder_in.company_id)
        if not company:
            raise NotFoundException("Company", shareholder_in.company_id)
        if company.admin_profile_id != user_id:
            raise ForbiddenException("Only the company admin may add shareholders")
        if not await self._profile_repo.get(shareholder_in.user_profile_id):
            raise NotFoundException("User profile", shareholder_in.user_profile_id)

        duplicate_message = (
            f"User profile '{shareholder_in.user_profile_id}' is already a shareholder "
            f"of company '{shareholder_in.company_id}'"
        )
        existing = await self._repo.get_membership(
            shareholder_in.company_id, shareholder_in.user_profile_id
        )
        if existing:
            raise ConflictException(duplicate_message)

        try:
            created = await self._repo.create(Shareholder(**shareholder_in.model_dump()))
        except IntegrityError:
            await self._repo.rollback()
            logger.warning("IntegrityError adding shareholder (race): %s", duplicate_message)
            raise ConflictException(duplicate_message)

        logger.info(
            "Added shareholder %s (%s) to company %s",
            created.id,
            created.shareholder_type.value,
            created.company_id,
        )
        return created
