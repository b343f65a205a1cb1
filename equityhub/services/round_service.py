"""
Round service — financing rounds of a company.

A round is a plain record: creating one checks that the company exists and
nothing else.  Pre-/post-round share counts are not reconciled with the
company's ``total_shares``.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from equityhub.core.exceptions import BusinessRuleViolation, NotFoundException
from equityhub.models.round import Round
from equityhub.repositories.company_repo import CompanyRepository
from equityhub.repositories.round_repo import RoundRepository
from equityhub.schemas.round import RoundCreate

logger = logging.getLogger(__name__)


class RoundService:
    """Encapsulates CRUD for :class:`Round`."""

    def __init__(self, round_repo: RoundRepository, company_repo: CompanyRepository):
        self._repo = round_repo
        self._company_repo = company_repo

    async def get_round(self, round_id: UUID) -> Round:
        found = await self._repo.get(round_id)
        if not found:
            raise NotFoundException("Round", round_id)
        return found

    async def get_rounds_by_company(self, company_id: UUID) -> List[Round]:
        """Rounds of a company; 404 rather than ``[]`` for an unknown company."""
        if not await self._company_repo.get(company_id):
            raise NotFoundException("Company", company_id)
        return await self._repo.get_by_company(company_id)

    async def create_round(self, round_in: RoundCreate) -> Round:
        if not await self._company_repo.get(round_in.company_id):
            raise NotFoundException("Company", round_in.company_id)

        try:
            created = await self._repo.create(Round(**round_in.model_dump()))
        except IntegrityError as exc:
            # company deleted between the check and the insert
            await self._repo.rollback()
            logger.warning("IntegrityError creating round: %s", exc)
            raise BusinessRuleViolation(
                "Round could not be created; the company may have been removed."
            )
        logger.info("Created round %s (%s) for company %s", created.id, created.name, created.company_id)
        return created
