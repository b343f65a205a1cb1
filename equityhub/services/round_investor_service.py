"""
Round-investor service — participants of a financing round.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from equityhub.core.exceptions import BusinessRuleViolation, NotFoundException
from equityhub.models.round import RoundInvestor
from equityhub.repositories.round_repo import RoundInvestorRepository, RoundRepository
from equityhub.schemas.round import RoundInvestorCreate, RoundInvestorUpdate

logger = logging.getLogger(__name__)


class RoundInvestorService:
    """Encapsulates CRUD for :class:`RoundInvestor`."""

    def __init__(self, investor_repo: RoundInvestorRepository, round_repo: RoundRepository):
        self._repo = investor_repo
        self._round_repo = round_repo

    # ── Queries ──

    async def get_round_investor(self, investor_id: UUID) -> RoundInvestor:
        found = await self._repo.get(investor_id)
        if not found:
            raise NotFoundException("Round investor", investor_id)
        return found

    async def get_by_round(self, round_id: UUID) -> List[RoundInvestor]:
        if not await self._round_repo.get(round_id):
            raise NotFoundException("Round", round_id)
        return await self._repo.get_by_round(round_id)

    # ── Commands ──

    async def create_round_investor(self, investor_in: RoundInvestorCreate) -> RoundInvestor:
        if not await self._round_repo.get(investor_in.round_id):
            raise NotFoundException("Round", investor_in.round_id)

        try:
            created = await self._repo.create(RoundInvestor(**investor_in.model_dump()))
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("IntegrityError creating round investor: %s", exc)
            raise BusinessRuleViolation(
                "Round investor could not be created; the round may have been removed."
            )
        logger.info("Added investor %s to round %s", created.id, created.round_id)
        return created

    async def update_round_investor(
        self, investor_id: UUID, investor_update: RoundInvestorUpdate
    ) -> RoundInvestor:
        """Full replacement of the investor's details; the round is fixed."""
        investor = await self.get_round_investor(investor_id)
        for key, value in investor_update.model_dump().items():
            setattr(investor, key, value)

        try:
            updated = await self._repo.update(investor)
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("IntegrityError updating round investor %s: %s", investor_id, exc)
            raise BusinessRuleViolation(
                "Round investor update violates a database constraint. Check all fields."
            )
        logger.info("Updated round investor %s", updated.id)
        return updated

    async def delete_round_investor(self, investor_id: UUID) -> None:
        if not await self._repo.delete(investor_id):
            raise NotFoundException("Round investor", investor_id)
        logger.info("Deleted round investor %s", investor_id)
