"""
Round and round-investor repositories.
"""

from typing import List
from uuid import UUID

from equityhub.models.round import Round, RoundInvestor
from equityhub.repositories.base import BaseRepository


class RoundRepository(BaseRepository[Round]):
    """Concrete repository for :class:`Round` entities."""

    async def get_by_company(self, company_id: UUID) -> List[Round]:
        """Rounds of a company, oldest first."""
        return await self.find(
            Round.company_id == company_id,
            order_by=[Round.created_at, Round.id],
        )


class RoundInvestorRepository(BaseRepository[RoundInvestor]):
    """Concrete repository for :class:`RoundInvestor` entities."""

    async def get_by_round(self, round_id: UUID) -> List[RoundInvestor]:
        return await self.find(
            RoundInvestor.round_id == round_id,
            order_by=[RoundInvestor.created_at, RoundInvestor.id],
        )
