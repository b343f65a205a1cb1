"""
Company repository — data-access layer for the ``companies`` table.

Besides generic CRUD it owns the two share-count mutations.  Both are single
``UPDATE`` statements evaluated by the database, so concurrent requests
cannot lose each other's writes:

- :meth:`grow_option_pool` adds to the pool and to total shares together.
- :meth:`draw_from_option_pool` is a compare-and-swap that only succeeds while
  the pool still holds the requested amount.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.future import select

from equityhub.models.company import Company
from equityhub.models.shareholder import Shareholder
from equityhub.models.user import UserProfile
from equityhub.repositories.base import BaseRepository
from equityhub.schemas.company import CompanySortField

# Allow-list of sortable columns; request values never reach SQL as text.
SORT_COLUMNS: Dict[CompanySortField, Any] = {
    CompanySortField.NAME: Company.name,
    CompanySortField.CAPITAL: Company.capital,
    CompanySortField.TOTAL_SHARES: Company.total_shares,
    CompanySortField.OPTION_POOL_AMOUNT: Company.option_pool_amount,
    CompanySortField.CREATED_AT: Company.created_at,
}


class CompanyRepository(BaseRepository[Company]):
    """Concrete repository for :class:`Company` entities."""

    async def get_by_admin(self, admin_profile_id: UUID) -> List[Company]:
        return await self.find(
            Company.admin_profile_id == admin_profile_id,
            order_by=[Company.name, Company.id],
        )

    async def search_for_shareholder(
        self,
        user_profile_id: UUID,
        *,
        name_contains: Optional[str] = None,
        sort_field: CompanySortField = CompanySortField.NAME,
        descending: bool = False,
        skip: int = 0,
        limit: int = 10,
    ) -> List[Tuple[Company, UserProfile]]:
        """
        Companies in which ``user_profile_id`` is a shareholder, with their admin.

        ``name_contains`` is matched case-insensitively as a literal substring
        (``%`` and ``_`` are escaped).  Sorting is applied before pagination
        and tie-broken by id so pages are stable.
        """

        async def _search() -> List[Tuple[Company, UserProfile]]:
            column = SORT_COLUMNS[sort_field]
            stmt = (
                select(Company, UserProfile)
                .join(Shareholder, Shareholder.company_id == Company.id)
                .join(UserProfile, UserProfile.id == Company.admin_profile_id)
                .where(Shareholder.user_profile_id == user_profile_id)
            )
            if name_contains:
                stmt = stmt.where(
                    func.lower(Company.name).contains(name_contains.lower(), autoescape=True)
                )
            stmt = (
                stmt.order_by(column.desc() if descending else column.asc(), Company.id)
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(stmt)
            return [(row[0], row[1]) for row in result.all()]

        return await self._guarded(_search)

    async def replace_if_unchanged(
        self, company_id: UUID, expected_version: int, values: Dict[str, Any]
    ) -> bool:
        """
        Overwrite ``values`` only if the row is still at ``expected_version``.

        Staged on the session.  ``False`` means another writer (an update,
        a pool increase or an allocation) got there first.
        """

        async def _replace() -> bool:
            stmt = (
                update(Company)
                .where(Company.id == company_id, Company.version == expected_version)
                .values(**values, version=expected_version + 1)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            return result.rowcount == 1

        return await self._guarded(_replace)

    async def grow_option_pool(self, company_id: UUID, shares_amount: int) -> bool:
        """
        Issue ``shares_amount`` new shares straight into the option pool.

        Staged on the session; returns ``False`` when no such company exists.
        """

        async def _grow() -> bool:
            stmt = (
                update(Company)
                .where(Company.id == company_id)
                .values(
                    option_pool_amount=Company.option_pool_amount + shares_amount,
                    total_shares=Company.total_shares + shares_amount,
                    version=Company.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            return result.rowcount == 1

        return await self._guarded(_grow)

    async def draw_from_option_pool(self, company_id: UUID, shares_amount: int) -> bool:
        """
        Take ``shares_amount`` out of the pool if, and only if, it is still there.

        Staged on the session; returns ``False`` when the pool (as seen by
        the database at statement time) is smaller than ``shares_amount``.
        """

        async def _draw() -> bool:
            stmt = (
                update(Company)
                .where(
                    Company.id == company_id,
                    Company.option_pool_amount >= shares_amount,
                )
                .values(
                    option_pool_amount=Company.option_pool_amount - shares_amount,
                    version=Company.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            return result.rowcount == 1

        return await self._guarded(_draw)
