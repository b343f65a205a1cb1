"""
Company service — company CRUD, search, and the option-pool rules.

Option-pool invariants:

- ``increase_option_pool`` issues *new* shares into the pool, so the pool
  and ``total_shares`` grow by the same amount.
- ``add_option_pool_to_shareholder`` moves shares out of the pool into the
  shareholder's restricted account.  Pool decrement and credit are committed
  together, so the pool shrinks by exactly the credited amount and can never
  go negative.

Concurrency:
    Both rules are single ``UPDATE`` statements evaluated by the database.
    The pool draw is a compare-and-swap (``... WHERE option_pool_amount >= n``);
    it also takes the company row's write lock, which serialises allocators
    of the same company until commit.  The shareholder credit is staged only
    *after* the draw succeeded.  A lost race surfaces as
    :class:`InsufficientPoolException`, never as an overdrawn pool.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from equityhub.core.exceptions import (
    BusinessRuleViolation,
    ConflictException,
    ForbiddenException,
    InsufficientPoolException,
    NotFoundException,
    UnauthorizedException,
    ValidationFailedException,
)
from equityhub.models.company import Company
from equityhub.models.shareholder import ShareAccount, Shareholder, ShareholderType
from equityhub.repositories.company_repo import CompanyRepository
from equityhub.repositories.shareholder_repo import ShareholderRepository
from equityhub.repositories.user_repo import UserProfileRepository
from equityhub.schemas.company import (
    CompanyCreate,
    CompanyResponse,
    CompanySearchParams,
    CompanySearchResult,
    CompanyUpdate,
)
from equityhub.services.share_account_service import ShareAccountService

logger = logging.getLogger(__name__)


class CompanyService:
    """Encapsulates CRUD, search and option-pool rules for :class:`Company`."""

    def __init__(
        self,
        company_repo: CompanyRepository,
        shareholder_repo: ShareholderRepository,
        profile_repo: UserProfileRepository,
        share_accounts: ShareAccountService,
    ):
        self._repo = company_repo
        self._shareholder_repo = shareholder_repo
        self._profile_repo = profile_repo
        self._share_accounts = share_accounts

    # ── Queries ──

    async def get_company(self, company_id: UUID) -> Company:
        """Raises :class:`NotFoundException` if the company does not exist."""
        company = await self._repo.get(company_id)
        if not company:
            raise NotFoundException("Company", company_id)
        return company

    async def get_companies_by_admin(self, user_id: Optional[UUID]) -> List[Company]:
        """Companies administered by the caller, ordered by name."""
        _require_identity(user_id)
        return await self._repo.get_by_admin(user_id)  # type: ignore[arg-type]

    async def search_companies(
        self, user_id: Optional[UUID], params: CompanySearchParams
    ) -> List[CompanySearchResult]:
        """
        Page through the companies the caller holds shares in.

        Filtering, sorting and slicing all happen in the database; each row
        is returned with the admin's full name.
        """
        _require_identity(user_id)
        rows = await self._repo.search_for_shareholder(
            user_id,  # type: ignore[arg-type]
            name_contains=params.company_name,
            sort_field=params.sort_field,
            descending=params.is_sort_desc,
            skip=params.offset,
            limit=params.page_size,
        )
        return [
            CompanySearchResult(
                **{field: getattr(company, field) for field in CompanyResponse.model_fields},
                admin_name=admin.full_name,
            )
            for company, admin in rows
        ]

    # ── Commands ──

    async def create_company(self, user_id: Optional[UUID], company_in: CompanyCreate) -> Company:
        """
        Create a company administered by the caller.

        The caller is also registered as a ``Founder`` shareholder so the
        company shows up in their search.  Both rows commit together.
        """
        _require_identity(user_id)
        admin = await self._profile_repo.get(user_id)
        if not admin:
            raise UnauthorizedException("Caller has no user profile")

        company = Company(admin_profile_id=user_id, **company_in.model_dump())
        try:
            created = await self._repo.create(company, commit=False)
            await self._shareholder_repo.create(
                Shareholder(
                    company_id=created.id,
                    user_profile_id=user_id,
                    shareholder_type=ShareholderType.FOUNDER,
                ),
                commit=False,
            )
            await self._repo.commit()
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("IntegrityError creating company: %s", exc)
            raise BusinessRuleViolation(
                "Company data violates a database constraint. Check all fields."
            )
        created = await self._repo.refresh(created)
        logger.info("Created company %s (%s) for admin %s", created.id, created.name, user_id)
        return created

    async def update_company(
        self, user_id: Optional[UUID], company_id: UUID, company_update: CompanyUpdate
    ) -> Company:
        """
        Full replacement of the mutable fields.  Admin only.

        The write is conditional on ``company_update.version``, the version
        the client based its changes on, so a stale form cannot undo a pool
        change committed since (:class:`ConflictException` instead).
        """
        company = await self._get_administered(user_id, company_id, "update")

        try:
            replaced = await self._repo.replace_if_unchanged(
                company_id,
                company_update.version,
                company_update.model_dump(exclude={"version"}),
            )
            if not replaced:
                await self._repo.rollback()
                raise ConflictException(
                    f"Company '{company_id}' was modified concurrently; reload and retry"
                )
            await self._repo.commit()
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("IntegrityError updating company %s: %s", company_id, exc)
            raise BusinessRuleViolation(
                "Company update violates a database constraint. Check all fields."
            )
        updated = await self._repo.refresh(company)
        logger.info("Updated company %s (version %d)", updated.id, updated.version)
        return updated

    async def delete_company(self, user_id: Optional[UUID], company_id: UUID) -> None:
        """
        Delete a company.  Admin only.

        Shareholders, share accounts, rounds and round investors go with it
        (``ON DELETE CASCADE``).
        """
        await self._get_administered(user_id, company_id, "delete")
        try:
            deleted = await self._repo.delete(company_id)
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("IntegrityError deleting company %s: %s", company_id, exc)
            raise ConflictException(f"Company '{company_id}' is still referenced")
        if not deleted:
            raise NotFoundException("Company", company_id)
        logger.info("Deleted company %s", company_id)

    async def increase_option_pool(
        self, user_id: Optional[UUID], company_id: UUID, shares_amount: int
    ) -> Company:
        """
        Issue ``shares_amount`` new shares into the option pool.  Admin only.

        Both ``option_pool_amount`` and ``total_shares`` grow by exactly
        ``shares_amount``.  An unknown company raises
        :class:`NotFoundException` and nothing is written.
        """
        if shares_amount <= 0:
            raise ValidationFailedException("shares_amount must be positive")

        company = await self._get_administered(user_id, company_id, "grow the option pool of")
        try:
            grown = await self._repo.grow_option_pool(company_id, shares_amount)
            if not grown:
                # deleted between the read and the write
                await self._repo.rollback()
                raise NotFoundException("Company", company_id)
            await self._repo.commit()
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning("IntegrityError growing option pool of %s: %s", company_id, exc)
            raise BusinessRuleViolation("Option pool increase violates a database constraint")

        company = await self._repo.refresh(company)
        logger.info(
            "Increased option pool of company %s by %d (pool=%d, total=%d)",
            company_id,
            shares_amount,
            company.option_pool_amount,
            company.total_shares,
            extra={"company_id": str(company_id), "shares": shares_amount},
        )
        return company

    async def add_option_pool_to_shareholder(
        self,
        user_id: Optional[UUID],
        company_id: UUID,
        shareholder_id: UUID,
        restricted_amount: int,
    ) -> ShareAccount:
        """
        Grant ``restricted_amount`` pool shares to a shareholder of the company.

        Only the company admin may grant (:class:`ForbiddenException`).

        Raises :class:`NotFoundException` for an unknown company or a
        shareholder that is not on this company's cap table, and
        :class:`InsufficientPoolException` when the pool holds fewer shares
        than requested (including when a concurrent grant drained it first).
        Returns the shareholder's restricted-share account after the grant.
        """
        if restricted_amount < 0:
            raise ValidationFailedException("restricted_amount cannot be negative")

        company = await self._get_administered(user_id, company_id, "grant shares of")
        shareholder = await self._shareholder_repo.get(shareholder_id)
        if not shareholder or shareholder.company_id != company_id:
            raise NotFoundException("Shareholder", shareholder_id)

        if restricted_amount > company.option_pool_amount:
            self._log_rejected_grant(company_id, shareholder_id, restricted_amount, company)
            raise InsufficientPoolException(
                company_id, restricted_amount, company.option_pool_amount
            )

        try:
            drawn = await self._repo.draw_from_option_pool(company_id, restricted_amount)
            if not drawn:
                await self._repo.rollback()
                company = await self._repo.refresh(company)
                self._log_rejected_grant(company_id, shareholder_id, restricted_amount, company)
                raise InsufficientPoolException(
                    company_id, restricted_amount, company.option_pool_amount
                )
            account = await self._share_accounts.add_restricted_shares(
                shareholder_id, restricted_amount
            )
            await self._repo.commit()
        except IntegrityError as exc:
            await self._repo.rollback()
            logger.warning(
                "IntegrityError granting %d shares of %s to %s: %s",
                restricted_amount,
                company_id,
                shareholder_id,
                exc,
            )
            raise BusinessRuleViolation(
                "Restricted share grant could not be recorded; a referenced record "
                "may have been removed."
            )

        company = await self._repo.refresh(company)
        logger.info(
            "Allocated %d restricted shares of company %s to shareholder %s (pool=%d)",
            restricted_amount,
            company_id,
            shareholder_id,
            company.option_pool_amount,
            extra={
                "company_id": str(company_id),
                "shareholder_id": str(shareholder_id),
                "shares": restricted_amount,
            },
        )
        return account

    async def _get_administered(
        self, user_id: Optional[UUID], company_id: UUID, action: str
    ) -> Company:
        """Load the company and require the caller to be its admin."""
        _require_identity(user_id)
        company = await self.get_company(company_id)
        if company.admin_profile_id != user_id:
            raise ForbiddenException(f"Only the company admin may {action} this company")
        return company

    @staticmethod
    def _log_rejected_grant(
        company_id: UUID, shareholder_id: UUID, requested: int, company: Company
    ) -> None:
        logger.warning(
            "Rejected grant of %d shares of company %s to shareholder %s: pool holds %d",
            requested,
            company_id,
            shareholder_id,
            company.option_pool_amount,
        )


def _require_identity(user_id: Optional[UUID]) -> None:
    """A missing or empty caller identity is an :class:`UnauthorizedException`."""
    if not user_id:
        raise UnauthorizedException()
