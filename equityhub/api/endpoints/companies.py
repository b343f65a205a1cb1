"""
Company endpoints.

- GET    /companies                         — search the caller's companies
- GET    /companies/users                   — companies the caller administers
- GET    /companies/{id}                    — retrieve a company
- POST   /companies                         — create a company (caller is admin)
- PUT    /companies/{id}                    — replace a company's details
- DELETE /companies/{id}                    — delete a company
- PATCH  /companies/option-pool             — issue new shares into the pool
- PATCH  /companies/{id}/shareholders/{sid}/share-accounts
                                            — grant pool shares as restricted shares
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from equityhub.api.deps import get_current_user_id
from equityhub.core.config import settings
from equityhub.db.session import get_db
from equityhub.models.company import Company
from equityhub.models.shareholder import ShareAccount, Shareholder
from equityhub.models.user import UserProfile
from equityhub.repositories.company_repo import CompanyRepository
from equityhub.repositories.shareholder_repo import (
    ShareAccountRepository,
    ShareholderRepository,
)
from equityhub.repositories.user_repo import UserProfileRepository
from equityhub.schemas.common import (
    ErrorResponse,
    ResponseEnvelope,
    ValidationErrorResponse,
    envelope,
)
from equityhub.schemas.company import (
    CompanyCreate,
    CompanyResponse,
    CompanySearchParams,
    CompanySearchResult,
    CompanySortField,
    CompanyUpdate,
    OptionPoolIncrease,
    RestrictedSharesGrant,
)
from equityhub.schemas.shareholder import ShareAccountResponse
from equityhub.services.company_service import CompanyService
from equityhub.services.share_account_service import ShareAccountService

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Company not found"}}
_INVALID = {400: {"model": ValidationErrorResponse, "description": "Validation error"}}


def _get_company_service(db: AsyncSession = Depends(get_db)) -> CompanyService:
    """Build a CompanyService whose repositories share the request's session."""
    shareholder_repo = ShareholderRepository(Shareholder, db)
    return CompanyService(
        company_repo=CompanyRepository(Company, db),
        shareholder_repo=shareholder_repo,
        profile_repo=UserProfileRepository(UserProfile, db),
        share_accounts=ShareAccountService(
            ShareAccountRepository(ShareAccount, db), shareholder_repo
        ),
    )


@router.get(
    "",
    response_model=ResponseEnvelope[List[CompanySearchResult]],
    summary="Search companies",
    description=(
        "Companies in which the caller is a shareholder.  ``company_name`` is a "
        "case-insensitive substring filter; results are sorted (default: name "
        "ascending) and then paginated."
    ),
    responses=_INVALID,
)
async def search_companies(
    company_name: Optional[str] = Query(None, max_length=255),
    sort_field: CompanySortField = Query(CompanySortField.NAME),
    is_sort_desc: bool = Query(False),
    page: int = Query(1, ge=1),
    page_size: int = Query(
        settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE
    ),
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    params = CompanySearchParams(
        company_name=company_name,
        sort_field=sort_field,
        is_sort_desc=is_sort_desc,
        page=page,
        page_size=page_size,
    )
    return envelope(await service.search_companies(user_id, params))


@router.get(
    "/users",
    response_model=ResponseEnvelope[List[CompanyResponse]],
    summary="List the caller's administered companies",
)
async def list_admin_companies(
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    return envelope(await service.get_companies_by_admin(user_id))


@router.patch(
    "/option-pool",
    response_model=ResponseEnvelope[CompanyResponse],
    summary="Increase a company's option pool",
    description=(
        "Issues ``shares_amount`` new shares into the option pool; the pool and "
        "total shares both grow by that amount."
    ),
    responses={
        **_NOT_FOUND,
        **_INVALID,
        403: {"model": ErrorResponse, "description": "Caller is not the admin"},
    },
)
async def increase_option_pool(
    body: OptionPoolIncrease,
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    return envelope(
        await service.increase_option_pool(user_id, body.company_id, body.shares_amount)
    )


@router.get(
    "/{company_id}",
    response_model=ResponseEnvelope[CompanyResponse],
    summary="Get a company",
    responses=_NOT_FOUND,
)
async def get_company(
    company_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    return envelope(await service.get_company(company_id))


@router.post(
    "",
    response_model=ResponseEnvelope[CompanyResponse],
    status_code=201,
    summary="Create a company",
    responses=_INVALID,
)
async def create_company(
    company_in: CompanyCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    return envelope(await service.create_company(user_id, company_in))


@router.put(
    "/{company_id}",
    response_model=ResponseEnvelope[CompanyResponse],
    summary="Update a company",
    description="Full replacement of the company's details.  Only the admin may update.",
    responses={
        **_NOT_FOUND,
        **_INVALID,
        403: {"model": ErrorResponse, "description": "Caller is not the admin"},
        409: {"model": ErrorResponse, "description": "Concurrent modification"},
    },
)
async def update_company(
    company_id: UUID,
    company_update: CompanyUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    return envelope(await service.update_company(user_id, company_id, company_update))


@router.delete(
    "/{company_id}",
    status_code=204,
    response_class=Response,
    summary="Delete a company",
    responses={
        **_NOT_FOUND,
        403: {"model": ErrorResponse, "description": "Caller is not the admin"},
    },
)
async def delete_company(
    company_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
) -> Response:
    await service.delete_company(user_id, company_id)
    return Response(status_code=204)


@router.patch(
    "/{company_id}/shareholders/{shareholder_id}/share-accounts",
    response_model=ResponseEnvelope[ShareAccountResponse],
    summary="Grant restricted shares from the option pool",
    description=(
        "Moves ``restricted_amount`` shares out of the company's option pool into "
        "the shareholder's restricted-share account.  Only the company admin may "
        "grant; fails with 422 when the pool holds fewer shares than requested."
    ),
    responses={
        403: {"model": ErrorResponse, "description": "Caller is not the admin"},
        404: {"model": ErrorResponse, "description": "Company or shareholder not found"},
        422: {"model": ErrorResponse, "description": "Insufficient option pool"},
        **_INVALID,
    },
)
async def grant_restricted_shares(
    company_id: UUID,
    shareholder_id: UUID,
    body: RestrictedSharesGrant,
    user_id: UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(_get_company_service),
):
    account = await service.add_option_pool_to_shareholder(
        user_id, company_id, shareholder_id, body.restricted_amount
    )
    return envelope(account)
