"""
Shareholder endpoints.

- POST /shareholders                       — add a user to a company's cap table
- GET  /shareholders/companies/{id}        — shareholders of a company
- GET  /shareholders/{id}/share-accounts   — a shareholder's share balances
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from equityhub.api.deps import get_current_user_id
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
from equityhub.schemas.common import ErrorResponse, ResponseEnvelope, envelope
from equityhub.schemas.shareholder import (
    ShareAccountResponse,
    ShareholderCreate,
    ShareholderResponse,
)
from equityhub.services.share_account_service import ShareAccountService
from equityhub.services.shareholder_service import ShareholderService

router = APIRouter()


def _get_shareholder_service(db: AsyncSession = Depends(get_db)) -> ShareholderService:
    return ShareholderService(
        ShareholderRepository(Shareholder, db),
        CompanyRepository(Company, db),
        UserProfileRepository(UserProfile, db),
    )


def _get_share_account_service(db: AsyncSession = Depends(get_db)) -> ShareAccountService:
    return ShareAccountService(
        ShareAccountRepository(ShareAccount, db), ShareholderRepository(Shareholder, db)
    )


@router.post(
    "",
    response_model=ResponseEnvelope[ShareholderResponse],
    status_code=201,
    summary="Add a shareholder",
    responses={
        403: {"model": ErrorResponse, "description": "Caller is not the company admin"},
        404: {"model": ErrorResponse, "description": "Company or user profile not found"},
        409: {"model": ErrorResponse, "description": "Already a shareholder"},
    },
)
async def add_shareholder(
    shareholder_in: ShareholderCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: ShareholderService = Depends(_get_shareholder_service),
):
    return envelope(await service.add_shareholder(user_id, shareholder_in))


@router.get(
    "/companies/{company_id}",
    response_model=ResponseEnvelope[List[ShareholderResponse]],
    summary="List a company's shareholders",
    responses={404: {"model": ErrorResponse, "description": "Company not found"}},
)
async def list_company_shareholders(
    company_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: ShareholderService = Depends(_get_shareholder_service),
):
    return envelope(await service.get_shareholders_by_company(company_id))


@router.get(
    "/{shareholder_id}/share-accounts",
    response_model=ResponseEnvelope[List[ShareAccountResponse]],
    summary="List a shareholder's share accounts",
    responses={404: {"model": ErrorResponse, "description": "Shareholder not found"}},
)
async def list_share_accounts(
    shareholder_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: ShareAccountService = Depends(_get_share_account_service),
):
    return envelope(await service.get_accounts(shareholder_id))
