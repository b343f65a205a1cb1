"""
Round endpoints.

- GET  /rounds/{id}              — retrieve a round
- GET  /rounds/companies/{id}    — rounds of a company
- POST /rounds                   — create a round
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from equityhub.api.deps import get_current_user_id
from equityhub.db.session import get_db
from equityhub.models.company import Company
from equityhub.models.round import Round
from equityhub.repositories.company_repo import CompanyRepository
from equityhub.repositories.round_repo import RoundRepository
from equityhub.schemas.common import (
    ErrorResponse,
    ResponseEnvelope,
    ValidationErrorResponse,
    envelope,
)
from equityhub.schemas.round import RoundCreate, RoundResponse
from equityhub.services.round_service import RoundService

router = APIRouter()


def _get_round_service(db: AsyncSession = Depends(get_db)) -> RoundService:
    return RoundService(RoundRepository(Round, db), CompanyRepository(Company, db))


@router.get(
    "/companies/{company_id}",
    response_model=ResponseEnvelope[List[RoundResponse]],
    summary="List a company's rounds",
    responses={404: {"model": ErrorResponse, "description": "Company not found"}},
)
async def list_company_rounds(
    company_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: RoundService = Depends(_get_round_service),
):
    return envelope(await service.get_rounds_by_company(company_id))


@router.get(
    "/{round_id}",
    response_model=ResponseEnvelope[RoundResponse],
    summary="Get a round",
    responses={404: {"model": ErrorResponse, "description": "Round not found"}},
)
async def get_round(
    round_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: RoundService = Depends(_get_round_service),
):
    return envelope(await service.get_round(round_id))


@router.post(
    "",
    response_model=ResponseEnvelope[RoundResponse],
    status_code=201,
    summary="Create a round",
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation error"},
        404: {"model": ErrorResponse, "description": "Company not found"},
    },
)
async def create_round(
    round_in: RoundCreate,
    _: UUID = Depends(get_current_user_id),
    service: RoundService = Depends(_get_round_service),
):
    return envelope(await service.create_round(round_in))
