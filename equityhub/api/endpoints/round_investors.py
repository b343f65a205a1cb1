"""
Round-investor endpoints.

- GET    /round-investors/{id}           — retrieve a round investor
- GET    /round-investors/rounds/{id}    — investors of a round
- POST   /round-investors                — add an investor to a round
- PUT    /round-investors/{id}           — replace an investor's details
- DELETE /round-investors/{id}           — remove an investor
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from equityhub.api.deps import get_current_user_id
from equityhub.db.session import get_db
from equityhub.models.round import Round, RoundInvestor
from equityhub.repositories.round_repo import RoundInvestorRepository, RoundRepository
from equityhub.schemas.common import (
    ErrorResponse,
    ResponseEnvelope,
    ValidationErrorResponse,
    envelope,
)
from equityhub.schemas.round import (
    RoundInvestorCreate,
    RoundInvestorResponse,
    RoundInvestorUpdate,
)
from equityhub.services.round_investor_service import RoundInvestorService

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Round investor not found"}}
_INVALID = {400: {"model": ValidationErrorResponse, "description": "Validation error"}}


def _get_round_investor_service(db: AsyncSession = Depends(get_db)) -> RoundInvestorService:
    return RoundInvestorService(
        RoundInvestorRepository(RoundInvestor, db), RoundRepository(Round, db)
    )


@router.get(
    "/rounds/{round_id}",
    response_model=ResponseEnvelope[List[RoundInvestorResponse]],
    summary="List a round's investors",
    responses={404: {"model": ErrorResponse, "description": "Round not found"}},
)
async def list_round_investors(
    round_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: RoundInvestorService = Depends(_get_round_investor_service),
):
    return envelope(await service.get_by_round(round_id))


@router.get(
    "/{investor_id}",
    response_model=ResponseEnvelope[RoundInvestorResponse],
    summary="Get a round investor",
    responses=_NOT_FOUND,
)
async def get_round_investor(
    investor_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: RoundInvestorService = Depends(_get_round_investor_service),
):
    return envelope(await service.get_round_investor(investor_id))


@router.post(
    "",
    response_model=ResponseEnvelope[RoundInvestorResponse],
    status_code=201,
    summary="Add an investor to a round",
    responses={**_INVALID, 404: {"model": ErrorResponse, "description": "Round not found"}},
)
async def create_round_investor(
    investor_in: RoundInvestorCreate,
    _: UUID = Depends(get_current_user_id),
    service: RoundInvestorService = Depends(_get_round_investor_service),
):
    return envelope(await service.create_round_investor(investor_in))


@router.put(
    "/{investor_id}",
    response_model=ResponseEnvelope[RoundInvestorResponse],
    summary="Update a round investor",
    responses={**_NOT_FOUND, **_INVALID},
)
async def update_round_investor(
    investor_id: UUID,
    investor_update: RoundInvestorUpdate,
    _: UUID = Depends(get_current_user_id),
    service: RoundInvestorService = Depends(_get_round_investor_service),
):
    return envelope(await service.update_round_investor(investor_id, investor_update))


@router.delete(
    "/{investor_id}",
    status_code=204,
    response_class=Response,
    summary="Delete a round investor",
    responses=_NOT_FOUND,
)
async def delete_round_investor(
    investor_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: RoundInvestorService = Depends(_get_round_investor_service),
) -> Response:
    await service.delete_round_investor(investor_id)
    return Response(status_code=204)
