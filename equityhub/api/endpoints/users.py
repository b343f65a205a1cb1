"""
User endpoints.

- POST /users        — register (public)
- GET  /users/{id}   — retrieve a user account
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from equityhub.api.deps import get_current_user_id
from equityhub.api.endpoints.auth import _get_user_account_service
from equityhub.schemas.common import (
    ErrorResponse,
    ResponseEnvelope,
    ValidationErrorResponse,
    envelope,
)
from equityhub.schemas.user import UserAccountResponse, UserRegister
from equityhub.services.user_account_service import UserAccountService

router = APIRouter()


@router.post(
    "",
    response_model=ResponseEnvelope[UserAccountResponse],
    status_code=201,
    summary="Register a user",
    description=(
        "Creates a user profile and its login account.  The email must be valid "
        "and unused; the password must be at least 8 characters."
    ),
    responses={
        400: {"model": ValidationErrorResponse, "description": "Malformed email or password"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register_user(
    user_in: UserRegister,
    service: UserAccountService = Depends(_get_user_account_service),
):
    return envelope(await service.register(user_in))


@router.get(
    "/{account_id}",
    response_model=ResponseEnvelope[UserAccountResponse],
    summary="Get a user account",
    responses={404: {"model": ErrorResponse, "description": "User account not found"}},
)
async def get_user_account(
    account_id: UUID,
    _: UUID = Depends(get_current_user_id),
    service: UserAccountService = Depends(_get_user_account_service),
):
    return envelope(await service.get_user_account(account_id))
