"""
Authentication endpoint.

- POST /auth/token — exchange email + password for a bearer token
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from equityhub.core.security import create_access_token
from equityhub.db.session import get_db
from equityhub.models.user import UserAccount, UserProfile
from equityhub.repositories.user_repo import UserAccountRepository, UserProfileRepository
from equityhub.schemas.common import ErrorResponse, ValidationErrorResponse
from equityhub.schemas.user import LoginRequest, TokenResponse
from equityhub.services.user_account_service import UserAccountService

router = APIRouter()


def _get_user_account_service(db: AsyncSession = Depends(get_db)) -> UserAccountService:
    return UserAccountService(
        UserAccountRepository(UserAccount, db), UserProfileRepository(UserProfile, db)
    )


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="Issue an access token",
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation error"},
        401: {"model": ErrorResponse, "description": "Incorrect email or password"},
    },
)
async def issue_token(
    credentials: LoginRequest,
    service: UserAccountService = Depends(_get_user_account_service),
) -> TokenResponse:
    account = await service.authenticate(credentials.email, credentials.password)
    return TokenResponse(access_token=create_access_token(account.user_profile_id))
