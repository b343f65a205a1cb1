"""
API router aggregation.

``main.py`` mounts this router under ``settings.API_PREFIX`` (``/api``).
"""

from fastapi import APIRouter

from equityhub.api.endpoints import (
    auth,
    companies,
    round_investors,
    rounds,
    shareholders,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(companies.router, prefix="/companies", tags=["Companies"])
api_router.include_router(shareholders.router, prefix="/shareholders", tags=["Shareholders"])
api_router.include_router(rounds.router, prefix="/rounds", tags=["Rounds"])
api_router.include_router(
    round_investors.router, prefix="/round-investors", tags=["Round investors"]
)
