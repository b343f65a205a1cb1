"""
Request-boundary dependencies.

``get_current_user_id`` is the only place that looks at credentials: it
turns the bearer token into an explicit user-profile id that endpoints pass
on to the services.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from equityhub.core.exceptions import UnauthorizedException
from equityhub.core.security import decode_access_token

# auto_error=False: a missing header goes through our 401 handler instead of
# FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UUID:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException()
    return decode_access_token(credentials.credentials)
