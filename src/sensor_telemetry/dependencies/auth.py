"""Bearer token check for the range endpoints."""
import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def require_bearer_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """
    Compare the bearer token against HTTP_PASSWORD.

    An empty HTTP_PASSWORD disables the check (a warning is logged at startup).

    Raises:
        HTTPException: 401 if the token is missing or wrong.
    """
    password: str = request.app.state.settings.http_password
    if not password:
        return

    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(credentials.credentials.encode(), password.encode()):
        logger.warning(f"Rejected request to {request.url.path} - invalid password")
        raise HTTPException(
            status_code=401,
            detail="Invalid password",
            headers={"WWW-Authenticate": "Bearer"},
        )
