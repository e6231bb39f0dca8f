"""Bearer-token authentication gate and principal dependencies.

``authenticate_request`` runs once per request (FastAPI caches a dependency
within a request) on every router it is attached to. It ends in exactly one of:

- no change: no header starting with exactly ``"Bearer "``, unknown user,
  subject mismatch or expired token
- principal attached to ``request.state.principal``
- request aborted with 401 and a plaintext body: token malformed or badly signed

Public routers (login, registration, docs, health) are mounted without it.
Handlers that need an authenticated caller declare ``Depends(require_principal)``
and receive the principal explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.dependencies import get_token_codec, get_user_repo
from domain.model.errors import InvalidTokenError
from port.user_repository import UserRepository
from services.token_service import TokenCodec

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid JWT token"
BEARER_PREFIX = "Bearer "

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller for the current request."""
    user_id: str
    email: str
    client_host: Optional[str] = None


def authenticate_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repo),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[Principal]:
    """Resolve the bearer token into a principal, if it names a live user.

    Raises:
        InvalidTokenError: token cannot be decoded (turned into a plaintext 401)
    """
    # HTTPBearer accepts any casing of the scheme; only the exact prefix counts here
    if not credentials or not request.headers.get("Authorization", "").startswith(BEARER_PREFIX):
        return None

    token = credentials.credentials
    subject = codec.subject(token)

    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return principal

    user = repo.get_by_email(subject)
    if not user or not codec.is_valid(token, user.email):
        logger.debug("Bearer token not accepted", extra={"path": request.url.path})
        return None

    principal = Principal(
        user_id=user.id,
        email=user.email,
        client_host=request.client.host if request.client else None,
    )
    request.state.principal = principal
    return principal


def require_principal(
    principal: Optional[Principal] = Depends(authenticate_request),
) -> Principal:
    """Return the authenticated principal or reject the request with 401."""
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


async def invalid_token_handler(request: Request, exc: InvalidTokenError) -> PlainTextResponse:
    """Answer an undecodable bearer token with a fixed plaintext 401."""
    logger.warning("Rejected invalid bearer token", extra={"path": request.url.path})
    return PlainTextResponse(
        INVALID_TOKEN_MESSAGE,
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )
