"""User management routes.

- POST /api/usuarios/create: register (public)
- GET /api/usuarios/findAll: list users
- PUT /api/usuarios/update/{id}: full update
- PATCH /api/usuarios/patch/{id}: partial update
- DELETE /api/usuarios/delete/{id}: delete

Every route except create sits behind the authentication gate.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from api.dependencies import get_app_settings, get_token_codec, get_user_repo
from api.models import CreateUserRequest, UpdateUserRequest, UserResponse
from api.routes.auth import register_user
from api.security import Principal, require_principal
from domain.model.errors import (
    DuplicateEmailError,
    NotFoundError,
    ValidationError,
)
from port.user_repository import UserRepository
from services import user_service
from services.token_service import TokenCodec
from utils.config import Settings

logger = logging.getLogger(__name__)

PREFIX = "/api/usuarios"

public_router = APIRouter(prefix=PREFIX, tags=["users"])
router = APIRouter(prefix=PREFIX, tags=["users"])


@public_router.post("/create", response_model=UserResponse)
async def create_user(
    request: CreateUserRequest,
    repo: UserRepository = Depends(get_user_repo),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new user (same as POST /api/auth/create)."""
    return register_user(request, repo, codec, settings)


@router.get("/findAll", response_model=list[UserResponse])
async def find_all(
    principal: Principal = Depends(require_principal),
    repo: UserRepository = Depends(get_user_repo),
):
    """List every user."""
    users = user_service.list_users(repo)
    logger.debug("Users listed", extra={"userId": principal.user_id, "count": len(users)})
    return [UserResponse.from_domain(u) for u in users]


@router.put("/update/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    principal: Principal = Depends(require_principal),
    repo: UserRepository = Depends(get_user_repo),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_app_settings),
):
    """Replace every mutable field of a user, phones included."""
    try:
        user = user_service.update_user(
            repo, codec, settings, user_id,
            name=request.name,
            email=request.email,
            password=request.password,
            active=request.active,
            phones=request.phone_inputs(),
        )
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info("User updated via API", extra={"userId": user_id, "actorId": principal.user_id})
    return UserResponse.from_domain(user)


@router.patch("/patch/{user_id}", response_model=UserResponse)
async def patch_user(
    user_id: str,
    updates: dict[str, Any] = Body(...),
    principal: Principal = Depends(require_principal),
    repo: UserRepository = Depends(get_user_repo),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_app_settings),
):
    """Change only the supplied fields: nombre, correo, password, activo, telefonos."""
    try:
        user = user_service.patch_user(repo, codec, settings, user_id, updates)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info("User patched via API", extra={"userId": user_id, "actorId": principal.user_id})
    return UserResponse.from_domain(user)


@router.delete("/delete/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(require_principal),
    repo: UserRepository = Depends(get_user_repo),
):
    """Delete a user and its phones."""
    if not user_service.delete_user(repo, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info("User deleted via API", extra={"userId": user_id, "actorId": principal.user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
