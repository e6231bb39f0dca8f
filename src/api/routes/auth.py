"""Authentication routes (login, register). Public: no bearer token required."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_app_settings, get_token_codec, get_user_repo
from api.models import CreateUserRequest, LoginRequest, UserResponse
from domain.model.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidFormatError,
    UnknownUserError,
)
from port.user_repository import UserRepository
from services import auth_service
from services.token_service import TokenCodec
from utils.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def register_user(
    request: CreateUserRequest,
    repo: UserRepository,
    codec: TokenCodec,
    settings: Settings,
) -> UserResponse:
    """Run registration and map its domain errors to HTTP errors.

    Raises:
        HTTPException: 409 if email already exists, 400 if email/password format is invalid
    """
    try:
        user = auth_service.register(
            repo, codec, settings,
            name=request.name,
            email=request.email,
            password=request.password,
            phones=request.phone_inputs(),
        )
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except InvalidFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return UserResponse.from_domain(user)


@router.post("/create", response_model=UserResponse)
async def create(
    request: CreateUserRequest,
    repo: UserRepository = Depends(get_user_repo),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new user and return it with its first token."""
    return register_user(request, repo, codec, settings)


@router.post("/login", response_model=UserResponse)
async def login(
    request: LoginRequest,
    repo: UserRepository = Depends(get_user_repo),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Login user and return it with a fresh token.

    Raises:
        HTTPException: 404 if no user has this email, 401 if the password is wrong
    """
    try:
        user = auth_service.login(repo, codec, request.email, request.password)
    except UnknownUserError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    return UserResponse.from_domain(user)
