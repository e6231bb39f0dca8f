from fastapi import Depends, HTTPException

from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
from adapter.mongodb.user_repository import MongoUserRepository
from port.user_repository import UserRepository
from services.token_service import TokenCodec
from utils.config import Settings, get_settings


def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[DATABASE_NAME]


def get_user_repo() -> UserRepository:
    return MongoUserRepository(_get_db())


def get_app_settings() -> Settings:
    return get_settings()


def get_token_codec(settings: Settings = Depends(get_app_settings)) -> TokenCodec:
    return TokenCodec.from_settings(settings)
