"""Cache route models."""

from typing import Any

from pydantic import BaseModel, Field


class CacheSetRequest(BaseModel):
    value: Any = None
    ttl_seconds: int | None = Field(
        default=None, description="Expiry in seconds; zero or negative keeps the key"
    )


class CacheEntryResponse(BaseModel):
    key: str
    value: Any
    ttl_seconds: int | None


class CacheSetResponse(BaseModel):
    key: str
    set: bool
    expires_in_seconds: int | None


class CacheRemoveResponse(BaseModel):
    key: str
    removed: bool
