"""Authenticated key/value access to the Redis cache.

``PUT`` accepts the value three ways, checked in this order:

1. a JSON body ``{"value": ..., "ttl_seconds": ...}``; the ``ttl_seconds``
   query parameter applies when the body omits it
2. a ``text/plain`` body holding the raw string
3. the ``value`` and ``ttl_seconds`` query parameters
"""

from typing import Any

import orjson
from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError

from src.api.dependencies import CacheServiceDep, CurrentUserDep
from src.api.schemas.cache import (
    CacheEntryResponse,
    CacheRemoveResponse,
    CacheSetRequest,
    CacheSetResponse,
)
from src.core.exceptions import NotFoundError, ValidationError

router = APIRouter(prefix="/cache", tags=["cache"])


def _is_blank(value: Any) -> bool:  # noqa: ANN401 - any JSON value
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_ttl(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(
            "ttl_seconds must be an integer", context={"ttl_seconds": raw}, cause=e
        ) from e


async def _read_set_request(request: Request) -> CacheSetRequest:
    content_type = request.headers.get("content-type", "")
    body = await request.body()
    ttl_seconds = _parse_ttl(request.query_params.get("ttl_seconds"))

    if body and content_type.startswith("application/json"):
        try:
            payload = CacheSetRequest.model_validate(orjson.loads(body))
        except (orjson.JSONDecodeError, PydanticValidationError) as e:
            raise ValidationError("Invalid JSON body", cause=e) from e
        if payload.ttl_seconds is None:
            payload.ttl_seconds = ttl_seconds
        return payload

    if body and content_type.startswith("text/plain"):
        try:
            value = body.decode()
        except UnicodeDecodeError as e:
            raise ValidationError("Body must be UTF-8 text", cause=e) from e
        return CacheSetRequest(value=value, ttl_seconds=ttl_seconds)
    return CacheSetRequest(
        value=request.query_params.get("value"), ttl_seconds=ttl_seconds
    )


@router.get("/{key}")
async def get_cached(
    key: str, _user: CurrentUserDep, cache: CacheServiceDep
) -> CacheEntryResponse:
    entry = await cache.get_entry(key)
    if entry is None:
        raise NotFoundError(f"Cache key '{key}' not found", context={"key": key})
    return CacheEntryResponse(
        key=entry.key, value=entry.value, ttl_seconds=entry.ttl_seconds
    )


@router.put("/{key}")
async def set_cached(
    key: str, request: Request, _user: CurrentUserDep, cache: CacheServiceDep
) -> CacheSetResponse:
    """Store a value; a positive ``ttl_seconds`` makes it expire."""
    payload = await _read_set_request(request)
    if _is_blank(payload.value):
        raise ValidationError("Value must not be empty", context={"key": key})

    await cache.set(key, payload.value, payload.ttl_seconds)
    ttl = payload.ttl_seconds
    expires_in = ttl if ttl is not None and ttl > 0 else None
    return CacheSetResponse(key=key, set=True, expires_in_seconds=expires_in)


@router.delete("/{key}")
async def remove_cached(
    key: str, _user: CurrentUserDep, cache: CacheServiceDep
) -> CacheRemoveResponse:
    return CacheRemoveResponse(key=key, removed=await cache.remove(key))
