"""Credential handling: password hashing and bearer tokens."""

from src.infrastructure.security.passwords import (
    hash_password,
    password_policy_violations,
    verify_password,
)
from src.infrastructure.security.tokens import (
    AccessTokenClaims,
    IssuedToken,
    JwtTokenService,
    get_token_service,
)

__all__ = [
    "AccessTokenClaims",
    "IssuedToken",
    "JwtTokenService",
    "get_token_service",
    "hash_password",
    "password_policy_violations",
    "verify_password",
]
