"""JWT access tokens and opaque refresh tokens.

Access tokens are short lived HMAC signed JWTs carrying the user id in
``sub`` together with the email and role names. Refresh tokens are 64 random
bytes, base64 encoded; only their SHA-256 digest is persisted.
"""

import base64
import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Final

from jose import JWTError, jwt

from src.core.config import JwtConfig, get_settings
from src.core.exceptions import UnauthorizedError

REFRESH_TOKEN_BYTES: Final[int] = 64


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    """Identity extracted from a verified access token."""

    user_id: int
    email: str
    roles: tuple[str, ...]
    expires_at: datetime


class JwtTokenService:
    """Issues and verifies tokens according to ``JwtConfig``.

    Args:
        config: Signing key, issuer, audience and lifetimes.
    """

    def __init__(self, config: JwtConfig) -> None:
        self._config = config

    def create_access_token(
        self,
        user_id: int,
        email: str,
        roles: list[str],
        now: datetime | None = None,
    ) -> IssuedToken:
        """Sign an access token for a user.

        Args:
            user_id: Subject of the token.
            email: User email, copied into the ``email`` claim.
            roles: Role names, copied into the ``roles`` claim.
            now: Issue time, defaults to the current time.

        Returns:
            IssuedToken: Encoded JWT and its expiry.
        """
        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + timedelta(
            minutes=self._config.access_token_expiry_minutes
        )
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "roles": roles,
            "jti": str(uuid.uuid4()),
            "iss": self._config.issuer,
            "aud": self._config.audience,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(
            claims, self._config.secret_key, algorithm=self._config.algorithm
        )
        return IssuedToken(token=token, expires_at=expires_at)

    def decode_access_token(
        self, token: str, *, verify_expiry: bool = True
    ) -> AccessTokenClaims:
        """Verify signature, issuer and audience and return the claims.

        Args:
            token: Encoded JWT.
            verify_expiry: Reject expired tokens. Disabled when exchanging an
                expired access token for a new one during refresh.

        Returns:
            AccessTokenClaims: The verified identity.

        Raises:
            UnauthorizedError: If the token is malformed, forged, expired or
                issued for a different issuer or audience.
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                issuer=self._config.issuer,
                options={
                    "verify_exp": verify_expiry,
                    "leeway": self._config.clock_skew_seconds,
                },
            )
            claims = AccessTokenClaims(
                user_id=int(payload["sub"]),
                email=str(payload.get("email", "")),
                roles=tuple(payload.get("roles", [])),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
            )
        except (JWTError, KeyError, TypeError, ValueError) as e:
            raise UnauthorizedError("Invalid or expired token", cause=e) from e
        return claims

    def create_refresh_token(self, now: datetime | None = None) -> IssuedToken:
        """Generate a new random refresh token and its expiry."""
        issued_at = now or datetime.now(UTC)
        token = base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode()
        return IssuedToken(
            token=token,
            expires_at=issued_at
            + timedelta(days=self._config.refresh_token_expiry_days),
        )

    @staticmethod
    def hash_refresh_token(token: str) -> str:
        """Digest under which a refresh token is stored and looked up."""
        return hashlib.sha256(token.encode()).hexdigest()


@lru_cache
def get_token_service() -> JwtTokenService:
    """Token service built from the cached settings."""
    return JwtTokenService(get_settings().jwt_config)
