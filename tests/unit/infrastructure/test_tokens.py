"""Unit tests for JWT access tokens and refresh token helpers."""

import base64
import hashlib
from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from src.core.config import JwtConfig
from src.core.exceptions import UnauthorizedError
from src.infrastructure.security import JwtTokenService, get_token_service

SECRET = "unit-test-secret-key-that-is-long-enough"


@pytest.fixture
def config() -> JwtConfig:
    return JwtConfig(secret_key=SECRET)


@pytest.fixture
def token_service(config: JwtConfig) -> JwtTokenService:
    return JwtTokenService(config)


@pytest.mark.unit
class TestAccessTokens:
    """Test issuing and verifying access tokens."""

    def test_round_trip_claims(self, token_service: JwtTokenService) -> None:
        issued = token_service.create_access_token(5, "jane@example.com", ["User"])

        claims = token_service.decode_access_token(issued.token)

        assert claims.user_id == 5
        assert claims.email == "jane@example.com"
        assert claims.roles == ("User",)
        assert claims.expires_at == issued.expires_at.replace(microsecond=0)

    def test_standard_claims(
        self, token_service: JwtTokenService, config: JwtConfig
    ) -> None:
        now = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)
        issued = token_service.create_access_token(5, "j@e.com", [], now=now)

        payload = jwt.get_unverified_claims(issued.token)

        assert payload["sub"] == "5"
        assert payload["iss"] == config.issuer
        assert payload["aud"] == config.audience
        assert payload["iat"] == int(now.timestamp())
        assert payload["exp"] == int((now + timedelta(minutes=15)).timestamp())
        assert payload["jti"]
        assert issued.expires_at == now + timedelta(minutes=15)

    def test_expired_token_rejected(self, token_service: JwtTokenService) -> None:
        issued = token_service.create_access_token(
            5, "j@e.com", [], now=datetime.now(UTC) - timedelta(hours=1)
        )

        with pytest.raises(UnauthorizedError, match="Invalid or expired token"):
            token_service.decode_access_token(issued.token)

    def test_expired_token_accepted_without_expiry_check(
        self, token_service: JwtTokenService
    ) -> None:
        """Refresh exchanges an expired access token, so expiry can be skipped."""
        issued = token_service.create_access_token(
            5, "j@e.com", [], now=datetime.now(UTC) - timedelta(hours=1)
        )

        claims = token_service.decode_access_token(issued.token, verify_expiry=False)

        assert claims.user_id == 5

    @pytest.mark.parametrize(
        "override",
        [
            {"secret_key": "a-completely-different-signing-secret!!"},
            {"issuer": "SomeoneElse"},
            {"audience": "OtherClient"},
        ],
    )
    def test_foreign_tokens_rejected(
        self, token_service: JwtTokenService, override: dict[str, str]
    ) -> None:
        foreign = JwtTokenService(JwtConfig(**{"secret_key": SECRET, **override}))
        token = foreign.create_access_token(5, "j@e.com", []).token

        with pytest.raises(UnauthorizedError):
            token_service.decode_access_token(token)

    def test_garbage_rejected(self, token_service: JwtTokenService) -> None:
        with pytest.raises(UnauthorizedError) as exc_info:
            token_service.decode_access_token("not-a-jwt")

        assert exc_info.value.cause is not None

    def test_non_numeric_subject_rejected(
        self, token_service: JwtTokenService, config: JwtConfig
    ) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "abc",
                "iss": config.issuer,
                "aud": config.audience,
                "exp": int((now + timedelta(minutes=5)).timestamp()),
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(UnauthorizedError):
            token_service.decode_access_token(token)


@pytest.mark.unit
class TestRefreshTokens:
    def test_refresh_token_is_64_random_bytes(
        self, token_service: JwtTokenService
    ) -> None:
        now = datetime(2025, 3, 15, tzinfo=UTC)
        issued = token_service.create_refresh_token(now=now)

        assert len(base64.b64decode(issued.token)) == 64
        assert issued.expires_at == now + timedelta(days=7)
        assert token_service.create_refresh_token().token != issued.token

    def test_hash_is_sha256_hex(self) -> None:
        digest = JwtTokenService.hash_refresh_token("token")

        assert digest == hashlib.sha256(b"token").hexdigest()
        assert len(digest) == 64

    def test_get_token_service_is_cached(self) -> None:
        assert get_token_service() is get_token_service()
