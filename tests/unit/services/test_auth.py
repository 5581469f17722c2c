"""Unit tests for AuthService.

Password hashing is patched out to keep the tests fast; token signing uses a
real ``JwtTokenService``.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.exc import IntegrityError

from src.core.config import JwtConfig
from src.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.infrastructure.database.models import RefreshToken, Role, User
from src.infrastructure.repositories import (
    RefreshTokenRepository,
    RoleRepository,
    UserRepository,
)
from src.infrastructure.security import JwtTokenService
from src.services.auth import AuthService

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)
STRONG_PASSWORD = "Sup3r$ecret"


@pytest.fixture
def token_service() -> JwtTokenService:
    return JwtTokenService(
        JwtConfig(secret_key="unit-test-secret-key-that-is-long-enough")
    )


@pytest.fixture
def users(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=UserRepository)


@pytest.fixture
def roles(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=RoleRepository)


@pytest.fixture
def refresh_tokens(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=RefreshTokenRepository)


@pytest.fixture
def password_hashing(mocker: MockerFixture) -> dict[str, MockType]:
    return {
        "hash": mocker.patch(
            "src.services.auth.hash_password", side_effect=lambda p: f"hashed:{p}"
        ),
        "verify": mocker.patch(
            "src.services.auth.verify_password",
            side_effect=lambda p, h: h == f"hashed:{p}",
        ),
    }


@pytest.fixture
def service(
    session: MockType,
    token_service: JwtTokenService,
    users: MockType,
    roles: MockType,
    refresh_tokens: MockType,
    password_hashing: dict[str, MockType],
    frozen_clock: Callable[[datetime], MockType],
) -> AuthService:
    frozen_clock(NOW)
    auth_service = AuthService(session, token_service)
    auth_service.users = users
    auth_service.roles = roles
    auth_service.refresh_tokens = refresh_tokens
    return auth_service


def _stored_token(
    token_service: JwtTokenService,
    token: str,
    **overrides: Any,  # noqa: ANN401
) -> RefreshToken:
    values: dict[str, Any] = {
        "id": 7,
        "user_id": 10,
        "token_hash": token_service.hash_refresh_token(token),
        "expires_at": datetime.now(UTC) + timedelta(days=1),
        "revoked_at": None,
    }
    values.update(overrides)
    return RefreshToken(**values)


@pytest.mark.unit
class TestRegister:
    async def test_creates_user_and_issues_tokens(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        users: MockType,
        roles: MockType,
        refresh_tokens: MockType,
        echo_created: Callable[[Any], Any],
    ) -> None:
        users.get_by_email.return_value = None
        roles.get_or_create.return_value = Role(id=1, name="User")
        users.create.side_effect = echo_created

        result = await service.register(
            email=" Jane@Example.COM ",
            password=STRONG_PASSWORD,
            confirm_password=STRONG_PASSWORD,
            first_name="Jane ",
            last_name=" Doe",
            ip_address="203.0.113.9",
        )

        created: User = users.create.await_args.args[0]
        assert created.email == "jane@example.com"
        assert created.password_hash == f"hashed:{STRONG_PASSWORD}"
        assert created.full_name == "Jane Doe"
        assert created.role_names == ["User"]
        roles.get_or_create.assert_awaited_once_with("User")

        claims = token_service.decode_access_token(result.access_token)
        assert claims.user_id == created.id
        assert claims.roles == ("User",)

        stored: RefreshToken = refresh_tokens.create.await_args.args[0]
        expected_hash = token_service.hash_refresh_token(result.refresh_token)
        assert stored.token_hash == expected_hash
        assert stored.created_by_ip == "203.0.113.9"

    async def test_mismatched_confirmation(
        self, service: AuthService, users: MockType
    ) -> None:
        with pytest.raises(ValidationError, match="Passwords do not match"):
            await service.register(
                email="jane@example.com",
                password=STRONG_PASSWORD,
                confirm_password="different",
                first_name="Jane",
                last_name="Doe",
            )

        users.create.assert_not_awaited()

    async def test_weak_password_lists_violations(self, service: AuthService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.register(
                email="jane@example.com",
                password="abc",
                confirm_password="abc",
                first_name="Jane",
                last_name="Doe",
            )

        assert len(exc_info.value.context["errors"]) == 4

    async def test_existing_email(
        self,
        service: AuthService,
        users: MockType,
        make_user: Callable[..., User],
    ) -> None:
        users.get_by_email.return_value = make_user()

        with pytest.raises(ConflictError, match="already exists"):
            await service.register(
                email="jane@example.com",
                password=STRONG_PASSWORD,
                confirm_password=STRONG_PASSWORD,
                first_name="Jane",
                last_name="Doe",
            )

    async def test_unique_violation_becomes_conflict(
        self, service: AuthService, users: MockType, roles: MockType
    ) -> None:
        users.get_by_email.return_value = None
        roles.get_or_create.return_value = Role(id=1, name="User")
        users.create.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

        with pytest.raises(ConflictError):
            await service.register(
                email="jane@example.com",
                password=STRONG_PASSWORD,
                confirm_password=STRONG_PASSWORD,
                first_name="Jane",
                last_name="Doe",
            )


@pytest.mark.unit
class TestLogin:
    async def test_success_records_login_time(
        self,
        service: AuthService,
        users: MockType,
        refresh_tokens: MockType,
        make_user: Callable[..., User],
    ) -> None:
        user = make_user(password_hash=f"hashed:{STRONG_PASSWORD}")
        users.get_by_email.return_value = user

        result = await service.login(email="jane@example.com", password=STRONG_PASSWORD)

        assert result.user is user
        assert user.last_login_at == NOW
        refresh_tokens.create.assert_awaited_once()

    @pytest.mark.parametrize(
        "user_overrides",
        [None, {"is_active": False}, {"password_hash": "hashed:other"}],
        ids=["unknown-email", "inactive", "wrong-password"],
    )
    async def test_rejections_share_one_message(
        self,
        service: AuthService,
        users: MockType,
        refresh_tokens: MockType,
        make_user: Callable[..., User],
        user_overrides: dict[str, Any] | None,
    ) -> None:
        users.get_by_email.return_value = (
            None
            if user_overrides is None
            else make_user(
                **{"password_hash": f"hashed:{STRONG_PASSWORD}", **user_overrides}
            )
        )

        with pytest.raises(UnauthorizedError, match="Invalid email or password"):
            await service.login(email="jane@example.com", password=STRONG_PASSWORD)

        refresh_tokens.create.assert_not_awaited()


@pytest.mark.unit
class TestRefresh:
    async def test_rotates_refresh_token(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        users: MockType,
        refresh_tokens: MockType,
        make_user: Callable[..., User],
    ) -> None:
        user = make_user()
        # Expired access tokens are still accepted for refresh
        access = token_service.create_access_token(
            10, user.email, ["User"], now=datetime.now(UTC) - timedelta(days=2)
        )
        stored = _stored_token(token_service, "old-refresh")
        refresh_tokens.get_by_hash.return_value = stored
        users.get_by_id.return_value = user

        result = await service.refresh(
            access_token=access.token,
            refresh_token="old-refresh",
            ip_address="10.0.0.1",
        )

        assert result.refresh_token != "old-refresh"
        assert stored.is_revoked
        assert stored.revoked_by_ip == "10.0.0.1"
        assert stored.replaced_by_token_hash == token_service.hash_refresh_token(
            result.refresh_token
        )
        refresh_tokens.get_by_hash.assert_awaited_once_with(
            token_service.hash_refresh_token("old-refresh")
        )

    @pytest.mark.parametrize(
        "stored_overrides",
        [
            {"user_id": 99},
            {"revoked_at": datetime(2025, 1, 1, tzinfo=UTC)},
            {"expires_at": datetime(2020, 1, 1, tzinfo=UTC)},
        ],
        ids=["other-user", "revoked", "expired"],
    )
    async def test_rejects_unusable_refresh_token(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        refresh_tokens: MockType,
        stored_overrides: dict[str, Any],
    ) -> None:
        access = token_service.create_access_token(10, "jane@example.com", ["User"])
        refresh_tokens.get_by_hash.return_value = _stored_token(
            token_service, "old-refresh", **stored_overrides
        )

        with pytest.raises(UnauthorizedError, match="Invalid refresh token"):
            await service.refresh(
                access_token=access.token, refresh_token="old-refresh"
            )

        refresh_tokens.create.assert_not_awaited()

    async def test_unknown_refresh_token(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        refresh_tokens: MockType,
    ) -> None:
        access = token_service.create_access_token(10, "jane@example.com", ["User"])
        refresh_tokens.get_by_hash.return_value = None

        with pytest.raises(UnauthorizedError):
            await service.refresh(access_token=access.token, refresh_token="nope")

    async def test_forged_access_token(
        self, service: AuthService, refresh_tokens: MockType
    ) -> None:
        forged = JwtTokenService(JwtConfig(secret_key="x" * 40)).create_access_token(
            10, "jane@example.com", ["User"]
        )

        with pytest.raises(UnauthorizedError):
            await service.refresh(
                access_token=forged.token, refresh_token="old-refresh"
            )

        refresh_tokens.get_by_hash.assert_not_awaited()

    async def test_inactive_user(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        users: MockType,
        refresh_tokens: MockType,
        make_user: Callable[..., User],
    ) -> None:
        access = token_service.create_access_token(10, "jane@example.com", ["User"])
        refresh_tokens.get_by_hash.return_value = _stored_token(token_service, "t")
        users.get_by_id.return_value = make_user(is_active=False)

        with pytest.raises(UnauthorizedError):
            await service.refresh(access_token=access.token, refresh_token="t")


@pytest.mark.unit
class TestPasswordAndLogout:
    async def test_change_password_revokes_sessions(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        users: MockType,
        refresh_tokens: MockType,
        make_user: Callable[..., User],
    ) -> None:
        user = make_user(password_hash="hashed:OldPass1!")
        users.get_by_id.return_value = user
        tokens = [_stored_token(token_service, "a"), _stored_token(token_service, "b")]
        refresh_tokens.list_unrevoked_for_user.return_value = tokens

        await service.change_password(
            10,
            current_password="OldPass1!",
            new_password=STRONG_PASSWORD,
            confirm_new_password=STRONG_PASSWORD,
        )

        assert user.password_hash == f"hashed:{STRONG_PASSWORD}"
        assert all(token.is_revoked for token in tokens)

    async def test_change_password_wrong_current(
        self,
        service: AuthService,
        users: MockType,
        make_user: Callable[..., User],
    ) -> None:
        user = make_user(password_hash="hashed:OldPass1!")
        users.get_by_id.return_value = user

        with pytest.raises(ValidationError, match="Current password is incorrect"):
            await service.change_password(
                10,
                current_password="guess",
                new_password=STRONG_PASSWORD,
                confirm_new_password=STRONG_PASSWORD,
            )

        assert user.password_hash == "hashed:OldPass1!"

    async def test_change_password_missing_user(
        self, service: AuthService, users: MockType
    ) -> None:
        users.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.change_password(
                10,
                current_password="x",
                new_password=STRONG_PASSWORD,
                confirm_new_password=STRONG_PASSWORD,
            )

    async def test_logout_counts_revoked_tokens(
        self,
        service: AuthService,
        token_service: JwtTokenService,
        refresh_tokens: MockType,
        session: MockType,
    ) -> None:
        tokens = [_stored_token(token_service, str(i)) for i in range(3)]
        refresh_tokens.list_unrevoked_for_user.return_value = tokens

        revoked = await service.logout(10, ip_address="10.0.0.1")

        assert revoked == 3
        assert {token.revoked_by_ip for token in tokens} == {"10.0.0.1"}
        refresh_tokens.list_unrevoked_for_user.assert_awaited_once_with(10)
        session.flush.assert_awaited()
