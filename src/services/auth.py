"""Registration, login, token refresh, password change and logout.

Every successful authentication issues a fresh access token and a new
refresh token. Refresh tokens are single use: exchanging one revokes it and
links it to its replacement.
"""

from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.domain import clock
from src.infrastructure.database.models import RefreshToken, User
from src.infrastructure.repositories import (
    RefreshTokenRepository,
    RoleRepository,
    UserRepository,
)
from src.infrastructure.security import (
    JwtTokenService,
    hash_password,
    password_policy_violations,
    verify_password,
)

DEFAULT_ROLE = "User"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_REFRESH_MESSAGE = "Invalid refresh token"
EMAIL_TAKEN_MESSAGE = "User with this email already exists"


@dataclass(frozen=True, slots=True)
class AuthResult:
    access_token: str
    access_token_expiry: datetime
    refresh_token: str
    refresh_token_expiry: datetime
    user: User


def _ensure_strong_password(password: str, confirmation: str) -> None:
    if password != confirmation:
        raise ValidationError("Passwords do not match")
    if violations := password_policy_violations(password):
        raise ValidationError(
            "Password does not meet requirements", context={"errors": violations}
        )


class AuthService:
    def __init__(self, session: AsyncSession, token_service: JwtTokenService) -> None:
        self.session = session
        self.tokens = token_service
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)
        self.refresh_tokens = RefreshTokenRepository(session)

    async def _issue_tokens(self, user: User, ip_address: str | None) -> AuthResult:
        access = self.tokens.create_access_token(user.id, user.email, user.role_names)
        refresh = self.tokens.create_refresh_token()
        await self.refresh_tokens.create(
            RefreshToken(
                user_id=user.id,
                token_hash=self.tokens.hash_refresh_token(refresh.token),
                expires_at=refresh.expires_at,
                created_by_ip=ip_address,
            )
        )
        return AuthResult(
            access_token=access.token,
            access_token_expiry=access.expires_at,
            refresh_token=refresh.token,
            refresh_token_expiry=refresh.expires_at,
            user=user,
        )

    async def register(
        self,
        *,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str,
        last_name: str,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Create a user with the default role and sign them in.

        Raises:
            ValidationError: If the passwords differ or the password is weak.
            ConflictError: If the email is already registered.
        """
        _ensure_strong_password(password, confirm_password)

        email = email.strip().lower()
        if await self.users.get_by_email(email) is not None:
            raise ConflictError(EMAIL_TAKEN_MESSAGE)

        role = await self.roles.get_or_create(DEFAULT_ROLE)
        try:
            user = await self.users.create(
                User(
                    email=email,
                    password_hash=hash_password(password),
                    first_name=first_name.strip(),
                    last_name=last_name.strip(),
                    is_active=True,
                    email_confirmed=False,
                    roles=[role],
                )
            )
        except IntegrityError as e:
            raise ConflictError(EMAIL_TAKEN_MESSAGE, cause=e) from e

        logger.info("User {} registered", user.id, user_id=user.id)
        return await self._issue_tokens(user, ip_address)

    async def login(
        self, *, email: str, password: str, ip_address: str | None = None
    ) -> AuthResult:
        """Authenticate with email and password.

        Unknown emails, inactive users and wrong passwords all produce the same
        error so callers cannot probe which accounts exist.

        Raises:
            UnauthorizedError: If the credentials are not accepted.
        """
        user = await self.users.get_by_email(email)
        if (
            user is None
            or not user.is_active
            or not verify_password(password, user.password_hash)
        ):
            logger.warning("Rejected login attempt", client_ip=ip_address)
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        user.last_login_at = clock.utc_now()
        logger.info("User {} logged in", user.id, user_id=user.id)
        return await self._issue_tokens(user, ip_address)

    async def refresh(
        self,
        *,
        access_token: str,
        refresh_token: str,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Exchange a (possibly expired) access token and a refresh token.

        The access token must still carry a valid signature, issuer and
        audience. The refresh token must be active and belong to the same
        user; it is revoked in favour of the newly issued one.

        Raises:
            UnauthorizedError: If either token is rejected or the user is
                gone or inactive.
        """
        claims = self.tokens.decode_access_token(access_token, verify_expiry=False)

        stored = await self.refresh_tokens.get_by_hash(
            self.tokens.hash_refresh_token(refresh_token)
        )
        if stored is None or stored.user_id != claims.user_id or not stored.is_active:
            raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

        user = await self.users.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

        result = await self._issue_tokens(user, ip_address)
        stored.revoke(
            ip_address=ip_address,
            replaced_by_token_hash=self.tokens.hash_refresh_token(result.refresh_token),
        )
        await self.session.flush()
        logger.info("Tokens refreshed for user {}", user.id, user_id=user.id)
        return result

    async def change_password(
        self,
        user_id: int,
        *,
        current_password: str,
        new_password: str,
        confirm_new_password: str,
    ) -> None:
        """Replace the user's password and sign out every other session.

        Raises:
            NotFoundError: If the user no longer exists.
            ValidationError: If the current password is wrong or the new one
                is rejected.
        """
        user = await self.users.get_by_id(user_id)
        if user is None or not user.is_active:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        _ensure_strong_password(new_password, confirm_new_password)

        user.password_hash = hash_password(new_password)
        revoked = await self._revoke_all(user_id, ip_address=None)
        logger.info(
            "Password changed for user {}", user_id, user_id=user_id, revoked=revoked
        )

    async def logout(self, user_id: int, ip_address: str | None = None) -> int:
        """Revoke every active refresh token of the user.

        Returns:
            int: Number of tokens revoked.
        """
        revoked = await self._revoke_all(user_id, ip_address)
        logger.info("User {} logged out", user_id, user_id=user_id, revoked=revoked)
        return revoked

    async def _revoke_all(self, user_id: int, ip_address: str | None) -> int:
        tokens = await self.refresh_tokens.list_unrevoked_for_user(user_id)
        for token in tokens:
            token.revoke(ip_address=ip_address)
        await self.session.flush()
        return len(tokens)
