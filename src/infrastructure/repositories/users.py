"""User, role and refresh token persistence."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import RefreshToken, Role, User
from src.infrastructure.database.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def create(self, obj: User) -> User:
        user = await super().create(obj)
        await self.session.refresh(user, attribute_names=["roles"])
        return user

    async def get_by_email(self, email: str) -> User | None:
        """Look a user up by email, ignoring case."""
        return await self.find_one_by(email=email.strip().lower())


class RoleRepository(BaseRepository[Role]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Role)

    async def get_or_create(self, name: str) -> Role:
        """Return the role called ``name``, creating it when missing."""
        role = await self.find_one_by(name=name)
        if role is None:
            role = await self.create(Role(name=name))
        return role


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, RefreshToken)

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        return await self.find_one_by(token_hash=token_hash)

    async def list_unrevoked_for_user(self, user_id: int) -> list[RefreshToken]:
        """Tokens of ``user_id`` that have not been revoked yet."""
        stmt = select(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.revoked_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
