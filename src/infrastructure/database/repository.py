"""Generic async repository shared by the concrete repositories.

Repositories never commit. They add, flush and query within the session they
were given; the request's unit of work decides whether the changes persist.
"""

import uuid
from collections.abc import Mapping

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel, UUIDModel

type EntityId = int | uuid.UUID


class BaseRepository[T: BaseModel | UUIDModel]:
    """Common persistence operations for one model class.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class AccountRepository(BaseRepository[Account]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Account)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, entity_id: EntityId) -> T | None:
        """Retrieve a model instance by its primary key.

        Args:
            entity_id: The primary key of the instance to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        return await self.session.get(self.model_class, entity_id)

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Find the first instance whose columns equal the given values.

        Args:
            **kwargs: Column-value pairs to filter by.

        Returns:
            T | None: The first matching instance if found, None otherwise.

        Raises:
            AttributeError: If a keyword does not name a mapped attribute.
        """
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            stmt = stmt.where(getattr(self.model_class, field) == value)
        result = await self.session.execute(stmt.order_by(self.model_class.id).limit(1))
        return result.scalar_one_or_none()

    async def create(self, obj: T) -> T:
        """Persist a new instance and load server generated values.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created model instance with populated ID and timestamps.
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        logger.info("Created {} with ID: {}", self.model_class.__name__, obj.id)
        return obj

    async def update(self, instance: T, data: Mapping[str, object]) -> T:
        """Apply a partial update to an already loaded instance.

        Args:
            instance: Instance to modify.
            data: Attribute values to set; ``None`` values are skipped.

        Returns:
            T: The refreshed instance.
        """
        changed = [key for key, value in data.items() if value is not None]
        for key in changed:
            setattr(instance, key, data[key])

        await self.session.flush()
        await self.session.refresh(instance)
        logger.info(
            "Updated {} ID {} - fields: {}",
            self.model_class.__name__,
            instance.id,
            changed,
        )
        return instance
