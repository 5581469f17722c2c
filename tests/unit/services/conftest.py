"""Fixtures for service tests: a mocked session and repository side effects.

Services are exercised with their repositories replaced by ``AsyncMock``
objects, so no database is needed.
"""

import uuid
from collections.abc import Callable
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Bill, BillPayment


@pytest.fixture
def session(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=AsyncSession)


@pytest.fixture
def echo_created() -> Callable[[Any], Any]:
    """Side effect for mocked ``create``: assign an id like a flush would."""

    def side_effect(obj: Any) -> Any:  # noqa: ANN401
        if getattr(obj, "id", None) is None:
            obj.id = uuid.uuid4() if isinstance(obj, Bill | BillPayment) else 1
        return obj

    return side_effect


@pytest.fixture
def apply_update() -> Callable[[Any, dict[str, Any]], Any]:
    """Side effect for mocked ``update`` mirroring the repository semantics."""

    def side_effect(instance: Any, data: dict[str, Any]) -> Any:  # noqa: ANN401
        for key, value in data.items():
            if value is not None:
                setattr(instance, key, value)
        return instance

    return side_effect
