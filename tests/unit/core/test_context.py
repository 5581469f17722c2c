"""Unit tests for request context storage and id generation."""

import asyncio
import uuid

import pytest

from src.core.context import (
    RequestContext,
    generate_correlation_id,
    generate_request_id,
)


@pytest.mark.unit
class TestRequestContext:
    def test_defaults_are_none(self) -> None:
        assert RequestContext.get_correlation_id() is None
        assert RequestContext.get_user_id() is None

    def test_set_and_clear(self) -> None:
        RequestContext.set_correlation_id("abc")
        RequestContext.set_user_id(7)

        assert RequestContext.get_correlation_id() == "abc"
        assert RequestContext.get_user_id() == 7

        RequestContext.clear()

        assert RequestContext.get_correlation_id() is None
        assert RequestContext.get_user_id() is None

    async def test_tasks_do_not_share_values(self) -> None:
        """Each task sees only the ids it set itself."""

        async def worker(user_id: int) -> int | None:
            RequestContext.set_user_id(user_id)
            await asyncio.sleep(0)
            return RequestContext.get_user_id()

        results = await asyncio.gather(*(worker(i) for i in range(5)))

        assert results == [0, 1, 2, 3, 4]


@pytest.mark.unit
class TestIdGeneration:
    def test_correlation_id_is_uuid(self) -> None:
        assert uuid.UUID(generate_correlation_id()).version == 4

    def test_request_id_format(self) -> None:
        request_id = generate_request_id()

        assert request_id.startswith("req-")
        assert uuid.UUID(request_id.removeprefix("req-"))
        assert generate_request_id() != request_id
