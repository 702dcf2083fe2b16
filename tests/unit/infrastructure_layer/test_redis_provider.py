"""
Unit Tests for the Redis Cache Provider

Uses in-memory client doubles injected through the connection registry.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from cache_provider.core.exceptions import CacheConnectionError, CacheOperationError
from cache_provider.core.processing import CacheOptions
from cache_provider.infrastructure.cache.redis_provider import RedisCacheProvider
from tests.test_fixtures.cache_factory import CacheTestFactory, Widget
from tests.test_fixtures.redis_factory import glob_to_regex


@pytest.mark.unit
class TestRedisTarget:
    """Test target configuration and availability."""

    def test_blank_connection_string_is_unavailable(self, fake_redis_server, redis_registry):
        provider = CacheTestFactory.redis_provider(
            fake_redis_server, "app", connection_string="  ", registry=redis_registry
        )

        provider.add(Widget(id=1, name="a"), None, "id:1")

        assert provider.is_available is False
        assert fake_redis_server.commands == []

    def test_missing_prefix_is_unavailable(self, fake_redis_server, redis_registry):
        provider = CacheTestFactory.redis_provider(fake_redis_server, None, registry=redis_registry)
        assert provider.is_available is False

    def test_unreachable_server_is_unavailable(self, fake_redis_server, redis_provider):
        fake_redis_server.reachable = False

        redis_provider.add(Widget(id=1, name="a"), None, "id:1")

        assert redis_provider.is_available is False
        assert redis_provider.retrieve(Widget, "id:1") is None
        assert redis_provider.invalidate_by_type(Widget) == 0
        assert fake_redis_server.keys() == []

    @pytest.mark.asyncio
    async def test_unreachable_server_is_unavailable_async(self, fake_redis_server, redis_provider):
        fake_redis_server.reachable = False

        assert await redis_provider.is_available_async() is False
        assert await redis_provider.retrieve_async(Widget, "id:1") is None

    def test_selects_database_instance(self, fake_redis_server, redis_registry, redis_client_calls):
        provider = CacheTestFactory.redis_provider(
            fake_redis_server, "app", database_instance=10, registry=redis_registry
        )

        provider.add(7, None, "id:1")

        assert redis_client_calls == [("redis://localhost:6379", 10)]
        assert fake_redis_server.keys(10) == ["app.int.id:1", "app.int.id:1.MetaData"]
        assert fake_redis_server.keys(0) == []

    def test_default_database_instance_is_zero(self, redis_registry):
        provider = RedisCacheProvider(registry=redis_registry)
        provider.configure_target("redis://localhost:6379")
        assert provider.database_instance == 0

    def test_providers_share_connection_per_target(self, redis_registry):
        first = RedisCacheProvider(registry=redis_registry)
        second = RedisCacheProvider(registry=redis_registry)

        first.configure_target("redis://localhost:6379", 1)
        second.configure_target("redis://localhost:6379", 2)

        assert len(redis_registry) == 1


@pytest.mark.unit
class TestRedisStorage:
    """Test the redis command mapping."""

    def test_write_uses_millisecond_ttl(self, fake_redis_server, redis_provider):
        redis_provider.add(Widget(id=1, name="a"), timedelta(seconds=60), "id:1")

        assert fake_redis_server.ttls_ms == {
            "app.tenant-1.Widget.id:1": 60000,
            "app.tenant-1.Widget.id:1.MetaData": 60000,
        }

    def test_value_is_json_text(self, fake_redis_server, redis_provider):
        redis_provider.add(Widget(id=1, name="a"), None, "id:1")

        value, _ = fake_redis_server.data()["app.tenant-1.Widget.id:1"]

        assert value == '{"id":1,"name":"a","published":true}'

    def test_invalidation_scans_escaped_prefix(self, fake_redis_server, redis_provider):
        redis_provider.add(Widget(id=1, name="a"), None, "q[1]")
        redis_provider.add(Widget(id=2, name="b"), None, "q1")

        removed = redis_provider.invalidate("q[1]", value_type=Widget)

        assert removed == 2
        assert ("scan", ("app.tenant-1.Widget.q\\[1\\].*",)) in fake_redis_server.commands
        assert redis_provider.retrieve(Widget, "q1") == Widget(id=2, name="b")

    def test_invalidation_deletes_in_batches(self, fake_redis_server, redis_provider):
        for i in range(120):
            redis_provider.add(i, None, f"n:{i}")

        assert redis_provider.invalidate_by_type(int) == 240

        deletes = [args for command, args in fake_redis_server.commands if command == "delete"]
        assert deletes[0][0] == "app.tenant-1.int"
        assert [len(batch) for batch in deletes] == [100, 100, 41]

    @pytest.mark.asyncio
    async def test_async_invalidation_deletes_in_batches(self, fake_redis_server, redis_provider):
        for i in range(60):
            await redis_provider.add_async(i, None, f"n:{i}")

        assert await redis_provider.invalidate_by_type_async(int) == 120
        assert fake_redis_server.keys() == []

    def test_invalidation_with_no_matches(self, redis_provider):
        assert redis_provider.invalidate_by_type(Widget) == 0

    def test_invalidation_leaves_other_prefix_on_same_server(
        self, fake_redis_server, redis_registry, redis_provider
    ):
        other = CacheTestFactory.redis_provider(
            fake_redis_server, "myapp", "tenant-1", registry=redis_registry
        )
        other.add(Widget(id=2, name="other"), None, "id:1")
        redis_provider.add(Widget(id=1, name="mine"), None, "id:1")

        assert redis_provider.invalidate_by_type(Widget) == 2
        assert other.retrieve(Widget, "id:1") == Widget(id=2, name="other")


@pytest.mark.unit
class TestRedisErrors:
    """Test translation of redis failures."""

    def test_command_error_becomes_operation_error(self, fake_redis_server, redis_provider):
        fake_redis_server.error = ResponseError("WRONGTYPE")

        with pytest.raises(CacheOperationError) as exc_info:
            redis_provider.retrieve(Widget, "id:1")

        assert exc_info.value.details["operation"] == "get"
        assert exc_info.value.details["key"] == "app.tenant-1.Widget.id:1"
        assert isinstance(exc_info.value.__cause__, ResponseError)

    def test_connection_loss_becomes_connection_error(self, fake_redis_server, redis_provider):
        fake_redis_server.error = RedisConnectionError("Connection reset")

        with pytest.raises(CacheConnectionError):
            redis_provider.add(Widget(id=1, name="a"), None, "id:1")

    @pytest.mark.asyncio
    async def test_async_errors_are_translated(self, fake_redis_server, redis_provider):
        fake_redis_server.error = ResponseError("OOM")

        with pytest.raises(CacheOperationError):
            await redis_provider.invalidate_async("Widget")

    def test_cache_aside_falls_through_on_failure(self, fake_redis_server, redis_provider):
        fake_redis_server.error = RedisConnectionError("Connection reset")
        compute = MagicMock(return_value=Widget(id=1, name="fresh"))
        options = CacheOptions(function=compute, cache_condition=lambda widget: True)

        assert redis_provider.cache_processor(Widget, options).name == "fresh"
        assert redis_provider.cache_processor(Widget, options).name == "fresh"
        assert compute.call_count == 2

    @pytest.mark.asyncio
    async def test_async_cache_aside_falls_through_on_failure(self, fake_redis_server, redis_provider):
        fake_redis_server.error = ResponseError("READONLY")
        compute = AsyncMock(return_value=Widget(id=1, name="fresh"))

        result = await redis_provider.cache_processor_async(Widget, CacheOptions(async_function=compute))

        assert result.name == "fresh"
        compute.assert_awaited_once()


@pytest.mark.unit
def test_glob_double_matches_like_redis():
    assert glob_to_regex("app.Widget\\[1\\].*").fullmatch("app.Widget[1].MetaData")
    assert not glob_to_regex("app.Widget\\[1\\].*").fullmatch("app.Widget1.MetaData")
    assert not glob_to_regex("app.Widget.*").fullmatch("app.WidgetSummary.id:1")
