"""
Unit tests for the outbox event publishers.
"""

import json
from unittest.mock import AsyncMock

import pytest

from src.infrastructure.external import (
    LogEventPublisher,
    RedisEventPublisher,
    build_event_publisher,
)


class TestRedisEventPublisher:
    """Test cases for RedisEventPublisher."""

    @pytest.fixture
    def mock_redis(self):
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_publish_pushes_json_message(self, mock_redis):
        # Arrange
        publisher = RedisEventPublisher(mock_redis, channel="jobs:test")

        # Act
        await publisher.publish("job_completed", "42", {"job_id": 42})

        # Assert
        channel, raw = mock_redis.rpush.call_args.args
        message = json.loads(raw)
        assert channel == "jobs:test"
        assert message["event_type"] == "job_completed"
        assert message["aggregate_id"] == "42"
        assert message["payload"] == {"job_id": 42}
        assert "published_at" in message

    @pytest.mark.asyncio
    async def test_publish_error_propagates(self, mock_redis):
        mock_redis.rpush.side_effect = ConnectionError("redis down")
        publisher = RedisEventPublisher(mock_redis, channel="jobs:test")

        with pytest.raises(ConnectionError):
            await publisher.publish("job_created", "1", {})

    @pytest.mark.asyncio
    async def test_close(self, mock_redis):
        await RedisEventPublisher(mock_redis, channel="jobs:test").close()

        mock_redis.aclose.assert_called_once()


class TestLogEventPublisher:
    """Test cases for LogEventPublisher."""

    @pytest.mark.asyncio
    async def test_publish_and_close(self):
        publisher = LogEventPublisher()

        assert await publisher.publish("job_created", "1", {"job_id": 1}) is None
        assert await publisher.close() is None


class TestBuildEventPublisher:
    """Test cases for publisher selection."""

    def test_log_backend(self):
        assert isinstance(build_event_publisher("log"), LogEventPublisher)

    def test_redis_backend(self):
        # from_url connects lazily, so building does not need a server
        assert isinstance(build_event_publisher("redis"), RedisEventPublisher)
