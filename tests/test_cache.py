"""Unit tests for the Redis redirect cache and its client factory."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import redis
from freezegun import freeze_time
from redis.exceptions import ConnectionError as RedisConnectionError

from tinylink.core import config
from tinylink.models.url import URL
from tinylink.services.cache import cache_key, cache_target, cache_ttl_seconds, get_cached_target, invalidate_target
from tinylink.services.expiration import utcnow


@pytest.fixture
def fresh_redis_factory(monkeypatch):
    """Start every test with no connected client and no back-off pending."""
    monkeypatch.setattr(config, '_redis_client', None)
    monkeypatch.setattr(config, '_redis_retry_after', 0.0)
    return config.get_redis


def test_cache_key():
    assert cache_key('abc123') == 'url:abc123'


def test_ttl_defaults_for_permanent_links():
    mapping = URL(short_code='abc123', original_url='https://example.com', expires_at=None)
    assert cache_ttl_seconds(mapping) == config.settings.CACHE_TTL_SECONDS


@freeze_time('2026-01-01 12:00:00')
def test_ttl_follows_expiration():
    mapping = URL(short_code='abc123', original_url='https://example.com', expires_at=utcnow() + timedelta(seconds=90))
    assert cache_ttl_seconds(mapping) == 90


@freeze_time('2026-01-01 12:00:00')
def test_ttl_never_below_one_second():
    mapping = URL(short_code='abc123', original_url='https://example.com', expires_at=utcnow() - timedelta(seconds=90))
    assert cache_ttl_seconds(mapping) == 1


def test_operations_without_cache_are_noops():
    mapping = URL(short_code='abc123', original_url='https://example.com')
    assert get_cached_target(None, 'abc123') is None
    cache_target(None, mapping)
    invalidate_target(None, 'abc123')


def test_invalidate_swallows_redis_errors():
    cache = MagicMock(spec=redis.Redis)
    cache.delete.side_effect = RedisConnectionError('down')

    invalidate_target(cache, 'abc123')

    cache.delete.assert_called_once_with('url:abc123')


def test_get_redis_disabled_without_url(fresh_redis_factory, monkeypatch):
    monkeypatch.setattr(config.settings, 'REDIS_URL', '')
    assert fresh_redis_factory() is None


def test_get_redis_returns_client(fresh_redis_factory, monkeypatch):
    client = MagicMock(spec=redis.Redis)
    from_url = MagicMock(return_value=client)
    monkeypatch.setattr(config.settings, 'REDIS_URL', 'redis://cache:6379/0')
    monkeypatch.setattr(config.Redis, 'from_url', from_url)

    assert fresh_redis_factory() is client
    from_url.assert_called_once_with('redis://cache:6379/0', decode_responses=True)


def test_get_redis_gives_up_after_retries(fresh_redis_factory, monkeypatch):
    client = MagicMock(spec=redis.Redis)
    client.ping.side_effect = RedisConnectionError('connection refused')
    monkeypatch.setattr(config.settings, 'REDIS_URL', 'redis://cache:6379/0')
    monkeypatch.setattr(config.settings, 'REDIS_RETRY_ATTEMPTS', 2)
    monkeypatch.setattr(config.Redis, 'from_url', MagicMock(return_value=client))
    monkeypatch.setattr(config.time, 'sleep', lambda seconds: None)

    assert fresh_redis_factory() is None
    assert client.ping.call_count == 2


def test_get_redis_reuses_working_client(fresh_redis_factory, monkeypatch):
    client = MagicMock(spec=redis.Redis)
    from_url = MagicMock(return_value=client)
    monkeypatch.setattr(config.settings, 'REDIS_URL', 'redis://cache:6379/0')
    monkeypatch.setattr(config.Redis, 'from_url', from_url)

    assert fresh_redis_factory() is client
    assert fresh_redis_factory() is client
    from_url.assert_called_once()


def test_get_redis_reconnects_after_outage(fresh_redis_factory, monkeypatch):
    client = MagicMock(spec=redis.Redis)
    client.ping.side_effect = RedisConnectionError('connection refused')
    from_url = MagicMock(return_value=client)
    monkeypatch.setattr(config.settings, 'REDIS_URL', 'redis://cache:6379/0')
    monkeypatch.setattr(config.settings, 'REDIS_RETRY_ATTEMPTS', 1)
    monkeypatch.setattr(config.Redis, 'from_url', from_url)

    assert fresh_redis_factory() is None
    # Still inside the back-off window: no new connection attempt
    assert fresh_redis_factory() is None
    assert from_url.call_count == 1

    # Redis is back and the back-off window has passed
    client.ping.side_effect = None
    monkeypatch.setattr(config, '_redis_retry_after', 0.0)

    assert fresh_redis_factory() is client
    assert from_url.call_count == 2
