import pytest

from fx_platform.services.registry import resolve_implementation, resolve_interface_type


def test_resolve_memory_cache():
    from fx_platform.services.cache.memory_cache import MemoryCache

    assert resolve_implementation("cache", "memory") is MemoryCache


def test_resolve_redis_cache():
    from fx_platform.services.cache.redis_cache import RedisCache

    assert resolve_implementation("cache", "redis") is RedisCache


def test_resolve_filesystems():
    from fx_platform.services.filesystem.local_filesystem import LocalFileSystem
    from fx_platform.services.filesystem.memory_filesystem import MemoryFileSystem

    assert resolve_implementation("fs", "memory") is MemoryFileSystem
    assert resolve_implementation("fs", "local") is LocalFileSystem


def test_resolve_metrics():
    from fx_platform.services.metrics.memory_metrics import MemoryMetrics
    from fx_platform.services.metrics.noop_metrics import NoopMetrics

    assert resolve_implementation("metrics", "noop") is NoopMetrics
    assert resolve_implementation("metrics", "memory") is MemoryMetrics


def test_resolve_env_secrets():
    from fx_platform.services.secrets.env_secrets import EnvSecrets

    assert resolve_implementation("secrets", "env") is EnvSecrets


def test_unknown_flag_raises():
    with pytest.raises(ValueError, match="Unknown interface flag"):
        resolve_implementation("db", "memory")


def test_unknown_impl_raises():
    with pytest.raises(ValueError, match="available: memory, redis"):
        resolve_implementation("cache", "memcached")


def test_resolve_interface_type():
    from fx_platform.services.cache.interface import CacheInterface

    assert resolve_interface_type("cache") is CacheInterface


def test_resolve_interface_type_unknown():
    with pytest.raises(ValueError):
        resolve_interface_type("mq")
