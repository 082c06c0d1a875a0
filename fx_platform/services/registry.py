"""Maps (interface flag, implementation name) to concrete class paths.

String paths keep imports lazy: ``redis`` and ``prometheus_client`` are only
imported when their implementation is selected.
"""

import importlib
from typing import Any

REGISTRY: dict[str, dict[str, str]] = {
    "cache": {
        "memory": "fx_platform.services.cache.memory_cache.MemoryCache",
        "redis": "fx_platform.services.cache.redis_cache.RedisCache",
    },
    "fs": {
        "memory": "fx_platform.services.filesystem.memory_filesystem.MemoryFileSystem",
        "local": "fx_platform.services.filesystem.local_filesystem.LocalFileSystem",
    },
    "metrics": {
        "noop": "fx_platform.services.metrics.noop_metrics.NoopMetrics",
        "memory": "fx_platform.services.metrics.memory_metrics.MemoryMetrics",
        "prometheus": "fx_platform.services.metrics.prometheus_metrics.PrometheusMetrics",
    },
    "secrets": {
        "env": "fx_platform.services.secrets.env_secrets.EnvSecrets",
    },
}

# flag name -> interface ABC used as the DI container key
INTERFACE_TYPES: dict[str, str] = {
    "cache": "fx_platform.services.cache.interface.CacheInterface",
    "fs": "fx_platform.services.filesystem.interface.FileSystemInterface",
    "metrics": "fx_platform.services.metrics.interface.MetricsInterface",
    "secrets": "fx_platform.services.secrets.interface.SecretsInterface",
}


def resolve_class(dotted_path: str) -> type[Any]:
    """Import and return a class from a dotted module.ClassName path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def resolve_implementation(flag_name: str, impl_name: str) -> type[Any]:
    impls = REGISTRY.get(flag_name)
    if impls is None:
        raise ValueError(f"Unknown interface flag: --{flag_name}")
    dotted = impls.get(impl_name)
    if dotted is None:
        available = ", ".join(impls.keys())
        raise ValueError(
            f"Unknown implementation '{impl_name}' for --{flag_name} "
            f"(available: {available})"
        )
    return resolve_class(dotted)


def resolve_interface_type(flag_name: str) -> type[Any]:
    dotted = INTERFACE_TYPES.get(flag_name)
    if dotted is None:
        raise ValueError(f"Unknown interface flag: --{flag_name}")
    return resolve_class(dotted)
