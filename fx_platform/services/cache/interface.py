from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CacheInterface(ABC):
    """Key-value caching with per-entry TTL.

    A missing key and an expired key are indistinguishable: both read as
    ``None``. ``set`` always overwrites; values must be JSON-compatible so
    that every backend can store them.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None: ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float | None = None) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    @abstractmethod
    def flush(self) -> None: ...

    @abstractmethod
    def health_check(self) -> bool: ...
