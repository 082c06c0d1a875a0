from abc import ABC, abstractmethod


class FileSystemInterface(ABC):
    """Byte-level file access for rate data files."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Read file contents. Raises FileNotFoundError if missing."""
        ...

    @abstractmethod
    def write(self, path: str, data: bytes) -> None: ...

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def health_check(self) -> bool: ...
