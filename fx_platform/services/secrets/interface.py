from abc import ABC, abstractmethod


class SecretsInterface(ABC):
    """Provides access to secrets and configuration values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get a value by key. Returns None if not found."""
        ...

    @abstractmethod
    def get_or_default(self, key: str, default: str) -> str: ...

    @abstractmethod
    def require(self, key: str) -> str:
        """Get a value, raising KeyError if not found."""
        ...

    def get_float(self, key: str, default: float) -> float:
        """Numeric lookup; raises ValueError naming *key* when unparseable."""
        raw = self.get(key)
        if raw is None or raw == "":
            return default
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"{key} must be a number, got {raw!r}") from None
