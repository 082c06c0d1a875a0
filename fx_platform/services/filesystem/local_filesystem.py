import os
import tempfile
from pathlib import Path

from fx_platform.services.filesystem.interface import FileSystemInterface
from fx_platform.services.secrets.interface import SecretsInterface


class LocalFileSystem(FileSystemInterface):
    """Files under ``FS_LOCAL_ROOT`` on local disk."""

    def __init__(self, secrets: SecretsInterface) -> None:
        self._root = Path(secrets.get_or_default("FS_LOCAL_ROOT", "data"))

    def _resolve(self, path: str) -> Path:
        if ".." in Path(path).parts:
            raise ValueError(f"Path traversal not allowed: {path}")
        return self._root / path

    def read(self, path: str) -> bytes:
        full = self._resolve(path)
        if not full.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return full.read_bytes()

    def write(self, path: str, data: bytes) -> None:
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        # temp file + rename so readers never see a partial rates file
        fd, tmp = tempfile.mkstemp(dir=full.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp, full)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def health_check(self) -> bool:
        return self._root.is_dir() and os.access(self._root, os.R_OK)
