"""File-based blob storage adapter."""

import logging
import os
import re
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileBlobStore:
    """
    File-based blob storage.

    Implements BlobStore protocol. Each key is one file in the store directory.
    Writes go to a temp file that replaces the target, so a save either lands
    completely or not at all.
    """

    def __init__(self, store_dir: Path | str):
        self.store_dir = Path(store_dir).expanduser()
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a key."""
        if not _SAFE_KEY.match(key) or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.store_dir / key

    def get(self, key: str) -> bytes | None:
        """Read the value for a key. Returns None if not stored."""
        path = self._path_for_key(key)
        if not path.exists():
            return None
        logger.debug(f"Loading {key} from {path}")
        return path.read_bytes()

    def put(self, key: str, data: bytes) -> None:
        """Store a value, replacing any previous one in a single step."""
        path = self._path_for_key(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.store_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Saved {len(data)} bytes to {path}")

    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        self._path_for_key(key).unlink(missing_ok=True)

    def exists(self, key: str) -> bool:
        return self._path_for_key(key).exists()
