"""Key-value byte storage interface."""

from typing import Protocol


class BlobStore(Protocol):
    """Interface for an opaque key-value byte store."""

    def get(self, key: str) -> bytes | None:
        """Read the value for a key. Returns None if not stored."""
        ...

    def put(self, key: str, data: bytes) -> None:
        """Store a value, replacing any previous one in a single step."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        ...
