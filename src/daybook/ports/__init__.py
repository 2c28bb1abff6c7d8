"""Ports - interfaces/protocols for external dependencies."""

from .blob_store import BlobStore
from .llm_service import LLMService

__all__ = [
    "BlobStore",
    "LLMService",
]
