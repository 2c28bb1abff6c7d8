"""Adapters - I/O implementations of ports."""

from .file_store import FileBlobStore
from .openai_chat import OpenAIChatService

__all__ = [
    "FileBlobStore",
    "OpenAIChatService",
]
