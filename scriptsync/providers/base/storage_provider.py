from abc import ABC, abstractmethod
from typing import Optional

class StorageProvider(ABC):
    """Abstract base class for object storage providers.

    ``folder_name`` is the bucket/container; ``file_name`` is the
    hierarchical path inside it.
    """

    @abstractmethod
    async def load_file_to_memory(self, folder: str, file_name: str) -> bytes:
        """Load a file's content into memory as bytes."""
        pass

    @abstractmethod
    async def download_to_file(self, file_name: str, download_path: str, **kwargs) -> str:
        """Download a file to a local file path."""
        pass

    @abstractmethod
    async def save_file(self, file_name: str, src_file_path: str, content_type: Optional[str] = None, **kwargs) -> str:
        """Save a local file to storage and return its stored path."""
        pass

    @abstractmethod
    async def save_bytes(self, file_name: str, data: bytes, content_type: Optional[str] = None, **kwargs) -> str:
        """Save raw bytes to storage and return its stored path."""
        pass

    @abstractmethod
    async def close(self):
        """Close the underlying client and cleanup."""
        pass
