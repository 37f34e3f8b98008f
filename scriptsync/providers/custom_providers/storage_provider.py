import aiofiles
from pathlib import Path
from loguru import logger
from typing import Dict, Any, Optional
from scriptsync.exceptions import ProviderException, ResourceNotFoundException
from scriptsync.providers.base import StorageProvider
from scriptsync.utils.error_handler import handle_exceptions, convert_exceptions

CHUNK_SIZE = 1024 * 1024


class LocalStorageProvider(StorageProvider):
    """Local filesystem-based storage provider. Buckets map to sub-directories."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Local Storage Provider.

        Args:
            config: {
                        "base_path": str -> Root directory for local storage (default: ./local_storage)
                    }
        """
        self.config = config
        self.base_path = Path(self.config.get("base_path") or "./local_storage").resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalStorageProvider initialized at {self.base_path}")

    def _get_file_path(self, folder: str, file_name: str) -> Path:
        """Return full path to file, creating parent directories if needed."""
        file_path = (self.base_path / folder / file_name).resolve()
        if self.base_path not in file_path.parents:
            raise ProviderException(f"Path escapes storage root: {folder}/{file_name}")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        return file_path

    @handle_exceptions(retries=3, exceptions=(ProviderException,))
    @convert_exceptions({OSError: ProviderException})
    async def save_file(self, file_name: str, src_file_path: str, content_type: Optional[str] = None, **kwargs) -> str:
        """Copy a local file into the local storage directory. Returns the stored path."""
        folder_name = kwargs.pop("folder_name")
        dest_path = self._get_file_path(folder=folder_name, file_name=file_name)
        async with aiofiles.open(src_file_path, "rb") as src, aiofiles.open(dest_path, "wb") as dst:
            while chunk := await src.read(CHUNK_SIZE):
                await dst.write(chunk)
        logger.debug(f"File stored at {dest_path}")
        return file_name

    @handle_exceptions(retries=3, exceptions=(ProviderException,))
    @convert_exceptions({OSError: ProviderException})
    async def save_bytes(self, file_name: str, data: bytes, content_type: Optional[str] = None, **kwargs) -> str:
        folder_name = kwargs.pop("folder_name")
        dest_path = self._get_file_path(folder=folder_name, file_name=file_name)
        async with aiofiles.open(dest_path, "wb") as f:
            await f.write(data)
        logger.debug(f"{len(data)} bytes stored at {dest_path}")
        return file_name

    @convert_exceptions({OSError: ProviderException})
    async def download_to_file(self, file_name: str, download_path: str, **kwargs) -> str:
        """Copy file from local storage to a specified path."""
        folder_name = kwargs.pop("folder_name")
        src_path = self._get_file_path(folder=folder_name, file_name=file_name)
        if not src_path.exists():
            raise ResourceNotFoundException(f"File not found: {folder_name}/{file_name}")

        dst_path = Path(download_path)
        dst_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(src_path, "rb") as src, aiofiles.open(dst_path, "wb") as dst:
            while chunk := await src.read(CHUNK_SIZE):
                await dst.write(chunk)

        logger.info(f"Downloaded {src_path} to {dst_path}")
        return str(dst_path)

    @convert_exceptions({OSError: ProviderException})
    async def load_file_to_memory(self, folder: str, file_name: str) -> bytes:
        """Load a local file into memory as bytes."""
        file_path = self._get_file_path(folder=folder, file_name=file_name)
        if not file_path.exists():
            raise ResourceNotFoundException(f"File not found: {folder}/{file_name}")

        async with aiofiles.open(file_path, "rb") as f:
            data = await f.read()

        logger.info(f"Loaded file {file_name} ({len(data)} bytes) into memory")
        return data

    async def close(self):
        """No-op for local provider (for interface consistency)."""
        logger.debug("LocalStorageProvider closed (no-op).")
