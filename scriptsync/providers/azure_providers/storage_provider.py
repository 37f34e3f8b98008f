import aiofiles
from pathlib import Path
from typing import Dict, Any, Optional
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient
from loguru import logger
from scriptsync.exceptions import ResourceNotFoundException
from scriptsync.providers.base import StorageProvider
from scriptsync.providers.credentials import AzureCredentials
from scriptsync.utils.error_handler import handle_exceptions, convert_exceptions, is_fatal_error
from scriptsync.utils.error_handler import ProviderException, ConfigurationException


class AzureStorageProvider(StorageProvider):
    """Azure Blob Storage provider implementation. Buckets map to containers."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Azure Storage Provider.

        Args:
            config: Configuration dictionary with:
                - connection_string: Storage connection string (takes precedence)
                - account_url: Azure Storage account URL
                - use_managed_identity: Whether to use managed identity (default: True)
        """
        self.config = config
        self.credential = None
        self.service_client = None

    def _initialize(self):
        """Create the credential and service client on first use."""
        connection_string = self.config.get("connection_string")
        if connection_string:
            self.service_client = BlobServiceClient.from_connection_string(connection_string)
            logger.info("Initialized Azure Blob Storage client from connection string")
            return

        if not self.config.get("use_managed_identity", True):
            raise ConfigurationException(
                "Azure Storage needs a connection_string when managed identity is disabled"
            )

        account_url = self.config.get("account_url")
        if not account_url:
            raise ConfigurationException("Azure Storage account_url is required")

        self.credential = AzureCredentials.get_async_credentials()
        self.service_client = BlobServiceClient(account_url=account_url, credential=self.credential)
        logger.info("Initialized Azure Blob Storage client with managed identity")

    def _ensure_initialized(self):
        """Ensure the client is initialized before operations."""
        if self.service_client is None:
            self._initialize()

    @convert_exceptions({AzureError: ProviderException})
    async def load_file_to_memory(self, folder: str, file_name: str) -> bytes:
        """Load a blob's content into memory as bytes."""
        self._ensure_initialized()

        logger.info(f"Loading file {file_name} from container {folder} into memory")
        async with self.service_client.get_blob_client(container=folder, blob=file_name) as client:
            try:
                stream = await client.download_blob()
            except ResourceNotFoundError as e:
                raise ResourceNotFoundException(f"File not found: {folder}/{file_name}") from e
            return await stream.readall()

    @convert_exceptions({AzureError: ProviderException})
    async def download_to_file(self, file_name: str, download_path: str, **kwargs) -> str:
        """Download a blob to a local file path."""
        self._ensure_initialized()
        folder_name = kwargs.pop("folder_name")

        logger.info(f"Downloading {folder_name}/{file_name} to {download_path}")
        Path(download_path).parent.mkdir(parents=True, exist_ok=True)

        async with self.service_client.get_blob_client(container=folder_name, blob=file_name) as client:
            try:
                stream = await client.download_blob()
            except ResourceNotFoundError as e:
                raise ResourceNotFoundException(f"File not found: {folder_name}/{file_name}") from e
            async with aiofiles.open(download_path, "wb") as f:
                async for chunk in stream.chunks():
                    await f.write(chunk)

        logger.info(f"Successfully downloaded file to {download_path}")
        return download_path

    @handle_exceptions(retries=3, exceptions=(ProviderException,), non_retryable=is_fatal_error)
    @convert_exceptions({AzureError: ProviderException, OSError: ProviderException})
    async def save_file(self, file_name: str, src_file_path: str, content_type: Optional[str] = None, **kwargs) -> str:
        """Upload a local file to blob storage. Returns the blob path."""
        async with aiofiles.open(src_file_path, "rb") as f:
            data = await f.read()
        return await self._upload(file_name, data, content_type, kwargs.pop("folder_name"))

    @handle_exceptions(retries=3, exceptions=(ProviderException,), non_retryable=is_fatal_error)
    @convert_exceptions({AzureError: ProviderException})
    async def save_bytes(self, file_name: str, data: bytes, content_type: Optional[str] = None, **kwargs) -> str:
        return await self._upload(file_name, data, content_type, kwargs.pop("folder_name"))

    async def _upload(self, file_name: str, data: bytes, content_type: Optional[str], folder_name: str) -> str:
        self._ensure_initialized()
        settings = ContentSettings(content_type=content_type) if content_type else None
        async with self.service_client.get_blob_client(container=folder_name, blob=file_name) as client:
            await client.upload_blob(data, overwrite=True, content_settings=settings)
        logger.debug(f"Uploaded {len(data)} bytes to {folder_name}/{file_name}")
        return file_name

    async def close(self):
        """Close the underlying service client and cleanup."""
        if self.service_client:
            logger.info("Closing Azure Blob Storage client")
            await self.service_client.close()
        if self.credential:
            await self.credential.close()
