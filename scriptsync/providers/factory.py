from typing import Dict, Optional, Type
from loguru import logger

from .base import (
    EmbeddingProvider,
    VisionProvider,
    StorageProvider,
    DatabaseProvider,
)
from .azure_providers import (
    AzureEmbeddingProvider,
    AzureVisionProvider,
    AzureStorageProvider,
)
from .openai_providers import (
    OpenAIEmbeddingProvider,
    OpenAIVisionProvider,
)
from .custom_providers import (
    LocalStorageProvider,
    SQLDatabaseProvider,
)
from ..utils.error_handler import ConfigurationException
from ..config.settings import ScriptSyncConfig


class ProviderFactory:
    """Factory class for creating provider instances."""

    _embedding_providers: Dict[str, Type[EmbeddingProvider]] = {
        'azure': AzureEmbeddingProvider,
        'openai': OpenAIEmbeddingProvider,
    }

    _vision_providers: Dict[str, Type[VisionProvider]] = {
        'azure': AzureVisionProvider,
        'openai': OpenAIVisionProvider,
    }

    _storage_providers: Dict[str, Type[StorageProvider]] = {
        'azure': AzureStorageProvider,
        'local': LocalStorageProvider,
    }

    _database_providers: Dict[str, Type[DatabaseProvider]] = {
        'sql': SQLDatabaseProvider,
    }

    @staticmethod
    def _lookup(kind: str, registry: Dict[str, type], provider_name: str) -> type:
        if provider_name not in registry:
            raise ConfigurationException(
                f"Unknown {kind} provider: {provider_name}. "
                f"Supported providers: {list(registry.keys())}"
            )
        return registry[provider_name]

    @classmethod
    def create_embedding_provider(
        cls, provider_name: Optional[str] = None, config: Optional[ScriptSyncConfig] = None
    ) -> EmbeddingProvider:
        """
        Create embedding provider instance.

        Args:
            provider_name: Name of the provider (optional, defaults to config)
            config: Aggregate configuration (optional, loaded from the environment)

        Returns:
            EmbeddingProvider instance

        Raises:
            ConfigurationException: If provider is not supported
        """
        config = config or ScriptSyncConfig()
        provider_name = provider_name or config.embedding.provider
        provider_class = cls._lookup("embedding", cls._embedding_providers, provider_name)
        logger.info(f"Creating embedding provider: {provider_name}")
        return provider_class(config.embedding.model_dump())

    @classmethod
    def create_vision_provider(
        cls, provider_name: Optional[str] = None, config: Optional[ScriptSyncConfig] = None
    ) -> VisionProvider:
        """Create vision provider instance."""
        config = config or ScriptSyncConfig()
        provider_name = provider_name or config.vision.provider
        provider_class = cls._lookup("vision", cls._vision_providers, provider_name)
        logger.info(f"Creating vision provider: {provider_name}")
        return provider_class(config.vision.model_dump())

    @classmethod
    def create_storage_provider(
        cls, provider_name: Optional[str] = None, config: Optional[ScriptSyncConfig] = None
    ) -> StorageProvider:
        """Create storage provider instance."""
        config = config or ScriptSyncConfig()
        provider_name = provider_name or config.storage.provider
        provider_class = cls._lookup("storage", cls._storage_providers, provider_name)
        logger.info(f"Creating storage provider: {provider_name}")
        return provider_class(config.storage.model_dump())

    @classmethod
    def create_database_provider(
        cls, provider_name: str = 'sql', config: Optional[ScriptSyncConfig] = None
    ) -> DatabaseProvider:
        """Create database provider instance."""
        config = config or ScriptSyncConfig()
        provider_class = cls._lookup("database", cls._database_providers, provider_name)
        logger.info(f"Creating database provider: {provider_name}")
        return provider_class(config.database.model_dump())

    @classmethod
    def get_supported_providers(cls) -> Dict[str, list]:
        """Get list of supported providers for each service type."""
        return {
            'embedding': list(cls._embedding_providers.keys()),
            'vision': list(cls._vision_providers.keys()),
            'storage': list(cls._storage_providers.keys()),
            'database': list(cls._database_providers.keys()),
        }

    @classmethod
    def register_embedding_provider(cls, name: str, provider_class: Type[EmbeddingProvider]):
        """Register a new embedding provider."""
        cls._embedding_providers[name] = provider_class
        logger.info(f"Registered embedding provider: {name}")

    @classmethod
    def register_vision_provider(cls, name: str, provider_class: Type[VisionProvider]):
        """Register a new vision provider."""
        cls._vision_providers[name] = provider_class
        logger.info(f"Registered vision provider: {name}")

    @classmethod
    def register_storage_provider(cls, name: str, provider_class: Type[StorageProvider]):
        """Register a new storage provider."""
        cls._storage_providers[name] = provider_class
        logger.info(f"Registered storage provider: {name}")

    @classmethod
    def register_database_provider(cls, name: str, provider_class: Type[DatabaseProvider]):
        """Register a new database provider."""
        cls._database_providers[name] = provider_class
        logger.info(f"Registered database provider: {name}")

