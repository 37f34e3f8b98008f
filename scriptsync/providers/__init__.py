"""Provider system for the ScriptSync worker."""

from .base import (
    EmbeddingProvider,
    VisionProvider,
    StorageProvider,
    DatabaseProvider,
)
from .factory import ProviderFactory
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

__all__ = [
    # Base classes
    'EmbeddingProvider',
    'VisionProvider',
    'StorageProvider',
    'DatabaseProvider',
    # Factory
    'ProviderFactory',
    # Azure providers
    'AzureEmbeddingProvider',
    'AzureVisionProvider',
    'AzureStorageProvider',
    # OpenAI providers
    'OpenAIEmbeddingProvider',
    'OpenAIVisionProvider',
    # Custom providers
    'LocalStorageProvider',
    'SQLDatabaseProvider',
]
