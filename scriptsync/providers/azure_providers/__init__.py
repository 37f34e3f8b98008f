from .embedding_provider import AzureEmbeddingProvider
from .vision_provider import AzureVisionProvider
from .storage_provider import AzureStorageProvider

__all__ = [
    "AzureEmbeddingProvider",
    "AzureVisionProvider",
    "AzureStorageProvider",
]
