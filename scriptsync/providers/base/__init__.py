from .embedding_provider import EmbeddingProvider
from .vision_provider import VisionProvider
from .storage_provider import StorageProvider
from .database_provider import DatabaseProvider

__all__ = [
    'EmbeddingProvider',
    'VisionProvider',
    'StorageProvider',
    'DatabaseProvider',
]
