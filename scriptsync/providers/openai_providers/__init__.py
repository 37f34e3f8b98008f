from .embedding_provider import OpenAIEmbeddingProvider
from .vision_provider import OpenAIVisionProvider

__all__ = [
    'OpenAIEmbeddingProvider',
    'OpenAIVisionProvider',
]
