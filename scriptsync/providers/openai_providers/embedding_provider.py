from scriptsync.providers.base import EmbeddingProvider
from typing import Dict, Any, List
from loguru import logger
from scriptsync.utils.error_handler import handle_exceptions, convert_exceptions, is_fatal_error
from scriptsync.utils.error_handler import ProviderException, ValidationException
from openai import OpenAIError
from .client import create_openai_client, require_client


def check_dimensions(vectors: List[List[float]], expected: int) -> None:
    """Raise ValidationException unless every vector has the configured length."""
    for vector in vectors:
        if len(vector) != expected:
            raise ValidationException(
                f"Embedding has {len(vector)} dimensions, expected {expected}",
                details={"received_dimensions": len(vector), "expected_dimensions": expected},
            )


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """OpenAI embedding provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.dimensions = self.config.get("dimensions", 1536)
        self.client = create_openai_client(self.config, purpose="embedding generation")

    @handle_exceptions(retries=3, exceptions=(Exception,), non_retryable=is_fatal_error)
    @convert_exceptions({OpenAIError: ProviderException})
    async def embedding(self, text: str, **kwargs) -> List[float]:
        """Generate embedding using OpenAI."""
        model = self.config.get("embedding_model", "text-embedding-3-small")

        response = await require_client(self.client).embeddings.create(
            model=model,
            input=text,
            encoding_format="float",
            **kwargs
        )

        vector = response.data[0].embedding
        check_dimensions([vector], self.dimensions)
        return vector

    @handle_exceptions(retries=3, exceptions=(Exception,), non_retryable=is_fatal_error)
    @convert_exceptions({OpenAIError: ProviderException})
    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        """Generate embeddings for multiple texts using OpenAI."""
        model = self.config.get("embedding_model", "text-embedding-3-small")

        response = await require_client(self.client).embeddings.create(
            model=model,
            input=texts,
            encoding_format="float",
            **kwargs
        )

        vectors = [item.embedding for item in sorted(response.data, key=lambda d: d.index)]
        check_dimensions(vectors, self.dimensions)
        return vectors

    async def close(self):
        """Close the embedding client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI embedding client")
            await self.client.close()
