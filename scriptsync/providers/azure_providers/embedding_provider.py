from scriptsync.providers.base import EmbeddingProvider
from typing import Dict, Any, List
from loguru import logger
from openai import OpenAIError
from scriptsync.utils.error_handler import ProviderException, ConfigurationException
from scriptsync.utils.error_handler import handle_exceptions, convert_exceptions, is_fatal_error
from scriptsync.providers.openai_providers.embedding_provider import check_dimensions
from .client import create_azure_openai_client


class AzureEmbeddingProvider(EmbeddingProvider):
    """Azure OpenAI embedding provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.dimensions = self.config.get("dimensions", 1536)
        self.client, self.credential = create_azure_openai_client(self.config)

    def _deployment_name(self) -> str:
        deployment_name = self.config.get("deployment_name")
        if not deployment_name:
            raise ConfigurationException(
                "Azure OpenAI embedding deployment name is required. "
                "Set EMBEDDING_DEPLOYMENT_NAME environment variable."
            )
        return deployment_name

    @handle_exceptions(retries=3, exceptions=(Exception,), non_retryable=is_fatal_error)
    @convert_exceptions({OpenAIError: ProviderException})
    async def embedding(self, text: str, **kwargs) -> List[float]:
        """Generate embedding using Azure OpenAI."""
        response = await self.client.embeddings.create(
            model=self._deployment_name(),
            input=text,
            **kwargs
        )

        vector = response.data[0].embedding
        check_dimensions([vector], self.dimensions)
        return vector

    @handle_exceptions(retries=3, exceptions=(Exception,), non_retryable=is_fatal_error)
    @convert_exceptions({OpenAIError: ProviderException})
    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        """Generate embeddings for multiple texts using Azure OpenAI."""
        response = await self.client.embeddings.create(
            model=self._deployment_name(),
            input=texts,
            **kwargs
        )

        vectors = [item.embedding for item in sorted(response.data, key=lambda d: d.index)]
        check_dimensions(vectors, self.dimensions)
        return vectors

    async def close(self):
        logger.info("Closing Azure OpenAI embedding client")
        await self.client.close()
        if self.credential:
            await self.credential.close()
