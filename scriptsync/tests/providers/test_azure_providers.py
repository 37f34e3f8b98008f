"""Tests for Azure provider configuration paths (no network)."""

from unittest.mock import AsyncMock

import pytest

from scriptsync.exceptions import ConfigurationException
from scriptsync.providers import AzureEmbeddingProvider, AzureStorageProvider, AzureVisionProvider

CONNECTION_STRING = (
    "DefaultEndpointsProtocol=https;AccountName=scriptsync;"
    "AccountKey=c2VjcmV0;EndpointSuffix=core.windows.net"
)


class TestAzureStorageProvider:
    """Tests for AzureStorageProvider client setup."""

    async def test_connection_string_client(self):
        provider = AzureStorageProvider({"connection_string": CONNECTION_STRING})
        try:
            provider._ensure_initialized()
            assert provider.service_client.account_name == "scriptsync"
            assert provider.credential is None
        finally:
            await provider.close()

    async def test_managed_identity_needs_account_url(self):
        provider = AzureStorageProvider({"use_managed_identity": True})
        with pytest.raises(ConfigurationException, match="account_url is required"):
            await provider.save_bytes("x.jpg", b"x", folder_name="frames")

    async def test_no_credentials_configured(self):
        provider = AzureStorageProvider({"use_managed_identity": False})
        with pytest.raises(ConfigurationException, match="connection_string"):
            await provider.save_bytes("x.jpg", b"x", folder_name="frames")


class TestAzureOpenAIProviders:
    """Tests for the Azure OpenAI vision and embedding providers."""

    def test_api_key_required_without_managed_identity(self):
        with pytest.raises(ConfigurationException, match="API key is required"):
            AzureVisionProvider({"endpoint": "https://example.openai.azure.com"})

    async def test_embedding_needs_deployment(self, sleep_mock):
        provider = AzureEmbeddingProvider({"endpoint": "https://example.openai.azure.com", "api_key": "k"})
        provider.client.embeddings.create = AsyncMock()

        with pytest.raises(ConfigurationException, match="deployment name is required"):
            await provider.embedding("hello")

        provider.client.embeddings.create.assert_not_awaited()
        sleep_mock.assert_not_awaited()
        await provider.close()
