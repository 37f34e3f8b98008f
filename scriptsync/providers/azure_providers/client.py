from typing import Any, Dict
from azure.identity.aio import get_bearer_token_provider
from openai import AsyncAzureOpenAI
from scriptsync.providers.credentials import AzureCredentials, COGNITIVE_SERVICES_SCOPE
from scriptsync.utils.error_handler import ConfigurationException


def create_azure_openai_client(config: Dict[str, Any], default_max_retries: int = 2):
    """
    Build an AsyncAzureOpenAI client from a provider config dict.

    Returns:
        (client, credential) - credential is None when an API key is used.
    """
    endpoint = config.get("endpoint")
    api_version = config.get("api_version", "2024-08-01-preview")
    timeout = config.get("timeout", 200)
    max_retries = config.get("max_retries", default_max_retries)

    if not endpoint:
        raise ConfigurationException("Azure OpenAI endpoint is required")

    if config.get("use_managed_identity"):
        credential = AzureCredentials.get_async_credentials()
        token_provider = get_bearer_token_provider(credential, COGNITIVE_SERVICES_SCOPE)
        client = AsyncAzureOpenAI(
            api_version=api_version,
            azure_endpoint=endpoint,
            azure_ad_token_provider=token_provider,
            max_retries=max_retries,
            timeout=timeout
        )
        return client, credential

    api_key = config.get("api_key")
    if not api_key:
        raise ConfigurationException("Azure OpenAI API key is required when managed identity is disabled")

    client = AsyncAzureOpenAI(
        api_version=api_version,
        azure_endpoint=endpoint,
        api_key=api_key,
        max_retries=max_retries,
        timeout=timeout
    )
    return client, None
