from scriptsync.providers.base import VisionProvider
from scriptsync.providers.openai_providers.vision_provider import build_frame_messages, read_completion
from scriptsync.utils.error_handler import convert_exceptions
from scriptsync.utils.error_handler import ProviderException, ConfigurationException
from openai import OpenAIError
from loguru import logger
from typing import Dict, Any, List
from .client import create_azure_openai_client


class AzureVisionProvider(VisionProvider):
    """Azure OpenAI vision provider (GPT-4o class deployments)."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client, self.credential = create_azure_openai_client(self.config, default_max_retries=0)

    @convert_exceptions({OpenAIError: ProviderException})
    async def analyze_frames(self, frames: List[bytes], prompt: str, **kwargs) -> Dict[str, Any]:
        """Analyze an ordered frame sequence using an Azure OpenAI deployment."""
        deployment_name = self.config.get("deployment_name") or self.config.get("model_name")
        if not deployment_name:
            raise ConfigurationException("Azure OpenAI vision deployment name is required")

        logger.debug(f"Sending {len(frames)} frames to deployment {deployment_name}")
        response = await self.client.chat.completions.create(
            model=deployment_name,
            messages=build_frame_messages(frames, prompt),
            max_tokens=kwargs.get("max_tokens", self.config.get("max_tokens", 1024)),
            temperature=kwargs.get("temperature", self.config.get("temperature", 0.0)),
        )
        return read_completion(response)

    async def close(self):
        logger.info("Closing Azure OpenAI vision client")
        await self.client.close()
        if self.credential:
            await self.credential.close()
