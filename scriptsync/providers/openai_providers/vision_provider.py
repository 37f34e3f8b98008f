import base64
from scriptsync.providers.base import VisionProvider
from typing import Dict, Any, List
from loguru import logger
from scriptsync.utils.error_handler import convert_exceptions
from scriptsync.utils.error_handler import ProviderException
from openai import OpenAIError
from .client import create_openai_client, require_client


def build_frame_messages(frames: List[bytes], prompt: str) -> List[Dict[str, Any]]:
    """One user turn: every frame as a base64 JPEG in order, then the instruction."""
    content: List[Dict[str, Any]] = [
        {
            "type": "image_url",
            "image_url": {"url": f"data:image/jpeg;base64,{base64.b64encode(frame).decode('ascii')}"},
        }
        for frame in frames
    ]
    content.append({"type": "text", "text": prompt})
    return [{"role": "user", "content": content}]


def read_completion(response) -> Dict[str, Any]:
    """Pull the first choice's text out of a chat completion; empty text is a provider failure."""
    text = response.choices[0].message.content if response.choices else None
    if not text:
        raise ProviderException("Empty response from vision model")
    return {
        "analysis": text,
        "model": response.model,
        "usage": response.usage.model_dump() if response.usage else None,
    }


class OpenAIVisionProvider(VisionProvider):
    """OpenAI vision provider using multi-image chat completions.

    Each call is a single attempt; the caller owns the retry policy.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = create_openai_client(self.config, purpose="clip tagging", default_max_retries=0)

    @convert_exceptions({OpenAIError: ProviderException})
    async def analyze_frames(self, frames: List[bytes], prompt: str, **kwargs) -> Dict[str, Any]:
        """Analyze an ordered frame sequence using OpenAI vision."""
        model = self.config.get("model_name", "gpt-4o")
        logger.debug(f"Sending {len(frames)} frames to {model}")

        response = await require_client(self.client).chat.completions.create(
            model=model,
            messages=build_frame_messages(frames, prompt),
            max_tokens=kwargs.get("max_tokens", self.config.get("max_tokens", 1024)),
            temperature=kwargs.get("temperature", self.config.get("temperature", 0.0)),
        )
        return read_completion(response)

    async def close(self):
        if self.client:
            logger.info("Closing OpenAI vision client")
            await self.client.close()
