from typing import Any, Dict, Optional
from loguru import logger
from openai import AsyncOpenAI
from scriptsync.exceptions import AuthenticationException


def create_openai_client(config: Dict[str, Any], purpose: str, default_max_retries: int = 2) -> Optional[AsyncOpenAI]:
    """
    Build an AsyncOpenAI client, or return None (with a warning) when no key is configured.

    The worker still starts without a key; calls then fail with AuthenticationException.
    """
    api_key = config.get("api_key")
    if not api_key:
        logger.warning(f"OpenAI API key is not set; {purpose} will fail")
        return None

    return AsyncOpenAI(
        api_key=api_key,
        timeout=config.get("timeout", 200),
        max_retries=config.get("max_retries", default_max_retries)
    )


def require_client(client: Optional[AsyncOpenAI]) -> AsyncOpenAI:
    if client is None:
        raise AuthenticationException("OpenAI API key is not configured", error_code="MISSING_API_KEY")
    return client
