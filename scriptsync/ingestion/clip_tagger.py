import json
import re
from pathlib import Path
from typing import List, Sequence

import aiofiles
from loguru import logger

from ..exceptions import ProviderException, TaggingException, ValidationException
from ..models import TaggingResult
from ..providers.base import VisionProvider
from ..utils.error_handler import handle_exceptions, is_auth_error
from .frame_sampler import MAX_FRAMES_PER_CALL, select_representative_frames
from .prompts import TAGGING_PROMPT

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def parse_tagging_response(text: str) -> TaggingResult:
    """
    Parse the model's reply into a TaggingResult.

    Markdown code fences around the JSON are tolerated. ``description`` must
    be a non-empty string. ``tags`` defaults to empty; entries are
    lower-cased and trimmed, and non-string or blank entries are dropped.

    Raises:
        ValidationException: If the reply is not a JSON object with a description
    """
    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip())).strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValidationException(
            f"Could not parse model response as JSON: {text[:300]}",
            details={"response_snippet": text[:300]},
        ) from e

    if not isinstance(parsed, dict):
        raise ValidationException(
            f"Model response is not a JSON object: {text[:300]}",
            details={"response_snippet": text[:300]},
        )

    description = parsed.get("description")
    description = description.strip() if isinstance(description, str) else ""
    if not description:
        raise ValidationException(
            "Model returned an empty description",
            details={"response_snippet": text[:300]},
        )

    raw_tags = parsed.get("tags")
    tags: List[str] = []
    if isinstance(raw_tags, list):
        tags = [t.lower().strip() for t in raw_tags if isinstance(t, str) and t.strip()]

    return TaggingResult(description=description, tags=tags)


class ClipTagger:
    """
    Describe and tag a clip from its extracted frames using a vision model.

    Authentication failures stop immediately; any other failure (network,
    rate limit, empty or unparseable output) is retried up to
    ``max_attempts`` times with delays of base, 2*base, 4*base, ...

    Args:
        vision_provider: Provider used for the multi-image request
        max_frames_per_call: Cap on frames per request
        max_attempts: Total attempts including the first
        base_delay_seconds: Delay before the second attempt
        prompt: Instruction sent after the frames
    """

    def __init__(
        self,
        vision_provider: VisionProvider,
        max_frames_per_call: int = MAX_FRAMES_PER_CALL,
        max_attempts: int = 3,
        base_delay_seconds: float = 2.0,
        prompt: str = TAGGING_PROMPT,
    ):
        self.vision_provider = vision_provider
        self.max_frames_per_call = max_frames_per_call
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.prompt = prompt

        self._request_with_retry = handle_exceptions(
            retries=max_attempts,
            exceptions=(Exception,),
            base_delay=base_delay_seconds,
            backoff_factor=2.0,
            max_delay=max(60.0, base_delay_seconds * 2 ** max(0, max_attempts - 1)),
            non_retryable=is_auth_error,
        )(self._request_once)

    async def __call__(self, frame_paths: Sequence[Path]) -> TaggingResult:
        return await self.tag(frame_paths)

    async def tag(self, frame_paths: Sequence[Path]) -> TaggingResult:
        selected = select_representative_frames(list(frame_paths), self.max_frames_per_call)
        if not selected:
            raise TaggingException("No frames available for tagging")

        frames = []
        for path in selected:
            async with aiofiles.open(path, "rb") as f:
                frames.append(await f.read())

        logger.info(f"Sending {len(frames)}/{len(frame_paths)} frames for tagging")
        return await self._request_with_retry(frames)

    async def _request_once(self, frames: List[bytes]) -> TaggingResult:
        response = await self.vision_provider.analyze_frames(frames, self.prompt)
        text = (response or {}).get("analysis")
        if not text:
            raise ProviderException("Empty response from vision model")

        result = parse_tagging_response(text)
        logger.info(f"Tagged successfully: \"{result.description[:80]}...\" tags: [{', '.join(result.tags)}]")
        return result
