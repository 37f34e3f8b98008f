from abc import ABC, abstractmethod
from typing import Dict, Any, List

class VisionProvider(ABC):
    """Abstract base class for vision-language providers."""

    @abstractmethod
    async def analyze_frames(self, frames: List[bytes], prompt: str, **kwargs) -> Dict[str, Any]:
        """
        Send an ordered list of JPEG frames plus an instruction to the model.

        Returns:
            Dict with "analysis" (raw model text), "model" and "usage".
        """
        pass

    async def close(self):
        """Close the underlying client."""
        pass
