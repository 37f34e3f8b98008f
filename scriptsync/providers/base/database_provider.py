from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence
from ...models import Clip, ScriptSegment, Match


class DatabaseProvider(ABC):
    """Abstract base class for the relational store used by the worker."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the store cannot be reached."""
        pass

    @abstractmethod
    async def create_all(self) -> None:
        """Create the schema (local and test databases only)."""
        pass

    # Clips

    @abstractmethod
    async def fetch_processing_clips(self, limit: int) -> List[Clip]:
        """Clips awaiting ingestion, oldest first."""
        pass

    @abstractmethod
    async def get_clip(self, clip_id: str) -> Optional[Clip]:
        pass

    @abstractmethod
    async def update_clip(self, clip_id: str, **fields: Any) -> None:
        pass

    @abstractmethod
    async def mark_clip_ready(
        self,
        clip_id: str,
        duration_seconds: float,
        frames_extracted: int,
        thumbnail_path: Optional[str],
        description: str,
        tags: List[str],
    ) -> None:
        pass

    @abstractmethod
    async def mark_clip_error(self, clip_id: str, error_message: str) -> None:
        pass

    @abstractmethod
    async def fetch_ready_clips(self, project_id: str) -> List[Clip]:
        """Ready clips of a project ordered by creation time, then id."""
        pass

    @abstractmethod
    async def get_clip_embedding(self, clip_id: str) -> Optional[List[float]]:
        pass

    @abstractmethod
    async def update_clip_embedding(self, clip_id: str, embedding: List[float]) -> None:
        pass

    # Usage counter

    @abstractmethod
    async def get_usage_seconds(self, user_id: str) -> Optional[float]:
        """Cumulative processed seconds, or None when the user has no counter row."""
        pass

    @abstractmethod
    async def add_usage_seconds(self, user_id: str, seconds: float) -> None:
        """Atomically increment the user's counter."""
        pass

    # Script segments

    @abstractmethod
    async def fetch_segments(self, project_id: str) -> List[ScriptSegment]:
        """Segments of a project ordered by position."""
        pass

    @abstractmethod
    async def replace_script_segments(
        self, project_id: str, user_id: str, paragraphs: Sequence[str]
    ) -> List[ScriptSegment]:
        pass

    @abstractmethod
    async def get_segment_embedding(self, segment_id: str) -> Optional[List[float]]:
        pass

    @abstractmethod
    async def update_segment_embedding(self, segment_id: str, embedding: List[float]) -> None:
        pass

    # Matches

    @abstractmethod
    async def replace_matches(self, segment_ids: Sequence[str], matches: Sequence[Match]) -> None:
        """Delete every match of ``segment_ids`` and insert ``matches`` in one transaction."""
        pass

    @abstractmethod
    async def fetch_matches(self, segment_ids: Sequence[str]) -> List[Match]:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
