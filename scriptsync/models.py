from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ClipStatus(str, Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class Clip(BaseModel):
    """An uploaded video asset and its derived metadata/state."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    filename: str
    storage_path: str
    thumbnail_path: Optional[str] = None
    duration_seconds: Optional[float] = None
    status: ClipStatus = ClipStatus.UPLOADING
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    frames_extracted: int = 0
    error_message: Optional[str] = None
    embedding: Optional[List[float]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def embedding_text(self) -> str:
        """Text sent to the embedding model: description followed by comma-joined tags."""
        tag_string = ", ".join(self.tags) if self.tags else ""
        return f"{self.description or ''} {tag_string}".strip()


class ScriptSegment(BaseModel):
    """One paragraph-level unit of a script, ordered by position within a project."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    content: str
    position: int
    embedding: Optional[List[float]] = None
    created_at: Optional[datetime] = None


class Match(BaseModel):
    """A ranked association between one segment and one clip."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    segment_id: str
    clip_id: str
    similarity_score: float
    rank: int = Field(..., ge=1)


class TaggingResult(BaseModel):
    """Validated output of the vision-language model for one clip."""

    description: str = Field(..., min_length=1, description="2-4 sentence description of the clip")
    tags: List[str] = Field(default_factory=list, description="Lowercase keyword tags")


class ExtractedFrames(BaseModel):
    """Frames actually present on disk after extraction, in temporal order."""

    paths: List[Path] = Field(default_factory=list)
    expected_count: int = 0

    @property
    def count(self) -> int:
        return len(self.paths)
