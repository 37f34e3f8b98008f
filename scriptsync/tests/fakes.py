"""In-memory stand-ins for external models and the video tool."""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from scriptsync.ingestion.frame_extractor import FrameExtractor
from scriptsync.providers.base import EmbeddingProvider, VisionProvider

VALID_REPLY = '{"description": "A dog runs along a sunny beach.", "tags": ["Dog", " beach ", "sunny"]}'


class FakeVisionProvider(VisionProvider):
    """Replays scripted replies; an Exception entry is raised instead of returned."""

    def __init__(self, replies: Optional[Sequence[Union[str, Exception, None]]] = None):
        self.replies = list(replies) if replies is not None else [VALID_REPLY]
        self.calls: List[List[bytes]] = []

    async def analyze_frames(self, frames: List[bytes], prompt: str, **kwargs):
        self.calls.append(list(frames))
        reply = self.replies[min(len(self.calls), len(self.replies)) - 1]
        if isinstance(reply, Exception):
            raise reply
        return {"analysis": reply, "model": "fake-vision", "usage": None}


class FakeEmbeddingProvider(EmbeddingProvider):
    """Looks vectors up by exact text; unknown texts get a length-derived vector."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None):
        self.vectors = vectors or {}
        self.calls: List[str] = []

    async def embedding(self, text: str, **kwargs) -> List[float]:
        self.calls.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        return [float(len(text)), 1.0, 0.0]

    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        return [await self.embedding(t) for t in texts]


class FakeFrameExtractor(FrameExtractor):
    """
    FrameExtractor whose ffmpeg invocations write placeholder JPEGs.

    Args:
        duration: Value returned by the duration probe
        frames_to_write: Frames ffmpeg "produces" (defaults to the expected count)
        write_thumbnail: When False the thumbnail step produces nothing
    """

    def __init__(self, duration: float = 10.0, frames_to_write: Optional[int] = None,
                 write_thumbnail: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.duration = duration
        self.frames_to_write = frames_to_write
        self.write_thumbnail = write_thumbnail
        self.commands: List[List[str]] = []
        self.probed: List[Path] = []

    async def probe_duration(self, video_path) -> float:
        self.probed.append(Path(video_path))
        return self.duration

    async def _run(self, command: List[str], description: str) -> None:
        self.commands.append(command)
        target = Path(command[-1])
        if "%04d" in target.name:
            count = self.frames_to_write
            if count is None:
                count = self.expected_frame_count(self.duration)
            for index in range(1, count + 1):
                (target.parent / (target.name % index)).write_bytes(b"jpeg-%d" % index)
        elif self.write_thumbnail:
            target.write_bytes(b"thumbnail")

    @property
    def frame_commands(self) -> List[List[str]]:
        return [c for c in self.commands if "%04d" in c[-1]]
