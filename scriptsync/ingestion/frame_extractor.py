import asyncio
import math
from pathlib import Path
from typing import List, Union

import ffmpeg
from loguru import logger

from ..exceptions import FrameExtractionException
from ..models import ExtractedFrames

FRAME_NAME_TEMPLATE = "frame_%04d.jpg"


class FrameExtractor:
    """
    Wraps the ffmpeg/ffprobe binaries: duration probe, fixed-cadence frame
    extraction and single-frame thumbnail capture.

    Args:
        frame_interval_seconds: Seconds of source video per extracted frame
        frame_count_slack: Extra frame indices scanned past the expected count
        thumbnail_offset_ratio: Thumbnail position as a fraction of the duration
        ffmpeg_cmd: ffmpeg executable
        ffprobe_cmd: ffprobe executable
    """

    def __init__(
        self,
        frame_interval_seconds: float = 2.0,
        frame_count_slack: int = 10,
        thumbnail_offset_ratio: float = 0.1,
        ffmpeg_cmd: str = "ffmpeg",
        ffprobe_cmd: str = "ffprobe",
    ):
        if frame_interval_seconds <= 0:
            raise ValueError("frame_interval_seconds must be positive")
        self.frame_interval_seconds = frame_interval_seconds
        self.frame_count_slack = frame_count_slack
        self.thumbnail_offset_ratio = thumbnail_offset_ratio
        self.ffmpeg_cmd = ffmpeg_cmd
        self.ffprobe_cmd = ffprobe_cmd

    async def probe_duration(self, video_path: Union[str, Path]) -> float:
        """Return the container duration in seconds."""
        try:
            probe = await asyncio.to_thread(ffmpeg.probe, str(video_path), cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            raise FrameExtractionException(
                f"ffprobe failed for {Path(video_path).name}: {stderr or e}"
            ) from e
        except FileNotFoundError as e:
            raise FrameExtractionException(f"ffprobe executable not found: {self.ffprobe_cmd}") from e

        raw = probe.get("format", {}).get("duration")
        try:
            duration = float(raw)
        except (TypeError, ValueError) as e:
            raise FrameExtractionException(f"Could not parse video duration: {raw!r}") from e

        if not math.isfinite(duration) or duration < 0:
            raise FrameExtractionException(f"Could not parse video duration: {raw!r}")

        logger.info(f"Video duration: {duration:.2f} seconds")
        return duration

    def expected_frame_count(self, duration: float) -> int:
        return math.ceil(duration / self.frame_interval_seconds)

    async def extract_frames(
        self, video_path: Union[str, Path], output_dir: Union[str, Path], duration: float
    ) -> ExtractedFrames:
        """
        Extract one frame every ``frame_interval_seconds`` into ``output_dir``.

        ffmpeg output is not trusted: the directory is scanned for
        frame_0001.jpg .. frame_{expected+slack}.jpg and only files that
        exist are returned, in index order.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        command = [
            self.ffmpeg_cmd, "-y",
            "-i", str(video_path),
            "-vf", f"fps=1/{self.frame_interval_seconds:g}",
            "-q:v", "2",
            str(output_dir / FRAME_NAME_TEMPLATE),
        ]
        await self._run(command, "Frame extraction")

        expected = self.expected_frame_count(duration)
        paths: List[Path] = []
        for index in range(1, expected + self.frame_count_slack + 1):
            candidate = output_dir / (FRAME_NAME_TEMPLATE % index)
            if candidate.is_file():
                paths.append(candidate)

        if len(paths) != expected:
            logger.warning(f"Expected {expected} frames, found {len(paths)} in {output_dir}")
        logger.info(f"Extracted {len(paths)} frames")
        return ExtractedFrames(paths=paths, expected_count=expected)

    async def extract_thumbnail(
        self, video_path: Union[str, Path], output_path: Union[str, Path], duration: float
    ) -> Path:
        """Grab a single frame at ``thumbnail_offset_ratio`` of the duration."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        offset = max(0.0, duration * self.thumbnail_offset_ratio)

        command = [
            self.ffmpeg_cmd, "-y",
            "-ss", f"{offset:.3f}",
            "-i", str(video_path),
            "-vframes", "1",
            "-q:v", "2",
            str(output_path),
        ]
        await self._run(command, "Thumbnail extraction")

        if not output_path.is_file():
            raise FrameExtractionException(f"Thumbnail was not created at {output_path}")
        return output_path

    async def _run(self, command: List[str], description: str) -> None:
        logger.info(f"Starting: {description}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise FrameExtractionException(f"{description} failed: {command[0]} not found") from e

        _, err = await process.communicate()
        stderr = err.decode(errors="replace").strip()
        logger.debug(f"--- {description} stderr ---\n{stderr}")
        if process.returncode != 0:
            tail = stderr[-500:] if stderr else ""
            raise FrameExtractionException(
                f"{description} failed with exit code {process.returncode}: {tail}",
                details={"command": command[0], "returncode": process.returncode},
            )
        logger.info(f"{description} completed successfully.")
