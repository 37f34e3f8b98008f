import tempfile
from pathlib import Path
from typing import Optional

from loguru import logger

from ..exceptions import DatabaseException, DurationCapExceededException
from ..models import Clip, ExtractedFrames, TaggingResult
from ..providers.base import DatabaseProvider, StorageProvider
from ..utils.error_handler import ErrorHandler
from .clip_tagger import ClipTagger
from .frame_extractor import FrameExtractor

JPEG_CONTENT_TYPE = "image/jpeg"
DEFAULT_DURATION_CAP_SECONDS = 5 * 60 * 60


def clip_prefix(clip: Clip) -> str:
    """Object-store prefix shared by every derived asset of a clip."""
    return f"{clip.user_id}/{clip.project_id}/{clip.id}"


class ClipPipeline:
    """
    Turns one ``processing`` clip into a ``ready`` (or ``error``) clip.

    download -> probe -> cap check -> frames -> thumbnail -> upload -> tag -> persist.
    Any failure marks the clip as ``error`` and is re-raised. The working
    directory is removed on every exit path.
    """

    def __init__(
        self,
        database: DatabaseProvider,
        storage: StorageProvider,
        extractor: FrameExtractor,
        tagger: ClipTagger,
        duration_cap_seconds: float = DEFAULT_DURATION_CAP_SECONDS,
        clips_bucket: str = "clips",
        frames_bucket: str = "frames",
        work_root: Optional[str] = None,
    ):
        self.database = database
        self.storage = storage
        self.extractor = extractor
        self.tagger = tagger
        self.duration_cap_seconds = duration_cap_seconds
        self.clips_bucket = clips_bucket
        self.frames_bucket = frames_bucket
        self.work_root = work_root

    async def __call__(self, clip: Clip) -> TaggingResult:
        return await self.process(clip)

    async def process(self, clip: Clip) -> TaggingResult:
        logger.info(f"Processing clip {clip.id} ({clip.filename})")

        with tempfile.TemporaryDirectory(prefix=f"scriptsync-{clip.id}-", dir=self.work_root) as work_dir:
            try:
                duration, result = await self._run_steps(clip, Path(work_dir))
            except Exception as e:
                message = ErrorHandler.summarize(e)
                logger.error(f"Clip {clip.id} failed: {message}")
                await self._record_error(clip, message)
                raise

        await self._record_usage(clip, duration)
        logger.info(f"Clip {clip.id} is ready")
        return result

    async def _run_steps(self, clip: Clip, work_dir: Path):
        suffix = Path(clip.filename).suffix or ".mp4"
        video_path = work_dir / f"source{suffix}"

        logger.info(f"Downloading {clip.storage_path}")
        await self.storage.download_to_file(
            file_name=clip.storage_path,
            download_path=str(video_path),
            folder_name=self.clips_bucket,
        )

        duration = await self.extractor.probe_duration(video_path)
        await self._check_duration_cap(clip, duration)

        frames = await self.extractor.extract_frames(video_path, work_dir / "frames", duration)
        thumbnail = await self.extractor.extract_thumbnail(video_path, work_dir / "thumbnail.jpg", duration)

        thumbnail_path = await self._upload_assets(clip, frames, thumbnail)

        result = await self.tagger.tag(frames.paths)

        await self.database.mark_clip_ready(
            clip.id,
            duration_seconds=duration,
            frames_extracted=frames.count,
            thumbnail_path=thumbnail_path,
            description=result.description,
            tags=result.tags,
        )
        return duration, result

    async def _check_duration_cap(self, clip: Clip, duration: float) -> None:
        """Soft check against the user's cumulative usage; unreadable usage allows the clip."""
        try:
            used = await self.database.get_usage_seconds(clip.user_id)
        except DatabaseException as e:
            logger.warning(f"Could not read usage for user {clip.user_id}, allowing clip: {e}")
            return

        if used is None:
            logger.warning(f"No usage counter for user {clip.user_id}, allowing clip")
            return

        if used + duration > self.duration_cap_seconds:
            hours = self.duration_cap_seconds / 3600
            raise DurationCapExceededException(
                f"Video would exceed {hours:g}-hour duration cap",
                error_code="DURATION_CAP_EXCEEDED",
                details={"used_seconds": used, "clip_seconds": duration, "cap_seconds": self.duration_cap_seconds},
            )

    async def _upload_assets(self, clip: Clip, frames: ExtractedFrames, thumbnail: Path) -> str:
        prefix = clip_prefix(clip)
        uploaded = 0
        for frame_path in frames.paths:
            if not frame_path.is_file():
                logger.warning(f"Frame {frame_path.name} disappeared before upload, skipping")
                continue
            await self.storage.save_file(
                file_name=f"{prefix}/frames/{frame_path.name}",
                src_file_path=str(frame_path),
                content_type=JPEG_CONTENT_TYPE,
                folder_name=self.frames_bucket,
            )
            uploaded += 1
        logger.info(f"Uploaded {uploaded} frames for clip {clip.id}")

        return await self.storage.save_file(
            file_name=f"{prefix}/thumbnail.jpg",
            src_file_path=str(thumbnail),
            content_type=JPEG_CONTENT_TYPE,
            folder_name=self.frames_bucket,
        )

    async def _record_error(self, clip: Clip, message: str) -> None:
        try:
            await self.database.mark_clip_error(clip.id, message)
        except Exception as e:
            # the original failure is re-raised by the caller
            logger.exception(f"Could not mark clip {clip.id} as error: {e}")

    async def _record_usage(self, clip: Clip, duration: float) -> None:
        try:
            await self.database.add_usage_seconds(clip.user_id, duration)
        except Exception as e:
            logger.warning(f"Failed to record {duration:.1f}s of usage for user {clip.user_id}: {e}")
