from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from scriptsync.exceptions import DatabaseException, ResourceNotFoundException
from scriptsync.models import Clip, ClipStatus, Match, ScriptSegment
from scriptsync.providers.base import DatabaseProvider
from scriptsync.utils.error_handler import convert_exceptions
from .sql_models import Base, ClipRow, MatchRow, ProfileRow, ScriptSegmentRow

CLIP_UPDATABLE_FIELDS = {
    "thumbnail_path",
    "duration_seconds",
    "status",
    "description",
    "tags",
    "frames_extracted",
    "error_message",
    "embedding",
}


class SQLDatabaseProvider(DatabaseProvider):
    """SQLAlchemy asyncio implementation of the relational store."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize SQL Database Provider.

        Args:
            config: {
                        "url": str -> async SQLAlchemy URL (e.g. sqlite+aiosqlite:///./scriptsync.db)
                        "echo": bool -> log emitted SQL
                    }
        """
        self.config = config
        url = self.config.get("url")
        if not url:
            raise DatabaseException("Database url is required", error_code="CONFIG_ERROR")
        self.engine: AsyncEngine = create_async_engine(url, echo=self.config.get("echo", False))
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info(f"SQLDatabaseProvider initialized for {self.engine.url.render_as_string(hide_password=True)}")

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connectivity check passed")

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema created")

    # Clips

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def fetch_processing_clips(self, limit: int) -> List[Clip]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ClipRow)
                .where(ClipRow.status == ClipStatus.PROCESSING.value)
                .order_by(ClipRow.created_at.asc(), ClipRow.id.asc())
                .limit(limit)
            )
            return [Clip.model_validate(row) for row in result.scalars()]

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def get_clip(self, clip_id: str) -> Optional[Clip]:
        async with self.session_factory() as session:
            row = await session.get(ClipRow, clip_id)
            return Clip.model_validate(row) if row else None

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def update_clip(self, clip_id: str, **fields: Any) -> None:
        unknown = set(fields) - CLIP_UPDATABLE_FIELDS
        if unknown:
            raise DatabaseException(f"Cannot update clip fields: {sorted(unknown)}")

        values = {k: (v.value if isinstance(v, ClipStatus) else v) for k, v in fields.items()}
        values["updated_at"] = datetime.now(timezone.utc)

        async with self.session_factory.begin() as session:
            result = await session.execute(
                update(ClipRow).where(ClipRow.id == clip_id).values(**values)
            )
            if result.rowcount == 0:
                raise ResourceNotFoundException(f"Clip {clip_id} not found")

    async def mark_clip_ready(
        self,
        clip_id: str,
        duration_seconds: float,
        frames_extracted: int,
        thumbnail_path: Optional[str],
        description: str,
        tags: List[str],
    ) -> None:
        await self.update_clip(
            clip_id,
            status=ClipStatus.READY,
            duration_seconds=duration_seconds,
            frames_extracted=frames_extracted,
            thumbnail_path=thumbnail_path,
            description=description,
            tags=list(tags),
            error_message=None,
        )

    async def mark_clip_error(self, clip_id: str, error_message: str) -> None:
        await self.update_clip(clip_id, status=ClipStatus.ERROR, error_message=error_message)

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def fetch_ready_clips(self, project_id: str) -> List[Clip]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ClipRow)
                .where(ClipRow.project_id == project_id, ClipRow.status == ClipStatus.READY.value)
                .order_by(ClipRow.created_at.asc(), ClipRow.id.asc())
            )
            return [Clip.model_validate(row) for row in result.scalars()]

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def get_clip_embedding(self, clip_id: str) -> Optional[List[float]]:
        async with self.session_factory() as session:
            return await session.scalar(select(ClipRow.embedding).where(ClipRow.id == clip_id))

    async def update_clip_embedding(self, clip_id: str, embedding: List[float]) -> None:
        await self.update_clip(clip_id, embedding=list(embedding))

    # Usage counter

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def get_usage_seconds(self, user_id: str) -> Optional[float]:
        async with self.session_factory() as session:
            return await session.scalar(
                select(ProfileRow.total_video_seconds).where(ProfileRow.id == user_id)
            )

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def add_usage_seconds(self, user_id: str, seconds: float) -> None:
        async with self.session_factory.begin() as session:
            result = await session.execute(
                update(ProfileRow)
                .where(ProfileRow.id == user_id)
                .values(total_video_seconds=ProfileRow.total_video_seconds + seconds)
            )
            if result.rowcount == 0:
                logger.warning(f"No usage counter for user {user_id}; {seconds:.1f}s not recorded")

    # Script segments

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def fetch_segments(self, project_id: str) -> List[ScriptSegment]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ScriptSegmentRow)
                .where(ScriptSegmentRow.project_id == project_id)
                .order_by(ScriptSegmentRow.position.asc())
            )
            return [ScriptSegment.model_validate(row) for row in result.scalars()]

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def replace_script_segments(
        self, project_id: str, user_id: str, paragraphs: Sequence[str]
    ) -> List[ScriptSegment]:
        async with self.session_factory.begin() as session:
            await session.execute(
                delete(ScriptSegmentRow).where(
                    ScriptSegmentRow.project_id == project_id,
                    ScriptSegmentRow.user_id == user_id,
                )
            )
            rows = [
                ScriptSegmentRow(
                    project_id=project_id,
                    user_id=user_id,
                    content=paragraph.strip(),
                    position=index,
                )
                for index, paragraph in enumerate(paragraphs)
            ]
            session.add_all(rows)
            await session.flush()
            segments = [ScriptSegment.model_validate(row) for row in rows]

        logger.info(f"Replaced script for project {project_id} with {len(segments)} segments")
        return segments

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def get_segment_embedding(self, segment_id: str) -> Optional[List[float]]:
        async with self.session_factory() as session:
            return await session.scalar(
                select(ScriptSegmentRow.embedding).where(ScriptSegmentRow.id == segment_id)
            )

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def update_segment_embedding(self, segment_id: str, embedding: List[float]) -> None:
        async with self.session_factory.begin() as session:
            result = await session.execute(
                update(ScriptSegmentRow)
                .where(ScriptSegmentRow.id == segment_id)
                .values(embedding=list(embedding))
            )
            if result.rowcount == 0:
                raise ResourceNotFoundException(f"Script segment {segment_id} not found")

    # Matches

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def replace_matches(self, segment_ids: Sequence[str], matches: Sequence[Match]) -> None:
        segment_ids = list(segment_ids)
        async with self.session_factory.begin() as session:
            if segment_ids:
                await session.execute(delete(MatchRow).where(MatchRow.segment_id.in_(segment_ids)))
            session.add_all(
                MatchRow(
                    segment_id=m.segment_id,
                    clip_id=m.clip_id,
                    similarity_score=m.similarity_score,
                    rank=m.rank,
                )
                for m in matches
            )
        logger.debug(f"Replaced matches for {len(segment_ids)} segments ({len(matches)} rows)")

    @convert_exceptions({SQLAlchemyError: DatabaseException})
    async def fetch_matches(self, segment_ids: Sequence[str]) -> List[Match]:
        segment_ids = list(segment_ids)
        if not segment_ids:
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(MatchRow)
                .where(MatchRow.segment_id.in_(segment_ids))
                .order_by(MatchRow.segment_id.asc(), MatchRow.rank.asc())
            )
            return [Match.model_validate(row) for row in result.scalars()]

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        logger.info("Closing database engine")
        await self.engine.dispose()
