from typing import Dict, List, Optional, Sequence

from loguru import logger

from ..exceptions import ValidationException
from ..models import Clip, Match, ScriptSegment
from ..providers.base import DatabaseProvider, EmbeddingProvider
from .similarity import rank_candidates

DEFAULT_TOP_K = 5


class MatchingEngine:
    """
    Rebuilds a project's segment -> clip matches from text embeddings.

    Missing embeddings are computed, stored and read back. Segments or clips
    with no text are left out. Each segment keeps its ``top_k`` best ready
    clips, ranked 1..k by descending cosine similarity. Previous matches for
    the project's segments are replaced in one transaction.

    Args:
        database: Relational store
        embedding_provider: Text embedding model
        top_k: Default number of matches kept per segment
    """

    def __init__(
        self,
        database: DatabaseProvider,
        embedding_provider: EmbeddingProvider,
        top_k: int = DEFAULT_TOP_K,
    ):
        self.database = database
        self.embedding_provider = embedding_provider
        self.top_k = top_k

    async def __call__(self, project_id: str, top_k: Optional[int] = None) -> List[Match]:
        return await self.match_project(project_id, top_k)

    async def match_project(self, project_id: str, top_k: Optional[int] = None) -> List[Match]:
        top_k = self.top_k if top_k is None else top_k
        if top_k < 1:
            raise ValidationException(f"top_k must be >= 1, got {top_k}")

        logger.info(f"Starting matching for project {project_id}")
        segments = await self.database.fetch_segments(project_id)
        clips = await self.database.fetch_ready_clips(project_id)

        if not segments or not clips:
            logger.info(
                f"Nothing to match for project {project_id} "
                f"({len(segments)} segments, {len(clips)} ready clips)"
            )
            return []

        segment_vectors = await self._ensure_segment_embeddings(segments)
        clip_vectors = await self._ensure_clip_embeddings(clips)

        valid_segments = [s for s in segments if s.id in segment_vectors]
        candidates = [(c.id, clip_vectors[c.id]) for c in clips if c.id in clip_vectors]

        matches: List[Match] = []
        for segment in valid_segments:
            ranked = rank_candidates(segment_vectors[segment.id], candidates, top_k)
            matches.extend(
                Match(segment_id=segment.id, clip_id=clip_id, similarity_score=score, rank=rank)
                for rank, (clip_id, score) in enumerate(ranked, start=1)
            )

        await self.database.replace_matches([s.id for s in segments], matches)
        logger.info(
            f"Stored {len(matches)} matches for {len(valid_segments)} segments "
            f"against {len(candidates)} clips in project {project_id}"
        )
        return matches

    async def _ensure_segment_embeddings(self, segments: Sequence[ScriptSegment]) -> Dict[str, List[float]]:
        vectors: Dict[str, List[float]] = {}
        for segment in segments:
            if segment.embedding:
                vectors[segment.id] = segment.embedding
                continue

            if not segment.content.strip():
                logger.warning(f"Segment {segment.id} has no text, skipping")
                continue

            embedding = await self.embedding_provider.embedding(segment.content)
            await self.database.update_segment_embedding(segment.id, embedding)
            stored = await self.database.get_segment_embedding(segment.id)
            if stored:
                vectors[segment.id] = stored
            else:
                logger.warning(f"Segment {segment.id} embedding missing after update")
        return vectors

    async def _ensure_clip_embeddings(self, clips: Sequence[Clip]) -> Dict[str, List[float]]:
        vectors: Dict[str, List[float]] = {}
        for clip in clips:
            if clip.embedding:
                vectors[clip.id] = clip.embedding
                continue

            text = clip.embedding_text()
            if not text:
                logger.warning(f"Clip {clip.id} has no description or tags, skipping")
                continue

            embedding = await self.embedding_provider.embedding(text)
            await self.database.update_clip_embedding(clip.id, embedding)
            stored = await self.database.get_clip_embedding(clip.id)
            if stored:
                vectors[clip.id] = stored
            else:
                logger.warning(f"Clip {clip.id} embedding missing after update")
        return vectors
