from .similarity import cosine_similarity, rank_candidates
from .matching_engine import MatchingEngine, DEFAULT_TOP_K

__all__ = [
    "cosine_similarity",
    "rank_candidates",
    "MatchingEngine",
    "DEFAULT_TOP_K",
]
