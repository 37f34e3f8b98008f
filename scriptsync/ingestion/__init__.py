from .frame_extractor import FrameExtractor
from .frame_sampler import select_representative_frames, MAX_FRAMES_PER_CALL
from .clip_tagger import ClipTagger, parse_tagging_response
from .clip_pipeline import ClipPipeline, clip_prefix
from .job_poller import JobPoller
from .prompts import TAGGING_PROMPT

__all__ = [
    "FrameExtractor",
    "select_representative_frames",
    "MAX_FRAMES_PER_CALL",
    "ClipTagger",
    "parse_tagging_response",
    "ClipPipeline",
    "clip_prefix",
    "JobPoller",
    "TAGGING_PROMPT",
]
