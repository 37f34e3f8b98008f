from typing import List, Sequence, TypeVar
from ..exceptions import ValidationException

T = TypeVar("T")

MAX_FRAMES_PER_CALL = 20


def select_representative_frames(frames: Sequence[T], max_frames: int = MAX_FRAMES_PER_CALL) -> List[T]:
    """
    Pick at most ``max_frames`` frames spread evenly across ``frames``.

    Walks the sequence with stride ``max(1, n // max_frames)`` until the cap
    is reached, then swaps the last pick for the final frame if the walk
    did not reach it.

    Args:
        frames: Extracted frames in temporal order
        max_frames: Hard cap on images sent in one model call

    Returns:
        Selected frames, in temporal order, without duplicates
    """
    if max_frames < 1:
        raise ValidationException(f"max_frames must be >= 1, got {max_frames}")

    count = len(frames)
    if count == 0:
        return []

    stride = max(1, count // max_frames)
    indices = list(range(0, count, stride))[:max_frames]

    # A walk that misses the last frame has always filled the cap.
    last = count - 1
    if indices[-1] != last:
        indices[-1] = last

    return [frames[i] for i in indices]
