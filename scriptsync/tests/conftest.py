"""Shared pytest fixtures for scriptsync tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from scriptsync.models import Clip, ClipStatus
from scriptsync.providers.custom_providers import LocalStorageProvider, SQLDatabaseProvider
from scriptsync.providers.custom_providers.sql_models import ClipRow, ProfileRow, ScriptSegmentRow

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def sleep_mock():
    """Replace the retry backoff sleep so tests never wait; delays are recorded on the mock."""
    with patch("scriptsync.utils.error_handler._sleep", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
async def database(tmp_path):
    """SQLite-backed store with the schema created."""
    provider = SQLDatabaseProvider({"url": f"sqlite+aiosqlite:///{tmp_path / 'scriptsync.db'}"})
    await provider.create_all()
    yield provider
    await provider.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider({"base_path": str(tmp_path / "storage")})


@pytest.fixture
def project_id():
    return str(uuid4())


@pytest.fixture
def user_id():
    return str(uuid4())


@pytest.fixture
def make_clip(database, project_id, user_id):
    """Insert a clip row; ``order`` offsets created_at in seconds so ordering is deterministic."""
    counter = {"n": 0}

    async def _make_clip(order=None, **fields) -> Clip:
        counter["n"] += 1
        offset = counter["n"] if order is None else order
        clip_id = fields.pop("id", str(uuid4()))
        values = {
            "project_id": project_id,
            "user_id": user_id,
            "filename": f"clip-{offset}.mp4",
            "storage_path": f"{user_id}/{project_id}/{clip_id}.mp4",
            "status": ClipStatus.PROCESSING.value,
            "tags": [],
            "created_at": BASE_TIME + timedelta(seconds=offset),
        }
        values.update({k: (v.value if isinstance(v, ClipStatus) else v) for k, v in fields.items()})
        async with database.session_factory.begin() as session:
            session.add(ClipRow(id=clip_id, **values))
        return await database.get_clip(clip_id)

    return _make_clip


@pytest.fixture
def make_segment(database, project_id, user_id):
    async def _make_segment(content: str, position: int, embedding=None):
        segment_id = str(uuid4())
        async with database.session_factory.begin() as session:
            session.add(ScriptSegmentRow(
                id=segment_id,
                project_id=project_id,
                user_id=user_id,
                content=content,
                position=position,
                embedding=embedding,
            ))
        return segment_id

    return _make_segment


@pytest.fixture
def make_profile(database, user_id):
    async def _make_profile(total_video_seconds: float = 0.0, uid=None):
        async with database.session_factory.begin() as session:
            session.add(ProfileRow(id=uid or user_id, total_video_seconds=total_video_seconds))

    return _make_profile
