"""
ScriptSync worker process.

Runs the clip-ingestion poll loop and the ``POST /match`` HTTP trigger on
one event loop. Exits with status 1 if the database is unreachable at
start-up.
"""

import asyncio
import sys

import uvicorn
from dotenv import load_dotenv, find_dotenv
from loguru import logger

from app.main import create_app
from app.services.match_services import MatchTaskRunner
from scriptsync.config import ScriptSyncConfig
from scriptsync.ingestion import ClipPipeline, ClipTagger, FrameExtractor, JobPoller
from scriptsync.matching import MatchingEngine
from scriptsync.providers import ProviderFactory
from scriptsync.utils import configure_logging


async def run_worker(config: ScriptSyncConfig) -> int:
    worker = config.worker

    database = ProviderFactory.create_database_provider(config=config)
    try:
        await database.ping()
    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        await database.close()
        return 1
    logger.info("Database connection OK")

    if config.database.create_schema:
        await database.create_all()

    storage = ProviderFactory.create_storage_provider(config=config)
    vision = ProviderFactory.create_vision_provider(config=config)
    embedding = ProviderFactory.create_embedding_provider(config=config)

    pipeline = ClipPipeline(
        database=database,
        storage=storage,
        extractor=FrameExtractor(
            frame_interval_seconds=worker.frame_interval_seconds,
            frame_count_slack=worker.frame_count_slack,
            thumbnail_offset_ratio=worker.thumbnail_offset_ratio,
        ),
        tagger=ClipTagger(
            vision,
            max_frames_per_call=worker.max_frames_per_call,
            max_attempts=worker.tagging_max_attempts,
            base_delay_seconds=worker.retry_base_delay_ms / 1000,
        ),
        duration_cap_seconds=worker.duration_cap_seconds,
        clips_bucket=config.storage.clips_bucket,
        frames_bucket=config.storage.frames_bucket,
    )
    poller = JobPoller(
        database,
        pipeline,
        interval_seconds=worker.poll_interval_ms / 1000,
        batch_size=worker.batch_size,
    )
    engine = MatchingEngine(database, embedding, top_k=worker.top_k)
    task_runner = MatchTaskRunner(engine.match_project)

    app = create_app(task_runner, api_key=worker.api_key)
    server = uvicorn.Server(
        uvicorn.Config(app, host=worker.host, port=worker.port, log_level=config.logging.level.lower())
    )

    logger.info(f"{config.app_name} started ({config.environment})")
    logger.info(f"Ready for match requests at http://{worker.host}:{worker.port}/match")

    poller_task = asyncio.create_task(poller.run(), name="clip-poller")
    try:
        await server.serve()
    finally:
        poller.stop()
        await poller_task
        await task_runner.drain()
        for provider in (embedding, vision, storage, database):
            await provider.close()
    return 0


def main() -> None:
    load_dotenv(find_dotenv(usecwd=True), override=True)
    config = ScriptSyncConfig()
    configure_logging(config.logging)
    sys.exit(asyncio.run(run_worker(config)))


if __name__ == "__main__":
    main()
