import json
import secrets

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from app.schemas.match import MatchAccepted, MatchRequest

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _authorized(request: Request) -> bool:
    api_key = request.app.state.api_key
    if not api_key:
        return True
    # header values are latin-1 strings and may hold non-ASCII characters
    header = request.headers.get("authorization", "").encode("latin-1")
    return secrets.compare_digest(header, f"Bearer {api_key}".encode("utf-8"))


@router.post("/match", status_code=202, response_model=MatchAccepted, tags=["match"])
async def match(request: Request):
    if not _authorized(request):
        return _error(401, "Unauthorized")

    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Invalid request: {e}")
        return _error(400, "Invalid JSON")

    try:
        data = MatchRequest.model_validate(body if isinstance(body, dict) else {})
    except ValidationError:
        return _error(400, "project_id is required")

    logger.info(f"Received match request for project {data.project_id}")
    request.app.state.task_runner.submit(data.project_id)
    return JSONResponse(status_code=202, content=MatchAccepted().model_dump())
