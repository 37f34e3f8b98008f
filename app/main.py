from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.routers import match
from app.services.match_services import MatchTaskRunner


def create_app(task_runner: MatchTaskRunner, api_key: Optional[str] = None) -> FastAPI:
    """
    Build the worker's HTTP surface.

    Only ``POST /match`` is served; every other path or method answers 404.

    Args:
        task_runner: Runner that starts matching in the background
        api_key: Shared secret expected as a Bearer token (disabled when empty)
    """
    app = FastAPI(
        title="ScriptSync Worker",
        description="Triggers script-to-clip matching for a project",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.task_runner = task_runner
    app.state.api_key = api_key

    app.include_router(match.router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    return app
