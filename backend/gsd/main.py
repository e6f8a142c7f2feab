"""FastAPI application entrypoint and HTTP controllers.

Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Service errors are mapped to status
codes by the exception handlers registered in `create_app`.

Endpoints implemented (under `API_URL_BASE`, default `/gsd/api/v1`):
- GET /stories?owner=
- POST /stories
- GET, PATCH, DELETE /stories/{story_id}
- GET /stories/{story_id}/tasks
- POST /tasks
- GET, PATCH, DELETE /tasks/{task_id}

plus an unprefixed GET /health.
"""

import json
import logging
import time
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlmodel import Session

from . import errors, models, services
from .config import Settings, settings
from .database import build_engine, create_db_and_tables, get_session
from .schemas import CreateStoryBody, CreateTaskBody, ErrorOut, UpdateStoryBody, UpdateTaskBody

logger = logging.getLogger("gsd.api")

_ERROR_STATUS = {
    errors.InvalidArgumentError: 400,
    errors.NotFoundError: 404,
    errors.InternalError: 500,
}

router = APIRouter()


@router.get('/stories', response_model=List[models.Story])
def get_stories(owner: Optional[str] = None, db: Session = Depends(get_session)):
    """List visible stories for `owner` (the backlog when omitted), oldest first."""
    return services.StoryService(db).list_for_owner(owner)


@router.post('/stories', status_code=201, response_model=models.Story)
def create_story(body: CreateStoryBody, db: Session = Depends(get_session)):
    """Create a story; `owner` defaults to `backlog`."""
    return services.StoryService(db).create(body.name, body.owner)


@router.get('/stories/{story_id}', response_model=models.Story)
def get_story(story_id: uuid.UUID, db: Session = Depends(get_session)):
    return services.StoryService(db).get(story_id)


@router.patch('/stories/{story_id}', response_model=models.Story)
def update_story(story_id: uuid.UUID, body: UpdateStoryBody, db: Session = Depends(get_session)):
    """Update a story name and/or owner."""
    return services.StoryService(db).update(story_id, name=body.name, owner=body.owner)


@router.delete('/stories/{story_id}', status_code=204)
def delete_story(story_id: uuid.UUID, db: Session = Depends(get_session)):
    """Delete a story and all of its tasks."""
    services.StoryService(db).delete(story_id)
    return Response(status_code=204)


@router.get('/stories/{story_id}/tasks', response_model=List[models.Task])
def get_tasks(story_id: uuid.UUID, db: Session = Depends(get_session)):
    """List visible tasks for a story, oldest first."""
    return services.TaskService(db).list_for_story(story_id)


@router.post('/tasks', status_code=201, response_model=models.Task)
def create_task(body: CreateTaskBody, db: Session = Depends(get_session)):
    """Create a task under an existing story. New tasks start `incomplete`."""
    return services.TaskService(db).create(body.story_id, body.name)


@router.get('/tasks/{task_id}', response_model=models.Task)
def get_task(task_id: uuid.UUID, db: Session = Depends(get_session)):
    return services.TaskService(db).get(task_id)


@router.patch('/tasks/{task_id}', response_model=models.Task)
def update_task(task_id: uuid.UUID, body: UpdateTaskBody, db: Session = Depends(get_session)):
    """Update a task name and/or status."""
    return services.TaskService(db).update(task_id, name=body.name, status=body.status)


@router.delete('/tasks/{task_id}', status_code=204)
def delete_task(task_id: uuid.UUID, db: Session = Depends(get_session)):
    services.TaskService(db).delete(task_id)
    return Response(status_code=204)


def _error_response(exc: errors.GsdError) -> JSONResponse:
    status_code = _ERROR_STATUS.get(type(exc), 500)
    message = exc.message
    if status_code >= 500:
        # Store details stay in the server log.
        logger.error("internal error: %s", exc.message, exc_info=exc)
        message = "internal error"
    body = ErrorOut(error=exc.kind, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def handle_gsd_error(request: Request, exc: errors.GsdError):
    return _error_response(exc)


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Report malformed bodies, params and ids as `invalid_argument`."""
    fields = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        fields.append(f"{loc}: {err.get('msg', 'invalid field')}" if loc else err.get("msg", "invalid field"))
    return _error_response(errors.InvalidArgumentError(", ".join(fields) or "invalid request"))


async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


def create_app(app_settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the application around an explicitly owned engine.

    Tests pass their own `engine`; otherwise one is built from
    `app_settings` (the process-wide `settings` by default).
    """
    app_settings = app_settings or settings
    if not logging.getLogger().handlers:
        logging.basicConfig(level=app_settings.LOG_LEVEL)
    if engine is None:
        engine = build_engine(app_settings)
    create_db_and_tables(engine)

    app = FastAPI(title="GSD Stories API")
    app.state.settings = app_settings
    app.state.engine = engine
    app.middleware("http")(request_context_middleware)
    app.add_exception_handler(errors.GsdError, handle_gsd_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_api_route("/health", health, methods=["GET"])
    app.include_router(router, prefix=app_settings.API_URL_BASE)
    return app


app = create_app()
