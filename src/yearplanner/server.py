"""
FastAPI service for planner data persistence and analytics.

Each user's events and tasks are stored as whole JSON arrays in the
configured ItemStore. Requests are scoped by the X-User-ID header.
"""

import json
import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .adapters import create_store
from .config import Config, load_config
from .core import analytics
from .ports import ItemStore

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
ANONYMOUS = "anonymous"
DATA_TYPES = ("events", "tasks")

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "X-User-ID"]

ERROR_MESSAGES = {
    404: "Endpoint not found",
    405: "Method not allowed",
}


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: str


class SaveResponse(BaseModel):
    success: bool
    count: int


class ImportResponse(BaseModel):
    success: bool
    importDate: str


class AnalyticsResponse(BaseModel):
    totalEvents: int
    totalTasks: int
    completedTasks: int
    recurringEvents: int
    recurringTasks: int
    lastUpdated: str


router = APIRouter(prefix="/api")


def get_store(request: Request) -> ItemStore:
    return request.app.state.store


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_user_id(request: Request) -> str:
    """User scope from the X-User-ID header (header names are case-insensitive)."""
    user_id = request.headers.get("x-user-id") or ANONYMOUS
    if user_id in (".", "..") or any(c in user_id for c in "/\\\0"):
        raise HTTPException(status_code=400, detail="Invalid X-User-ID header")
    return user_id


async def read_json(request: Request, default):
    """Parse the request body, treating an empty body as `default`."""
    raw = await request.body()
    if not raw.strip():
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON body")


def cors_headers(origin: str | None, config: Config) -> dict[str, str]:
    """CORS headers echoing the origin when it is on the allow-list."""
    allowed = config.cors_origins
    if origin and origin in allowed:
        allow_origin = origin
    else:
        allow_origin = allowed[0] if allowed else "*"
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
        "Access-Control-Allow-Headers": ", ".join(CORS_HEADERS),
        "Access-Control-Allow-Credentials": "true",
    }


# ============== Items ==============


def _save_items(store: ItemStore, user_id: str, data_type: str, items) -> SaveResponse:
    if not isinstance(items, list):
        raise HTTPException(status_code=400, detail=f"Expected a JSON array of {data_type}")
    if not store.save(user_id, data_type, items):
        raise HTTPException(status_code=500, detail=f"Failed to save {data_type}")
    logger.debug(f"Saved {len(items)} {data_type} for {user_id}")
    return SaveResponse(success=True, count=len(items))


@router.get("/events")
async def get_events(store: ItemStore = Depends(get_store), user_id: str = Depends(get_user_id)) -> list:
    """Return the user's events array."""
    return store.load(user_id, "events")


@router.post("/events", response_model=SaveResponse)
async def save_events(
    request: Request,
    store: ItemStore = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> SaveResponse:
    """Overwrite the user's events with the posted array."""
    return _save_items(store, user_id, "events", await read_json(request, []))


@router.get("/tasks")
async def get_tasks(store: ItemStore = Depends(get_store), user_id: str = Depends(get_user_id)) -> list:
    """Return the user's tasks array."""
    return store.load(user_id, "tasks")


@router.post("/tasks", response_model=SaveResponse)
async def save_tasks(
    request: Request,
    store: ItemStore = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> SaveResponse:
    """Overwrite the user's tasks with the posted array."""
    return _save_items(store, user_id, "tasks", await read_json(request, []))


# ============== Analytics & backup ==============


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    store: ItemStore = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> AnalyticsResponse:
    summary = analytics.summarize(store.load(user_id, "events"), store.load(user_id, "tasks"))
    return AnalyticsResponse(**summary)


@router.get("/backup")
async def export_backup(
    store: ItemStore = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> JSONResponse:
    """Export every stored data type for the user as a downloadable document."""
    data_types = sorted(set(DATA_TYPES) | store.list(user_id))
    document = analytics.backup_document({dt: store.load(user_id, dt) for dt in data_types})
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{analytics.backup_filename()}"'},
    )


@router.post("/backup", response_model=ImportResponse)
async def import_backup(
    request: Request,
    store: ItemStore = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> ImportResponse:
    """Import events and tasks from a backup document."""
    document = await read_json(request, {})
    if not isinstance(document, dict):
        raise HTTPException(status_code=400, detail="Expected a backup document")

    data = document.get("data")
    if isinstance(data, dict):
        for data_type in DATA_TYPES:
            items = data.get(data_type)
            if isinstance(items, list) and not store.save(user_id, data_type, items):
                raise HTTPException(status_code=500, detail=f"Failed to import {data_type}")

    return ImportResponse(success=True, importDate=analytics.utc_now_iso())


@router.get("/health", response_model=HealthResponse)
async def health_check(config: Config = Depends(get_config)) -> HealthResponse:
    """Health check endpoint for container orchestration."""
    return HealthResponse(
        status="healthy",
        timestamp=analytics.utc_now_iso(),
        version=API_VERSION,
        environment=config.environment,
    )


# ============== App factory ==============


def create_app(store: ItemStore | None = None, config: Config | None = None) -> FastAPI:
    """Build the API around an injected store (defaults from configuration)."""
    config = config or load_config()
    store = store if store is not None else create_store(config)

    app = FastAPI(
        title="Year Planner API",
        description="REST API for planner events, tasks, analytics and backups",
        version=API_VERSION,
    )
    app.state.store = store
    app.state.config = config
    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = ERROR_MESSAGES.get(exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.middleware("http")
    async def cors(request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.exception(f"Unhandled error on {request.method} {request.url.path}")
                body = {"error": "Internal server error"}
                if config.is_development:
                    body["message"] = str(e)
                response = JSONResponse(status_code=500, content=body)
        response.headers.update(cors_headers(request.headers.get("origin"), config))
        return response

    return app
