# flowstate/main.py

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from flowstate.auth.auth_router import router as auth_router
from flowstate.config import Settings, load_settings
from flowstate.errors import register_exception_handlers
from flowstate.models.task import to_iso, utc_now
from flowstate.storage import TaskStorage
from flowstate.task.task_repository import TaskRepository
from flowstate.task.task_router import router as task_router

logger = logging.getLogger("flowstate.http")

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    storage: TaskStorage = app.state.storage

    logger.info("server_starting", extra={"environment": settings.environment, "tasks_file": str(storage.path)})
    await storage.ensure_storage_location()
    tasks = await storage.load()
    logger.info("storage_ready", extra={"tasks": len(tasks)})
    yield
    logger.info("server_stopping")


def create_app(settings: Optional[Settings] = None, storage: Optional[TaskStorage] = None) -> FastAPI:
    settings = settings or load_settings()
    storage = storage or TaskStorage(
        settings.tasks_file,
        seed=settings.seed_mode,
        strict=settings.strict_storage,
    )

    app = FastAPI(title="FlowState API", version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.repository = TaskRepository(storage)
    app.state.started_at = time.monotonic()

    register_exception_handlers(app)

    # ---------------- REQUEST LOGGING ----------------
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response

    # ---------------- CORS ----------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    # ---------------- ROUTERS ----------------
    app.include_router(task_router, prefix=API_PREFIX)
    app.include_router(auth_router, prefix=f"{API_PREFIX}/auth")

    # ---------------- ROOT ----------------
    @app.get("/")
    def read_root():
        return {
            "message": "FlowState API is running!",
            "version": settings.version,
            "endpoints": {
                "tasks": f"{API_PREFIX}/tasks",
                "health": f"{API_PREFIX}/health",
                "stats": f"{API_PREFIX}/tasks/stats/overview",
            },
        }

    @app.get(f"{API_PREFIX}/health")
    def health(request: Request):
        state = request.app.state
        return {
            "status": "OK",
            "timestamp": to_iso(utc_now()),
            "uptime": round(time.monotonic() - state.started_at, 3),
            "environment": settings.environment,
            "tasksFile": str(state.storage.path),
            "storage": {"reseeds": state.storage.reseed_count},
        }

    return app


app = create_app()
