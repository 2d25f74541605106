from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .db.database import AsyncSessionLocal, init_db
from .errors import DataIntegrityError, MetricsError
from .logger import logger
from .routers import coverage, plugins
from .timeline.recorder import TimelineRecorder

timeline_recorder = TimelineRecorder(
    AsyncSessionLocal,
    cron=settings.timeline.cron,
    ping_window_seconds=settings.timeline.ping_window_seconds,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up and initializing the database...")
    await init_db()
    if settings.timeline.enabled:
        await timeline_recorder.start()
    logger.info("Startup complete.")
    yield
    await timeline_recorder.stop()
    logger.info("Shutdown complete.")


app = FastAPI(lifespan=lifespan, title="MCStats")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(coverage.router)
app.include_router(plugins.router)


@app.exception_handler(MetricsError)
async def metrics_error_handler(request: Request, exc: MetricsError):
    if isinstance(exc, DataIntegrityError):
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return PlainTextResponse(f"ERR {exc.message}", status_code=exc.status_code)
