"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import health, webhook
from src.config import get_settings, load_settings_or_exit
from src.constants import GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS, STATIC_ASSETS_DIR
from src.logging_config import setup_logfire
from src.services.task_tracker import drain_pending_tasks, pending_task_count

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager with graceful shutdown support."""
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            integrations=[FastApiIntegration()],
        )

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        image_base_path=settings.image_base_path,
    )

    yield

    logfire.info(
        "Application shutdown initiated",
        pending_tasks=pending_task_count(),
    )
    await drain_pending_tasks(GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS)
    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Messenger Echo Relay",
    description="Echoes Facebook Messenger text messages back to their sender",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])

if os.path.isdir(STATIC_ASSETS_DIR):
    app.mount("/assets", StaticFiles(directory=STATIC_ASSETS_DIR), name="assets")


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Messenger Echo Relay",
        "version": APP_VERSION,
    }


def run() -> None:
    """Validate configuration, then start serving.

    Missing configuration exits with status 1 before a socket is bound.
    """
    import uvicorn

    settings = load_settings_or_exit()
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.env == "local",
    )


if __name__ == "__main__":
    run()
