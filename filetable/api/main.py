"""
HTTP entry point for the file table service.

Mounts the health and workflow file routers under /api/v1. Run with
`uvicorn filetable.api.main:app` or as a module.

Dependencies: fastapi, filetable.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from filetable.configs import get_settings
from filetable.observability.logger import configure_logging

from .deps import get_run_pool
from .routers import health_router, workflow_files_router

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging before the first request; finish in-process runs on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info(
        f"{__name__}:lifespan - API starting, environment={settings.environment}"
    )
    yield
    if get_run_pool.cache_info().currsize:
        await get_run_pool().drain()


def create_app() -> FastAPI:
    app = FastAPI(
        title="File Table Workflows API",
        description="Upload documents into workflows and get suggested table columns",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(workflow_files_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "filetable.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
