"""API routers."""

from .health import router as health_router
from .workflow_files import router as workflow_files_router

__all__ = [
    "health_router",
    "workflow_files_router",
]
