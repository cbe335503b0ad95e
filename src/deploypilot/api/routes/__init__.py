"""API route modules for DeployPilot."""

from .commands import router as commands_router
from .health import router as health_router
from .plans import router as plans_router
from .templates import router as templates_router

__all__ = [
    "health_router",
    "templates_router",
    "plans_router",
    "commands_router",
]
