"""FastAPI application factory for the DeployPilot API."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deploypilot import __version__
from deploypilot.config import get_settings
from deploypilot.logging_config import setup_logging

from .routes import commands_router, health_router, plans_router, templates_router

logger = logging.getLogger(__name__)


def create_app(configure_logging: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    if configure_logging:
        setup_logging(log_file=settings.log_file, debug=settings.debug)

    app = FastAPI(
        title="DeployPilot API",
        description="API for resolving deployment templates and executing deployment plans",
        version=__version__,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include all routers
    app.include_router(health_router)
    app.include_router(templates_router)
    app.include_router(plans_router)
    app.include_router(commands_router)

    logger.info(f"DeployPilot API serving templates from {settings.template_root}")

    return app


# Create the app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
