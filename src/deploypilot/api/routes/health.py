"""Health check endpoint."""

from fastapi import APIRouter

from deploypilot import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "deploypilot", "version": __version__}
