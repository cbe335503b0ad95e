"""Single command execution endpoint."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from deploypilot.api.dependencies import get_execution_engine
from deploypilot.shared.schemas import StepStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["commands"])


class CommandRequest(BaseModel):
    """Request to run one command."""

    command: str = Field(..., min_length=1)


class CommandResponse(BaseModel):
    """Successful command output."""

    success: bool = True
    output: str


@router.post("/commands/execute", response_model=CommandResponse)
def execute_command(request: CommandRequest):
    """
    Run a single command and return its formatted output.

    Args:
        request: Command to run

    Returns:
        CommandResponse on success, or HTTP 500 with ``{error, details}``
    """
    engine = get_execution_engine()
    result = engine.execute_command(request.command)

    if result.status == StepStatus.ERROR:
        logger.warning(f"Command execution failed: {result.error}")
        return JSONResponse(
            status_code=500,
            content={"error": result.message, "details": result.error},
        )

    return CommandResponse(success=True, output=result.formatted_output)
