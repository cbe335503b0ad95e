"""Deployment plan listing and execution endpoints."""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from deploypilot.api.dependencies import (
    get_app_settings,
    get_execution_engine,
    get_run_registry,
    get_template_store,
)
from deploypilot.errors import TemplateNotFoundError
from deploypilot.planning import build_plan
from deploypilot.shared.schemas import DeploymentPlan, ExecutionReport, PlanStepView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["plans"])


def _load_plan(name: str, version: str, namespace: str | None) -> DeploymentPlan:
    try:
        return build_plan(get_template_store(), name, version, namespace, get_app_settings())
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e


@router.get("/plans/{name}/{version}", response_model=list[PlanStepView], response_model_by_alias=True)
async def get_plan(name: str, version: str, namespace: str | None = None):
    """
    List the ordered commands of a workload version.

    Args:
        name: Workload name
        version: Version tag
        namespace: Optional namespace overriding the config record

    Returns:
        Plan steps in execution order
    """
    plan = _load_plan(name, version, namespace)
    return [PlanStepView.from_step(step) for step in plan.steps]


@router.post("/plans/{name}/{version}/execute")
def execute_plan(name: str, version: str, namespace: str | None = None):
    """
    Execute a plan, streaming one JSON line per status transition.

    The last line is the completion event carrying the aggregate report.
    """
    plan = _load_plan(name, version, namespace)
    engine = get_execution_engine()

    def generate():
        for event in engine.stream(plan):
            yield event.model_dump_json(by_alias=True) + "\n"

    return StreamingResponse(generate(), media_type="application/x-ndjson")


@router.post("/plans/{name}/{version}/runs", status_code=202)
def start_run(name: str, version: str, namespace: str | None = None):
    """Start a plan in the background and return its run id."""
    plan = _load_plan(name, version, namespace)
    run_id = get_run_registry().start(plan)
    return {"runId": run_id, "steps": len(plan)}


@router.get("/runs/{run_id}", response_model=ExecutionReport, response_model_by_alias=True)
async def get_run(run_id: str):
    """Return the latest report snapshot of a background run."""
    report = get_run_registry().get(run_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return report
