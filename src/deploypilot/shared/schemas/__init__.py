"""Data schemas for placeholders, artifacts, plans and execution results."""

from .artifact import (
    Artifact,
    ArtifactType,
    Command,
    DeploymentPlan,
    PlanStep,
    PlanStepView,
)
from .execution import (
    CommandResult,
    ExecutionReport,
    PlanCompletedEvent,
    StepEvent,
    StepStatus,
)
from .placeholder import Placeholder, PlaceholderCatalog, PlaceholderCategory

__all__ = [
    # Placeholders
    "Placeholder",
    "PlaceholderCatalog",
    "PlaceholderCategory",
    # Artifacts and plans
    "Artifact",
    "ArtifactType",
    "Command",
    "DeploymentPlan",
    "PlanStep",
    "PlanStepView",
    # Execution
    "CommandResult",
    "ExecutionReport",
    "PlanCompletedEvent",
    "StepEvent",
    "StepStatus",
]
