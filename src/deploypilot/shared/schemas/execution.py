"""Execution result schemas."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from deploypilot.errors import FailureCategory


class StepStatus(str, Enum):
    """Lifecycle of a single plan step."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class CommandResult(BaseModel):
    """Outcome of one command, immutable once built."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    command: str = ""
    status: StepStatus = StepStatus.PENDING
    stdout: str = ""
    stderr: str = ""
    formatted_output: str = ""
    message: str | None = Field(None, description="User-facing status message")
    failure_category: FailureCategory | None = None
    error: str | None = Field(None, description="Raw error text kept for diagnostics")
    started_at: datetime | None = None
    ended_at: datetime | None = None


class ExecutionReport(BaseModel):
    """Results of a plan run aligned 1:1 with the plan steps."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    version: str
    namespace: str
    results: tuple[CommandResult, ...] = ()
    finished: bool = False

    @computed_field
    @property
    def has_error(self) -> bool:
        return any(r.status == StepStatus.ERROR for r in self.results)

    @computed_field
    @property
    def summary(self) -> str:
        if not self.finished:
            return "running"
        return "completed with errors" if self.has_error else "completed"


class StepEvent(BaseModel):
    """A status transition of one step, pushed to observers as it happens."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    event: Literal["step"] = "step"
    index: int
    total: int
    file_name: str
    artifact_type: str
    status: StepStatus
    output: str = ""
    message: str | None = None
    error: str | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None


class PlanCompletedEvent(BaseModel):
    """Terminal event of a plan run carrying the aggregate report."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    event: Literal["completed"] = "completed"
    report: ExecutionReport
