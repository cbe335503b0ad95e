"""Artifact, command and plan schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ArtifactType(str, Enum):
    """Resource type of a discovered artifact file.

    Declaration order is the execution order.
    """

    QUOTA = "Quota"
    STORAGE_CLASS = "StorageClass"
    PERSISTENT_VOLUME = "PersistentVolume"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"
    DEPLOYMENT = "Deployment"
    FINAL = "Final"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int:
        return list(ArtifactType).index(self)


class Artifact(BaseModel):
    """One resource-definition file for a workload version."""

    model_config = ConfigDict(frozen=True)

    type: ArtifactType
    file_name: str
    relative_path: str = Field(
        ..., description="Path relative to the template root, forward-slash form"
    )
    is_final_in_root: bool = False
    namespace: str


class Command(BaseModel):
    """A synthesized shell-out command with its reporting labels."""

    model_config = ConfigDict(frozen=True)

    command: str
    is_deployment: bool = False
    artifact_type: ArtifactType
    namespace: str


class PlanStep(BaseModel):
    """An artifact paired with the command that applies it."""

    model_config = ConfigDict(frozen=True)

    artifact: Artifact
    command: Command
    label_keys: dict[str, str] = Field(default_factory=dict)


class DeploymentPlan(BaseModel):
    """Ordered steps for one workload name + version + namespace."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    namespace: str
    steps: tuple[PlanStep, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)


class PlanStepView(BaseModel):
    """Caller-facing listing entry of a plan step."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: ArtifactType
    command: str
    file_name: str
    label_keys: dict[str, str]
    namespace: str
    is_deployment: bool = False

    @classmethod
    def from_step(cls, step: PlanStep) -> "PlanStepView":
        return cls(
            type=step.artifact.type,
            command=step.command.command,
            file_name=step.artifact.file_name,
            label_keys=step.label_keys,
            namespace=step.command.namespace,
            is_deployment=step.command.is_deployment,
        )
