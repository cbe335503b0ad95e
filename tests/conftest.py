"""Shared fixtures: a temporary template tree, settings and a fake command runner."""

from pathlib import Path

import pytest

from deploypilot.config import Settings
from deploypilot.errors import CommandExecutionError, FailureCategory
from deploypilot.execution.runner import RunOutput
from deploypilot.shared.schemas import Artifact, ArtifactType, Command, DeploymentPlan, PlanStep
from deploypilot.templates.store import TemplateStore

TEMPLATE_TEXT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: ${app_name}
spec:
  replicas: ${replica_count#[1,2,3]}
  template:
    spec:
      containers:
        - name: ${app_name}
          image: ${repository}:${tag}  #[registry.local/myapp] #[1.0.0, 1.1.0]
          resources:
            requests:
              cpu: ${cpu_request#[100m, 250m]}
              memory: ${memory_request}
"""

CONFIG_TEXT = """\
namespace: team-a
placeholders:
  app_name: web
  replica_count: 2
  repository: registry.local/myapp
  tag: 1.0.0
"""

SCRIPT_FILES = [
    "myapp-1.0.0-configmap.yaml",
    "myapp-1.0.0-deployment.yaml",
    "myapp-1.0.0-mystery.yaml",
    "myapp-1.0.0-quota.yaml",
    "myapp-0.9.0-secret.yaml",
    "notes.txt",
]


def _manifest(kind: str, name: str) -> str:
    return f"apiVersion: v1\nkind: {kind}\nmetadata:\n  name: {name}\n"


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """A template root holding one workload ``myapp`` with version 1.0.0."""
    root = tmp_path / "deploymentTemplate"
    workload = root / "myapp"
    (workload / "config").mkdir(parents=True)
    (workload / "deploy-scripts").mkdir()

    (workload / "myapp-template.yaml").write_text(TEMPLATE_TEXT)
    (workload / "config" / "1.0.0.yaml").write_text(CONFIG_TEXT)
    for file_name in SCRIPT_FILES:
        (workload / "deploy-scripts" / file_name).write_text(_manifest("ConfigMap", file_name[:-5].lower()))
    (workload / "myapp-1.0.0-final.yaml").write_text(_manifest("ConfigMap", "final"))
    (workload / "myapp-1.0.0-values.yaml").write_text("replicas: 2\n")
    return root


@pytest.fixture
def store(template_root: Path) -> TemplateStore:
    return TemplateStore(template_root)


@pytest.fixture
def settings(template_root: Path) -> Settings:
    return Settings(template_root=template_root)


class FakeRunner:
    """Stand-in for CommandRunner that answers by command substring."""

    def __init__(self, outcomes: dict | None = None):
        self.outcomes = outcomes or {}
        self.calls: list[str] = []

    def run(self, command: str) -> RunOutput:
        self.calls.append(command)
        for needle, outcome in self.outcomes.items():
            if needle in command:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        return RunOutput(stdout="configmap/app configured\n", stderr="")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


def not_found_error() -> CommandExecutionError:
    return CommandExecutionError(
        'Command failed with exit code 1: Error from server (NotFound): configmaps "app" not found',
        FailureCategory.RESOURCE_MISSING,
        stderr='Error from server (NotFound): configmaps "app" not found\n',
        returncode=1,
    )


def make_plan(file_names: list[str], namespace: str = "team-a") -> DeploymentPlan:
    """Plan with one kubectl apply step per file name, in the given order."""
    steps = []
    for file_name in file_names:
        artifact = Artifact(
            type=ArtifactType.CONFIG_MAP,
            file_name=file_name,
            relative_path=f"myapp/deploy-scripts/{file_name}",
            namespace=namespace,
        )
        command = Command(
            command=f"kubectl apply -f /app/deploymentTemplate/{artifact.relative_path} --namespace {namespace}",
            artifact_type=artifact.type,
            namespace=namespace,
        )
        steps.append(PlanStep(artifact=artifact, command=command))
    return DeploymentPlan(name="myapp", version="1.0.0", namespace=namespace, steps=tuple(steps))
