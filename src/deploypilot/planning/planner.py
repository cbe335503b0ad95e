"""Deployment plan assembly."""

import logging

from deploypilot.config import DEFAULT_NAMESPACE, Settings, get_settings
from deploypilot.errors import TemplateNotFoundError
from deploypilot.planning.classifier import discover_artifacts, order_artifacts
from deploypilot.planning.commands import label_keys_for, synthesize_command
from deploypilot.shared.schemas import Artifact, DeploymentPlan, PlanStep
from deploypilot.templates.store import ConfigRecord, TemplateStore

logger = logging.getLogger(__name__)


def resolve_namespace(
    requested: str | None,
    record: ConfigRecord | None,
    settings: Settings | None = None,
) -> str:
    """
    Pick the namespace a plan runs in.

    Precedence: explicit request, then the version's config record, then the
    configured default, then ``default``.
    """
    if requested and requested.strip():
        return requested.strip()
    if record is not None and record.namespace:
        return record.namespace
    if settings is not None and settings.default_namespace:
        return settings.default_namespace
    return DEFAULT_NAMESPACE


def plan_from_artifacts(
    name: str,
    version: str,
    namespace: str,
    artifacts: list[Artifact],
    settings: Settings | None = None,
) -> DeploymentPlan:
    """Order artifacts and pair each with its command."""
    settings = settings or get_settings()
    steps = tuple(
        PlanStep(
            artifact=artifact,
            command=synthesize_command(
                artifact,
                name,
                mount_path=settings.mount_path,
                kubectl=settings.kubectl_bin,
                helm=settings.helm_bin,
            ),
            label_keys=label_keys_for(artifact.type),
        )
        for artifact in order_artifacts(artifacts)
    )
    return DeploymentPlan(name=name, version=version, namespace=namespace, steps=steps)


def build_plan(
    store: TemplateStore,
    name: str,
    version: str,
    namespace: str | None = None,
    settings: Settings | None = None,
) -> DeploymentPlan:
    """
    Build the ordered deployment plan of a workload version.

    Args:
        store: Template store holding the workload
        name: Workload name
        version: Version tag
        namespace: Explicit namespace (overrides the config record)
        settings: Settings (process settings if not provided)

    Returns:
        DeploymentPlan, possibly with no steps

    Raises:
        TemplateNotFoundError: If the workload directory does not exist
    """
    settings = settings or get_settings()

    root_dir = store.workload_dir(name)
    if not root_dir.is_dir():
        raise TemplateNotFoundError(f"Workload not found: {name}")

    record = store.read_config(name, version)
    resolved = resolve_namespace(namespace, record, settings)

    artifacts = discover_artifacts(store.scripts_dir(name), root_dir, name, version, resolved)
    plan = plan_from_artifacts(name, version, resolved, artifacts, settings)

    logger.info(f"Built plan for {name} {version} in namespace {resolved}: {len(plan)} step(s)")
    return plan
