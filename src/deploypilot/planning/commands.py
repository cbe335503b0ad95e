"""Command synthesis for classified artifacts."""

from deploypilot.config import DEFAULT_MOUNT_PATH
from deploypilot.shared.schemas import Artifact, ArtifactType, Command


def mounted_path(mount_path: str, relative_path: str) -> str:
    """Join a relative artifact path onto the mount path with forward slashes."""
    root = mount_path.replace("\\", "/").rstrip("/")
    relative = relative_path.replace("\\", "/").lstrip("/")
    return f"{root}/{relative}"


def synthesize_command(
    artifact: Artifact,
    name: str,
    mount_path: str = DEFAULT_MOUNT_PATH,
    kubectl: str = "kubectl",
    helm: str = "helm",
) -> Command:
    """
    Build the command that applies one artifact.

    A final artifact in the workload root is installed as a package release
    using the workload directory as the chart; everything else is applied
    directly.

    Args:
        artifact: Classified artifact
        name: Workload name (release and chart directory)
        mount_path: Template root as seen by the executing host
        kubectl: kubectl binary
        helm: helm binary

    Returns:
        Command carrying the artifact type and namespace
    """
    values_path = mounted_path(mount_path, artifact.relative_path)

    if artifact.is_final_in_root:
        chart_path = mounted_path(mount_path, name)
        command = (
            f"{helm} upgrade --install {name} {chart_path} -f {values_path} "
            f"--namespace {artifact.namespace} --create-namespace"
        )
        return Command(
            command=command,
            is_deployment=True,
            artifact_type=artifact.type,
            namespace=artifact.namespace,
        )

    return Command(
        command=f"{kubectl} apply -f {values_path} --namespace {artifact.namespace}",
        artifact_type=artifact.type,
        namespace=artifact.namespace,
    )


def label_keys_for(artifact_type: ArtifactType) -> dict[str, str]:
    """Localization keys for a step's title and description."""
    key = artifact_type.value[0].lower() + artifact_type.value[1:]
    return {
        "title": f"deployment.steps.{key}.title",
        "description": f"deployment.steps.{key}.description",
    }
