"""Artifact discovery, classification and dependency ordering."""

import logging
from pathlib import Path

from deploypilot.shared.schemas import Artifact, ArtifactType

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = (".yaml", ".yml")
FINAL_MARKER = "final"

# Ordered alias table: type token (text between the last hyphen and the
# extension) -> artifact type
TYPE_ALIASES: tuple[tuple[tuple[str, ...], ArtifactType], ...] = (
    (("quota", "resourcequota"), ArtifactType.QUOTA),
    (("storageclass",), ArtifactType.STORAGE_CLASS),
    (("persistentvolume", "persistentvolumes", "pv"), ArtifactType.PERSISTENT_VOLUME),
    (("configmap", "configmaps"), ArtifactType.CONFIG_MAP),
    (("secret", "secrets"), ArtifactType.SECRET),
    (("deployment", "deployments"), ArtifactType.DEPLOYMENT),
)


def type_token(file_name: str) -> str:
    """Lower-case text between the last hyphen and the extension."""
    stem = file_name.lower()
    for extension in YAML_EXTENSIONS:
        if stem.endswith(extension):
            stem = stem[: -len(extension)]
            break
    return stem.rsplit("-", 1)[-1]


def classify_file_name(file_name: str) -> ArtifactType:
    """
    Derive the artifact type from a file name.

    Any name containing ``final`` is a Final artifact; otherwise the type
    token is looked up in the alias table. Unmatched names are Unknown.
    """
    if FINAL_MARKER in file_name.lower():
        return ArtifactType.FINAL

    token = type_token(file_name)
    for aliases, artifact_type in TYPE_ALIASES:
        if token in aliases:
            return artifact_type
    return ArtifactType.UNKNOWN


def is_candidate(file_name: str, version: str, require_final: bool = False) -> bool:
    """Whether a file belongs to the given version's artifact set."""
    lowered = file_name.lower()
    if version not in file_name or not lowered.endswith(YAML_EXTENSIONS):
        return False
    return FINAL_MARKER in lowered if require_final else True


def list_files(directory: Path) -> list[str]:
    """
    Sorted names of the regular files in a directory.

    An unreadable or missing directory yields no files.
    """
    try:
        return sorted(entry.name for entry in directory.iterdir() if entry.is_file())
    except FileNotFoundError:
        logger.debug(f"Directory does not exist, skipping: {directory}")
        return []
    except OSError as e:
        logger.warning(f"Directory unreadable, skipping: {directory} ({e})")
        return []


def discover_artifacts(
    scripts_dir: Path,
    root_dir: Path,
    name: str,
    version: str,
    namespace: str,
) -> list[Artifact]:
    """
    Collect candidate artifacts of a workload version in discovery order.

    Scripts-directory files come first, then final artifacts found in the
    workload root.

    Args:
        scripts_dir: Directory of per-resource scripts
        root_dir: Workload root directory
        name: Workload name (first segment of every relative path)
        version: Version tag the file names must contain
        namespace: Namespace every artifact is applied to

    Returns:
        Unordered list of artifacts
    """
    artifacts: list[Artifact] = []

    for file_name in list_files(Path(scripts_dir)):
        if not is_candidate(file_name, version):
            continue
        artifacts.append(
            Artifact(
                type=classify_file_name(file_name),
                file_name=file_name,
                relative_path=f"{name}/{Path(scripts_dir).name}/{file_name}",
                namespace=namespace,
            )
        )

    for file_name in list_files(Path(root_dir)):
        if not is_candidate(file_name, version, require_final=True):
            continue
        artifacts.append(
            Artifact(
                type=ArtifactType.FINAL,
                file_name=file_name,
                relative_path=f"{name}/{file_name}",
                is_final_in_root=True,
                namespace=namespace,
            )
        )

    for artifact in artifacts:
        if artifact.type == ArtifactType.UNKNOWN:
            logger.warning(f"Unclassifiable artifact {artifact.file_name}, it will run last")

    logger.debug(f"Discovered {len(artifacts)} artifact(s) for {name} {version}")
    return artifacts


def order_artifacts(artifacts: list[Artifact]) -> list[Artifact]:
    """Sort artifacts into dependency order; ties keep their input order."""
    return sorted(artifacts, key=lambda artifact: artifact.type.rank)
