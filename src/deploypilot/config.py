"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

# Fixed execution limits for a single plan step
COMMAND_TIMEOUT_SECONDS = 30
MAX_OUTPUT_BYTES = 1024 * 1024

DEFAULT_MOUNT_PATH = "/app/deploymentTemplate"
DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class Settings:
    """Resolved service settings."""

    template_root: Path
    mount_path: str = DEFAULT_MOUNT_PATH
    default_namespace: str = DEFAULT_NAMESPACE
    work_dir: Path | None = None
    kubectl_bin: str = "kubectl"
    helm_bin: str = "helm"
    debug: bool = False
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from DEPLOYPILOT_* environment variables."""
        work_dir = os.getenv("DEPLOYPILOT_WORK_DIR")
        return cls(
            template_root=Path(os.getenv("DEPLOYPILOT_TEMPLATE_ROOT", "deploymentTemplate")),
            mount_path=os.getenv("DEPLOYPILOT_MOUNT_PATH", DEFAULT_MOUNT_PATH).rstrip("/"),
            default_namespace=os.getenv("DEPLOYPILOT_DEFAULT_NAMESPACE", DEFAULT_NAMESPACE),
            work_dir=Path(work_dir) if work_dir else None,
            kubectl_bin=os.getenv("DEPLOYPILOT_KUBECTL", "kubectl"),
            helm_bin=os.getenv("DEPLOYPILOT_HELM", "helm"),
            debug=os.getenv("DEPLOYPILOT_DEBUG", "false").lower() == "true",
            log_file=os.getenv("DEPLOYPILOT_LOG_FILE") or None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings."""
    return Settings.from_env()
