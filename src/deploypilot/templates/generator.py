"""Manifest generation for namespaces and resource quotas.

Quota sizes are derived from the workload's replica count and per-instance
resource requests, with one spare instance of headroom.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader
from pydantic import BaseModel

from deploypilot.templates.store import TemplateStore
from deploypilot.templates.validator import YAMLValidator

logger = logging.getLogger(__name__)

CREATED_BY_LABEL = "pod-deployment-system"

_MEMORY_PATTERN = re.compile(r"^(\d+)(\w+)$")


class QuotaSpec(BaseModel):
    """Hard limits of a ResourceQuota, as Kubernetes quantity strings."""

    requests_cpu: str
    limits_cpu: str
    requests_memory: str
    limits_memory: str
    pods: str
    configmaps: str
    pvcs: str
    services: str = "3"
    secrets: str
    deployments: str
    replicasets: str
    statefulsets: str
    jobs: str = "10"
    cronjobs: str = "10"


def parse_memory_mi(value: str | None) -> float:
    """
    Convert a memory quantity to MiB.

    Unknown units are taken as MiB; unparseable values count as 0.
    """
    if not value:
        return 0
    match = _MEMORY_PATTERN.match(value.strip())
    if not match:
        return 0
    number, unit = int(match.group(1)), match.group(2).lower()
    if unit == "gi":
        return number * 1024
    if unit == "ki":
        return number / 1024
    return number


def format_memory(mi_value: float) -> str:
    if mi_value >= 1024:
        return f"{round(mi_value / 1024)}Gi"
    return f"{mi_value:g}Mi"


def _parse_float(value: str | None, default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        return default


def calculate_quota(
    replicas: int | str | None = 1,
    cpu_request: str | None = None,
    cpu_limit: str | None = None,
    memory_request: str | None = None,
    memory_limit: str | None = None,
    config_maps: int = 0,
    secrets: int = 0,
    volumes: int = 0,
) -> QuotaSpec:
    """
    Size a quota for a workload.

    Args:
        replicas: Desired replica count (invalid values count as 1)
        cpu_request: Per-instance CPU request (default 0.1)
        cpu_limit: Per-instance CPU limit (default 0.2)
        memory_request: Per-instance memory request (default 128Mi)
        memory_limit: Per-instance memory limit (default 256Mi)
        config_maps: Number of config maps the workload ships
        secrets: Number of secrets the workload ships
        volumes: Number of persistent volumes the workload ships

    Returns:
        QuotaSpec covering replicas + 1 instances
    """
    try:
        replica_count = int(replicas) if replicas else 1
    except (TypeError, ValueError):
        replica_count = 1
    replica_count = replica_count or 1
    instances = replica_count + 1

    cpu_req = _parse_float(cpu_request, 0.1)
    cpu_lim = _parse_float(cpu_limit, 0.2)
    mem_req = parse_memory_mi(memory_request or "128Mi")
    mem_lim = parse_memory_mi(memory_limit or "256Mi")

    workload_count = str(instances)
    return QuotaSpec(
        requests_cpu=f"{instances * cpu_req:.1f}",
        limits_cpu=f"{instances * cpu_lim:.1f}",
        requests_memory=format_memory(instances * mem_req),
        limits_memory=format_memory(instances * mem_lim),
        pods=workload_count,
        configmaps=str(3 + config_maps),
        pvcs=str(max(5, volumes)),
        secrets=str(3 + secrets),
        deployments=workload_count,
        replicasets=workload_count,
        statefulsets=workload_count,
    )


def quota_from_placeholders(values: dict[str, str], **counts: int) -> QuotaSpec:
    """Size a quota from resolved placeholder values (replicas, cpu_*, memory_*)."""
    lowered = {k.lower(): v for k, v in values.items()}
    replicas = next(
        (lowered[key] for key in ("replicas", "replica_count", "replica") if lowered.get(key)),
        None,
    )
    return calculate_quota(
        replicas=replicas,
        cpu_request=lowered.get("cpu_request"),
        cpu_limit=lowered.get("cpu_limit"),
        memory_request=lowered.get("memory_request"),
        memory_limit=lowered.get("memory_limit"),
        **counts,
    )


class ManifestGenerator:
    """Render namespace and quota manifests from Jinja2 templates."""

    def __init__(self, store: TemplateStore | None = None, validator: YAMLValidator | None = None):
        """
        Initialize the manifest generator.

        Args:
            store: Template store used to persist quota artifacts
            validator: YAML validator applied to every rendered manifest
        """
        template_dir = Path(__file__).parent / "manifests"
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.store = store
        self.validator = validator or YAMLValidator()

    def _context(self, name: str, version: str, namespace: str, **extra: Any) -> dict[str, Any]:
        return {
            "name": name,
            "version": version,
            "namespace": namespace,
            "created_by": CREATED_BY_LABEL,
            "generated_at": datetime.now().isoformat(timespec="seconds"),
            **extra,
        }

    def render_namespace(self, namespace: str, name: str = "") -> str:
        """Render a Namespace manifest."""
        template = self.env.get_template("namespace.yaml.j2")
        content = template.render(self._context(name, "", namespace))
        self.validator.validate_manifest(content, f"namespace {namespace}")
        return content

    def render_quota(self, name: str, version: str, namespace: str, quota: QuotaSpec) -> str:
        """Render a ResourceQuota manifest for one workload version."""
        template = self.env.get_template("quota.yaml.j2")
        content = template.render(self._context(name, version, namespace, quota=quota))
        self.validator.validate_manifest(content, f"quota {name}-{version}")
        return content

    def generate_quota(self, name: str, version: str, namespace: str, quota: QuotaSpec) -> Path:
        """
        Render and persist ``<name>-<version>-quota.yaml`` into the scripts directory.

        Returns:
            Path of the written file

        Raises:
            ValueError: If the generator has no store to write into
        """
        if self.store is None:
            raise ValueError("ManifestGenerator has no template store to write into")

        content = self.render_quota(name, version, namespace, quota)
        path = self.store.save_script(name, f"{name}-{version}-quota.yaml", content)
        self.validator.validate_file(path)
        logger.info(f"Generated quota for {name} {version} in namespace {namespace}")
        return path
