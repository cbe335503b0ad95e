"""Filesystem-backed storage of workload templates and their artifacts.

Layout under the template root::

    <root>/<name>/**/<anything>-template.yaml     raw template
    <root>/<name>/config/<version>.yaml           config record
    <root>/<name>/deploy-scripts/                 per-resource artifacts
    <root>/<name>/<name>-<version>-final.yaml     materialized final artifact
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from deploypilot.errors import TemplateNotFoundError

logger = logging.getLogger(__name__)

TEMPLATE_FILE_PATTERN = re.compile(r"-template\.(yaml|yml)$")
SCRIPTS_DIR_NAME = "deploy-scripts"
CONFIG_DIR_NAME = "config"

# Workload names and versions become path segments
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ConfigRecord(BaseModel):
    """Per-version settings stored next to a template."""

    namespace: str | None = None
    placeholders: dict[str, str] = Field(default_factory=dict)


def _check_segment(value: str, what: str) -> str:
    if not _SEGMENT_PATTERN.match(value) or ".." in value:
        raise TemplateNotFoundError(f"Invalid {what}: {value!r}")
    return value


class TemplateStore:
    """Read templates and write generated artifacts under a root directory."""

    def __init__(self, root: str | Path):
        """
        Initialize the store.

        Args:
            root: Template root directory (one sub-directory per workload)
        """
        self.root = Path(root)
        logger.info(f"TemplateStore initialized with root: {self.root}")

    def workload_dir(self, name: str) -> Path:
        return self.root / _check_segment(name, "workload name")

    def scripts_dir(self, name: str) -> Path:
        return self.workload_dir(name) / SCRIPTS_DIR_NAME

    def config_path(self, name: str, version: str) -> Path:
        return self.workload_dir(name) / CONFIG_DIR_NAME / f"{_check_segment(version, 'version')}.yaml"

    def list_workloads(self) -> list[str]:
        """Names of all workload directories, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def find_template_file(self, name: str) -> Path:
        """
        Locate the template file of a workload.

        The workload directory is searched recursively in sorted order; the
        first file whose name ends in ``-template.yaml`` or ``-template.yml``
        wins.

        Raises:
            TemplateNotFoundError: If the workload or its template is missing
        """
        workload = self.workload_dir(name)
        if not workload.is_dir():
            raise TemplateNotFoundError(f"Workload not found: {name}")

        for path in sorted(workload.rglob("*")):
            if path.is_file() and TEMPLATE_FILE_PATTERN.search(path.name):
                logger.debug(f"Found template for {name}: {path}")
                return path

        raise TemplateNotFoundError(f"No template file found for workload: {name}")

    def read_template(self, name: str) -> str:
        """Read the raw template text of a workload."""
        return self.find_template_file(name).read_text(encoding="utf-8")

    def read_config(self, name: str, version: str) -> ConfigRecord | None:
        """
        Read the config record of a workload version.

        Returns:
            The record, or None if the version has no config file

        Raises:
            TemplateNotFoundError: If the config file exists but is not a mapping
        """
        path = self.config_path(name, version)
        if not path.is_file():
            logger.debug(f"No config record at {path}")
            return None

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise TemplateNotFoundError(f"Config record is not valid YAML: {path}", str(e)) from e
        if not isinstance(data, dict):
            raise TemplateNotFoundError(f"Config record must be a mapping: {path}")

        placeholders = {
            str(k).lower(): "" if v is None else str(v)
            for k, v in (data.get("placeholders") or {}).items()
        }
        return ConfigRecord(namespace=data.get("namespace") or None, placeholders=placeholders)

    def save_config(self, name: str, version: str, record: ConfigRecord) -> Path:
        """Write a config record, creating the config directory as needed."""
        path = self.config_path(name, version)
        data: dict[str, Any] = {"placeholders": dict(record.placeholders)}
        if record.namespace:
            data = {"namespace": record.namespace, **data}
        return self._write(path, yaml.safe_dump(data, sort_keys=False))

    def save_final(self, name: str, version: str, content: str) -> Path:
        """Persist the materialized final artifact in the workload root."""
        file_name = f"{name}-{_check_segment(version, 'version')}-final.yaml"
        return self._write(self.workload_dir(name) / file_name, content)

    def save_script(self, name: str, file_name: str, content: str) -> Path:
        """Persist a per-resource artifact into the workload's scripts directory."""
        return self._write(self.scripts_dir(name) / _check_segment(file_name, "file name"), content)

    def relative_path(self, path: Path) -> str:
        """Forward-slash path of a stored file relative to the template root."""
        return path.relative_to(self.root).as_posix()

    def _write(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {path}")
        return path
