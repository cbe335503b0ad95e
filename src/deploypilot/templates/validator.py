"""YAML validation for materialized templates and generated manifests."""

import logging
from pathlib import Path
from typing import Any

import yaml

from deploypilot.errors import TemplateInvalidError

logger = logging.getLogger(__name__)


class YAMLValidator:
    """Validate template output before it is persisted or executed."""

    # Required fields for a Kubernetes manifest
    MANIFEST_REQUIRED_FIELDS = [
        "apiVersion",
        "kind",
        "metadata.name",
    ]

    def parse(self, content: str, source: str = "<template>") -> list[Any]:
        """
        Parse YAML text into its documents.

        Supports both single-document and multi-document YAML.

        Args:
            content: YAML text
            source: Label used in error messages

        Returns:
            List of non-empty documents

        Raises:
            TemplateInvalidError: If YAML syntax is invalid or no document is present
        """
        try:
            docs = [doc for doc in yaml.safe_load_all(content) if doc is not None]
        except yaml.YAMLError as e:
            raise TemplateInvalidError(f"Invalid YAML syntax in {source}", str(e)) from e

        if not docs:
            raise TemplateInvalidError(
                f"No valid YAML documents found in {source}", "document is empty"
            )
        return docs

    def validate_yaml_syntax(self, content: str, source: str = "<template>") -> bool:
        """
        Validate YAML syntax by attempting to parse the text.

        Returns:
            True if valid YAML syntax

        Raises:
            TemplateInvalidError: If YAML syntax is invalid
        """
        docs = self.parse(content, source)
        logger.debug(f"YAML syntax valid: {source} ({len(docs)} document(s))")
        return True

    def validate_file(self, file_path: str | Path) -> bool:
        """Validate the YAML syntax of a file on disk."""
        path = Path(file_path)
        return self.validate_yaml_syntax(path.read_text(encoding="utf-8"), str(path))

    def _get_nested_field(self, data: dict[str, Any], field_path: str) -> Any | None:
        """
        Get nested field from dictionary using dot notation.

        Args:
            data: Dictionary to search
            field_path: Dot-separated field path (e.g., "metadata.name")

        Returns:
            Field value if found, None otherwise
        """
        current: Any = data
        for part in field_path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return None
        return current

    def validate_manifest(self, content: str, source: str = "<manifest>") -> bool:
        """
        Validate that every document is a Kubernetes object with the required fields.

        Raises:
            TemplateInvalidError: If a document is not a mapping or misses fields
        """
        for index, doc in enumerate(self.parse(content, source)):
            if not isinstance(doc, dict):
                raise TemplateInvalidError(
                    f"Document {index} in {source} is not a mapping", type(doc).__name__
                )
            missing = [f for f in self.MANIFEST_REQUIRED_FIELDS if self._get_nested_field(doc, f) is None]
            if missing:
                raise TemplateInvalidError(
                    f"Missing required fields in {source}", ", ".join(missing)
                )

        logger.debug(f"Manifest validation passed: {source}")
        return True
