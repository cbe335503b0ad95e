"""Substitute resolved placeholder values into template text."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from deploypilot.errors import UnresolvedPlaceholdersError
from deploypilot.templates.resolver import MARKER_PATTERN
from deploypilot.templates.validator import YAMLValidator

logger = logging.getLogger(__name__)

# Top-level "metadata:" opening a block mapping (not an inline flow mapping)
METADATA_LINE = re.compile(r"^metadata:\s*(?:#.*)?$")


@dataclass(frozen=True)
class MaterializedTemplate:
    """Final artifact text plus what happened while producing it."""

    content: str
    unresolved: list[str] = field(default_factory=list)
    namespace_injected: bool = False


def _marker_for(name: str) -> re.Pattern:
    # Matches ${name} and ${name#[...]} with the name compared case-insensitively
    return re.compile(
        r"\$\{\s*" + re.escape(name) + r"\s*(?:#\[[^\]]*\])?\s*\}",
        re.IGNORECASE,
    )


def substitute(template: str, values: dict[str, Any]) -> str:
    """
    Replace every marker of each placeholder that has a non-empty value.

    Placeholders without a value are left as-is.
    """
    content = template
    for name, value in values.items():
        if value is None or str(value) == "":
            continue
        replacement = str(value)
        content = _marker_for(name).sub(lambda _: replacement, content)
    return content


def find_unresolved(content: str) -> list[str]:
    """Names of markers still present in the text, in order of appearance."""
    names: list[str] = []
    for match in MARKER_PATTERN.finditer(content):
        name = match.group(1).lower()
        if name not in names:
            names.append(name)
    return names


def _metadata_without_namespace(docs: list[Any]) -> bool:
    for doc in docs:
        if isinstance(doc, dict) and "metadata" in doc:
            metadata = doc["metadata"]
            return not (isinstance(metadata, dict) and "namespace" in metadata)
    return False


def inject_namespace(content: str, namespace: str) -> tuple[str, bool]:
    """
    Insert ``namespace: <ns>`` right under the first top-level ``metadata:`` line.

    Returns:
        Tuple of (content, whether a line was inserted)
    """
    lines = content.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if not METADATA_LINE.match(line.rstrip("\r\n")):
            continue

        indent = 2
        for following in lines[index + 1:]:
            stripped = following.strip()
            if not stripped or stripped.startswith("#"):
                continue
            child_indent = len(following) - len(following.lstrip(" "))
            if child_indent > 0:
                indent = child_indent
            break

        newline = "\r\n" if line.endswith("\r\n") else "\n"
        if not line.endswith("\n"):
            lines[index] = line + newline
        lines.insert(index + 1, f"{' ' * indent}namespace: {namespace}{newline}")
        return "".join(lines), True

    return content, False


def materialize(
    template: str,
    values: dict[str, Any],
    namespace: str | None = None,
    strict: bool = False,
    validator: YAMLValidator | None = None,
) -> MaterializedTemplate:
    """
    Produce final artifact text from a raw template.

    Args:
        template: Raw template text
        values: Placeholder name -> resolved value
        namespace: Namespace to inject when the metadata block lacks one
        strict: If True, unresolved placeholders raise instead of being kept
        validator: YAML validator (default instance if not provided)

    Returns:
        MaterializedTemplate with the final text

    Raises:
        TemplateInvalidError: If the final text is not well-formed YAML
        UnresolvedPlaceholdersError: If strict and placeholders remain
    """
    validator = validator or YAMLValidator()

    content = substitute(template, values)
    docs = validator.parse(content, "materialized template")

    injected = False
    if namespace and _metadata_without_namespace(docs):
        content, injected = inject_namespace(content, namespace)
        if injected:
            validator.parse(content, "materialized template")
            logger.debug(f"Injected namespace '{namespace}' into metadata block")

    unresolved = find_unresolved(content)
    if unresolved:
        if strict:
            raise UnresolvedPlaceholdersError(unresolved)
        logger.warning(f"Materialized template keeps unresolved placeholders: {', '.join(unresolved)}")

    return MaterializedTemplate(content=content, unresolved=unresolved, namespace_injected=injected)
