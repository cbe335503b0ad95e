"""Placeholder scanning for deployment templates.

A template is a YAML document whose values (or keys) carry markers of the
form ``${name}`` or ``${name#[default1, default2]}``. Defaults may also be
declared in a trailing comment on the same line::

    image: ${repository}:${tag}  #[registry.local] #[1.0, 1.1]

The resolver walks the parsed document, collects every marker and returns a
catalog grouped by semantic category.
"""

import logging
import re
from typing import Any

import yaml

from deploypilot.errors import PlaceholderScanError
from deploypilot.shared.schemas import Placeholder, PlaceholderCatalog, PlaceholderCategory

logger = logging.getLogger(__name__)

# ${name} or ${name#[a, b]}
MARKER_PATTERN = re.compile(r"\$\{\s*([^}#\s]+)\s*(?:#\[([^\]]*)\])?\s*\}")

# "#[a, b]" used as a YAML comment after a marker
COMMENT_DEFAULTS_PATTERN = re.compile(r"(?:^|\s)#\[([^\]]*)\]")

# Ordered category rules: first rule with a matching substring wins.
# "namespace" and "*_name" land in basic before "node_name" can reach node,
# and "node_port" lands in service before node.
CATEGORY_RULES: tuple[tuple[PlaceholderCategory, tuple[str, ...]], ...] = (
    (PlaceholderCategory.BASIC, ("namespace", "name")),
    (PlaceholderCategory.IMAGE, ("image", "repository", "tag")),
    (PlaceholderCategory.SERVICE, ("service", "port")),
    (PlaceholderCategory.RESOURCES, ("cpu", "memory")),
    (PlaceholderCategory.DEPLOYMENT, ("replica", "deployment")),
    (PlaceholderCategory.NODE, ("node", "affinity")),
)


def categorize(name: str) -> PlaceholderCategory:
    """Assign a placeholder name to its category using the ordered rule table."""
    lowered = name.lower()
    for category, needles in CATEGORY_RULES:
        if any(needle in lowered for needle in needles):
            return category
    return PlaceholderCategory.MISC


def parse_default_list(raw: str) -> list[str]:
    """Split a ``#[...]`` body into its stripped, non-empty values."""
    return [value.strip() for value in raw.split(",") if value.strip()]


def _record(found: dict[str, list[str]], name: str, defaults: list[str]) -> None:
    """Register a name; the first non-empty default list seen for it is kept."""
    key = name.lower()
    if key not in found:
        found[key] = defaults
    elif not found[key] and defaults:
        found[key] = defaults


def _scan_string(value: str, found: dict[str, list[str]]) -> None:
    for match in MARKER_PATTERN.finditer(value):
        defaults = parse_default_list(match.group(2)) if match.group(2) is not None else []
        _record(found, match.group(1), defaults)


def _walk(node: Any, found: dict[str, list[str]]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            _walk(key, found)
            _walk(value, found)
    elif isinstance(node, (list, tuple)):
        for item in node:
            _walk(item, found)
    elif isinstance(node, str):
        _scan_string(node, found)


def declared_defaults(text: str) -> dict[str, list[str]]:
    """
    Collect default lists in the order they are written in the text.

    Inline ``${name#[...]}`` lists and trailing ``#[...]`` comments are both
    declarations. Markers on a line that carry no inline default are paired,
    in order, with the comment lists that follow them. The first non-empty
    declaration of a name wins.
    """
    declared: dict[str, list[str]] = {}
    for line in text.splitlines():
        markers = list(MARKER_PATTERN.finditer(line))
        if not markers:
            continue
        tail = MARKER_PATTERN.sub("", line)
        comment_lists = [parse_default_list(raw) for raw in COMMENT_DEFAULTS_PATTERN.findall(tail)]
        bare = iter(comment_lists)
        for match in markers:
            if match.group(2) is not None:
                defaults = parse_default_list(match.group(2))
            else:
                defaults = next(bare, [])
            name = match.group(1).lower()
            if defaults and not declared.get(name):
                declared[name] = defaults
    return declared


def scan_document(document: Any) -> PlaceholderCatalog:
    """
    Build a catalog from an already parsed template structure.

    Args:
        document: Parsed YAML (mapping, sequence or scalar)

    Returns:
        Catalog in first-discovery order
    """
    found: dict[str, list[str]] = {}
    _walk(document, found)
    return _build_catalog(found)


def scan_template(text: str) -> PlaceholderCatalog:
    """
    Scan template text for placeholders.

    Args:
        text: Raw template text (single or multi-document YAML)

    Returns:
        Catalog of placeholders with categories and default values

    Raises:
        PlaceholderScanError: If the template is not parseable YAML
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise PlaceholderScanError("Template could not be parsed for placeholder scanning", str(e)) from e

    found: dict[str, list[str]] = {}
    for document in documents:
        _walk(document, found)

    # The walk fixes which names exist and their order; the text fixes which
    # declaration came first, including comments the parser dropped.
    for name, defaults in declared_defaults(text).items():
        if name in found:
            found[name] = defaults

    catalog = _build_catalog(found)
    logger.debug(f"Scanned template: {len(catalog.placeholders)} placeholder(s)")
    return catalog


def _build_catalog(found: dict[str, list[str]]) -> PlaceholderCatalog:
    return PlaceholderCatalog(
        placeholders=[
            Placeholder(name=name, category=categorize(name), default_values=list(defaults))
            for name, defaults in found.items()
        ]
    )
