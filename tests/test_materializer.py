"""Tests for template materialization."""

import pytest
import yaml

from deploypilot.errors import TemplateInvalidError, UnresolvedPlaceholdersError
from deploypilot.templates.materializer import find_unresolved, inject_namespace, materialize
from deploypilot.templates.resolver import scan_template

DEPLOYMENT_TEMPLATE = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: ${app_name}
spec:
  replicas: ${replica_count#[1,2,3]}
"""


def test_replica_count_round_trip():
    """Scanning finds replica_count and materializing sets replicas to the chosen value."""
    catalog = scan_template(DEPLOYMENT_TEMPLATE)
    assert catalog.get("replica_count").default_values == ["1", "2", "3"]

    result = materialize(DEPLOYMENT_TEMPLATE, {"app_name": "web", "replica_count": "3"})

    assert "replicas: 3" in result.content
    assert yaml.safe_load(result.content)["spec"]["replicas"] == 3
    assert result.unresolved == []


def test_namespace_injection():
    """A missing metadata namespace is inserted with the block's indentation."""
    result = materialize(DEPLOYMENT_TEMPLATE, {"app_name": "web", "replica_count": "2"}, namespace="team-a")

    assert result.namespace_injected
    assert "metadata:\n  namespace: team-a\n  name: web\n" in result.content
    assert yaml.safe_load(result.content)["metadata"]["namespace"] == "team-a"


def test_existing_namespace_is_kept():
    template = "apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: cfg\n  namespace: prod\n"

    result = materialize(template, {}, namespace="team-a")

    assert not result.namespace_injected
    assert result.content == template


def test_no_namespace_no_injection():
    result = materialize(DEPLOYMENT_TEMPLATE, {"app_name": "web", "replica_count": "1"})

    assert not result.namespace_injected
    assert "namespace" not in yaml.safe_load(result.content)["metadata"]


def test_injection_into_empty_metadata_block():
    content, injected = inject_namespace("kind: Namespace\nmetadata:\nspec: {}\n", "team-a")

    assert injected
    assert content == "kind: Namespace\nmetadata:\n  namespace: team-a\nspec: {}\n"


def test_injection_follows_deeper_indentation():
    content, injected = inject_namespace("metadata:\n    name: web\n", "team-a")

    assert injected
    assert content == "metadata:\n    namespace: team-a\n    name: web\n"


def test_replacement_is_case_insensitive():
    result = materialize("image: ${Image_Tag#[v1, v2]}\nalso: ${IMAGE_TAG}\n", {"image_tag": "v2"})

    assert result.content == "image: v2\nalso: v2\n"


def test_empty_values_leave_markers():
    result = materialize(DEPLOYMENT_TEMPLATE, {"app_name": "", "replica_count": "2"})

    assert "${app_name}" in result.content
    assert result.unresolved == ["app_name"]


def test_unresolved_placeholders_are_reported():
    result = materialize(DEPLOYMENT_TEMPLATE, {})

    assert result.unresolved == ["app_name", "replica_count"]


def test_strict_mode_rejects_unresolved():
    with pytest.raises(UnresolvedPlaceholdersError) as exc_info:
        materialize(DEPLOYMENT_TEMPLATE, {"app_name": "web"}, strict=True)

    assert exc_info.value.names == ["replica_count"]


def test_invalid_result_raises():
    """A value that breaks the YAML structure is rejected with the parse error."""
    with pytest.raises(TemplateInvalidError) as exc_info:
        materialize(DEPLOYMENT_TEMPLATE, {"app_name": "a: b: c", "replica_count": "1"})

    assert exc_info.value.parse_error


def test_materialization_is_deterministic():
    values = {"app_name": "web", "replica_count": "2"}

    first = materialize(DEPLOYMENT_TEMPLATE, values, namespace="team-a")
    second = materialize(DEPLOYMENT_TEMPLATE, values, namespace="team-a")

    assert first == second


def test_find_unresolved_order():
    assert find_unresolved("a: ${B}\nb: ${a#[x]}\nc: ${b}\n") == ["b", "a"]
