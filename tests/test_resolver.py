"""Tests for placeholder scanning and categorization."""

import pytest

from deploypilot.errors import PlaceholderScanError
from deploypilot.shared.schemas import PlaceholderCategory
from deploypilot.templates.resolver import categorize, declared_defaults, scan_document, scan_template

from conftest import TEMPLATE_TEXT


def test_replica_count_placeholder():
    """A replica marker with inline defaults lands in the deployment category."""
    catalog = scan_template("replicas: ${replica_count#[1,2,3]}\n")

    placeholder = catalog.get("replica_count")
    assert placeholder is not None
    assert placeholder.category == PlaceholderCategory.DEPLOYMENT
    assert placeholder.default_values == ["1", "2", "3"]


@pytest.mark.parametrize(
    "name,category",
    [
        ("namespace", PlaceholderCategory.BASIC),
        ("app_name", PlaceholderCategory.BASIC),
        ("node_name", PlaceholderCategory.BASIC),
        ("image", PlaceholderCategory.IMAGE),
        ("repository", PlaceholderCategory.IMAGE),
        ("Image_Tag", PlaceholderCategory.IMAGE),
        ("service_type", PlaceholderCategory.SERVICE),
        ("node_port", PlaceholderCategory.SERVICE),
        ("cpu_limit", PlaceholderCategory.RESOURCES),
        ("memory_request", PlaceholderCategory.RESOURCES),
        ("deployment_strategy", PlaceholderCategory.DEPLOYMENT),
        ("node_selector", PlaceholderCategory.NODE),
        ("pod_affinity", PlaceholderCategory.NODE),
        ("log_level", PlaceholderCategory.MISC),
    ],
)
def test_categorize(name, category):
    assert categorize(name) == category


def test_scan_walks_keys_values_and_sequences():
    """Markers in mapping keys, nested values and list items are all found, in order."""
    catalog = scan_document(
        {
            "metadata": {"name": "${app_name}", "labels": {"${label_key}": "x"}},
            "args": ["--level=${log_level}", 3, None],
        }
    )

    assert catalog.names() == ["app_name", "label_key", "log_level"]


def test_first_default_list_wins():
    """Later occurrences never replace the first declared defaults."""
    text = "a: ${tag#[1.0]}\nb: ${tag#[2.0]}\nc: ${tag}\n"

    catalog = scan_template(text)

    assert catalog.get("tag").default_values == ["1.0"]


def test_empty_marker_then_defaults():
    """A bare first occurrence does not block a later default list."""
    catalog = scan_template("a: ${tag}\nb: ${tag#[2.0, 3.0]}\n")

    assert catalog.get("tag").default_values == ["2.0", "3.0"]


def test_trailing_comment_defaults():
    """Comment lists after a composite value apply to its markers in order."""
    catalog = scan_template("image: ${repository}:${tag}  #[registry.local] #[1.0, 1.1]\n")

    assert catalog.get("repository").default_values == ["registry.local"]
    assert catalog.get("tag").default_values == ["1.0", "1.1"]


def test_declared_defaults_skip_inline_markers():
    """A trailing list pairs with the first marker that has no inline list."""
    declared = declared_defaults("v: ${a#[x]}-${b}  #[y]\n")

    assert declared == {"a": ["x"], "b": ["y"]}


def test_names_are_lowercased():
    catalog = scan_template("image: ${Image_Tag}\nother: ${IMAGE_TAG#[v1]}\n")

    assert catalog.names() == ["image_tag"]
    assert catalog.get("IMAGE_TAG").default_values == ["v1"]


def test_scan_is_idempotent():
    assert scan_template(TEMPLATE_TEXT) == scan_template(TEMPLATE_TEXT)


def test_catalog_grouping_follows_category_order():
    """Groups follow category order; placeholders keep discovery order inside a group."""
    catalog = scan_template(TEMPLATE_TEXT)

    grouped = catalog.by_category()

    assert list(grouped) == [
        PlaceholderCategory.BASIC,
        PlaceholderCategory.IMAGE,
        PlaceholderCategory.RESOURCES,
        PlaceholderCategory.DEPLOYMENT,
    ]
    assert [p.name for p in grouped[PlaceholderCategory.IMAGE]] == ["repository", "tag"]
    assert [p.name for p in grouped[PlaceholderCategory.RESOURCES]] == ["cpu_request", "memory_request"]


def test_multi_document_template():
    catalog = scan_template("a: ${first}\n---\nb: ${second}\n")

    assert catalog.names() == ["first", "second"]


def test_unparseable_template_raises():
    with pytest.raises(PlaceholderScanError):
        scan_template("key: [unclosed\n  - ${name}\n")


def test_with_values_sets_resolved_value():
    catalog = scan_template("replicas: ${replica_count}\nname: ${app_name}\n")

    resolved = catalog.with_values({"REPLICA_COUNT": "3", "app_name": ""})

    assert resolved.get("replica_count").resolved_value == "3"
    assert resolved.get("app_name").resolved_value is None
