"""Tests for output formatting and failure classification."""

import pytest

from deploypilot.errors import FailureCategory
from deploypilot.execution.formatter import classify_failure, failure_message, format_output


def test_stdout_lines_get_status_glyphs():
    stdout = (
        "deployment.apps/web created\n"
        "configmap/app configured\n"
        "service/web unchanged\n"
        "Release \"myapp\" has been upgraded.\n"
    )

    assert format_output(stdout) == (
        "✅ deployment.apps/web created\n"
        "🔄 configmap/app configured\n"
        "➖ service/web unchanged\n"
        "Release \"myapp\" has been upgraded."
    )


def test_stderr_is_appended_as_warnings():
    output = format_output("secret/db created\n", "Warning: resource is deprecated\n")

    assert output == "✅ secret/db created\n\n⚠️ Warnings:\nWarning: resource is deprecated"


def test_stderr_only():
    assert format_output("", "Warning: x") == "⚠️ Warnings:\nWarning: x"


def test_empty_output():
    assert format_output("", "") == ""


@pytest.mark.parametrize(
    "text,category",
    [
        ('Error from server (NotFound): configmaps "app" not found', FailureCategory.RESOURCE_MISSING),
        ("error: open /app/x.yaml: permission denied", FailureCategory.PERMISSION_DENIED),
        ("Unable to connect to the server: dial tcp: i/o timeout", FailureCategory.TIMEOUT),
        ("Command timed out after 30s", FailureCategory.TIMEOUT),
        ("error: unknown flag: --bogus", FailureCategory.GENERIC),
    ],
)
def test_classify_failure(text, category):
    assert classify_failure(text) == category


def test_every_category_has_a_message():
    for category in FailureCategory:
        assert failure_message(category)
