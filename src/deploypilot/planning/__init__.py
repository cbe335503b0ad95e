"""Artifact classification, command synthesis and plan assembly."""

from .classifier import classify_file_name, discover_artifacts, order_artifacts
from .commands import label_keys_for, synthesize_command
from .planner import build_plan, plan_from_artifacts, resolve_namespace

__all__ = [
    "build_plan",
    "classify_file_name",
    "discover_artifacts",
    "label_keys_for",
    "order_artifacts",
    "plan_from_artifacts",
    "resolve_namespace",
    "synthesize_command",
]
