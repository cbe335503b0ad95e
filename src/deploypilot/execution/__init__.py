"""Plan execution: process runner, output formatting, engine and background runs."""

from .engine import ExecutionEngine
from .formatter import classify_failure, format_output
from .runner import CommandRunner, RunOutput
from .runs import RunRegistry

__all__ = [
    "CommandRunner",
    "ExecutionEngine",
    "RunOutput",
    "RunRegistry",
    "classify_failure",
    "format_output",
]
