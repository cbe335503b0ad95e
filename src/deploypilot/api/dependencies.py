"""Shared dependencies for API routes.

This module provides singleton instances used by the API routes. All
shared state is initialized here, lazily, from the process settings.
"""

import logging

from deploypilot.config import Settings, get_settings
from deploypilot.execution import CommandRunner, ExecutionEngine, RunRegistry
from deploypilot.templates import ManifestGenerator, TemplateStore, YAMLValidator

logger = logging.getLogger(__name__)

# Singleton instances
_template_store: TemplateStore | None = None
_yaml_validator: YAMLValidator | None = None
_manifest_generator: ManifestGenerator | None = None
_command_runner: CommandRunner | None = None
_execution_engine: ExecutionEngine | None = None
_run_registry: RunRegistry | None = None


def get_app_settings() -> Settings:
    """Get the process settings."""
    return get_settings()


def get_template_store() -> TemplateStore:
    """Get the template store singleton."""
    global _template_store
    if _template_store is None:
        _template_store = TemplateStore(get_settings().template_root)
    return _template_store


def get_yaml_validator() -> YAMLValidator:
    """Get the YAML validator singleton."""
    global _yaml_validator
    if _yaml_validator is None:
        _yaml_validator = YAMLValidator()
    return _yaml_validator


def get_manifest_generator() -> ManifestGenerator:
    """Get the manifest generator singleton."""
    global _manifest_generator
    if _manifest_generator is None:
        _manifest_generator = ManifestGenerator(store=get_template_store(), validator=get_yaml_validator())
    return _manifest_generator


def get_command_runner() -> CommandRunner:
    """Get the command runner singleton."""
    global _command_runner
    if _command_runner is None:
        _command_runner = CommandRunner(work_dir=get_settings().work_dir)
    return _command_runner


def get_execution_engine() -> ExecutionEngine:
    """Get the execution engine singleton."""
    global _execution_engine
    if _execution_engine is None:
        _execution_engine = ExecutionEngine(runner=get_command_runner())
    return _execution_engine


def get_run_registry() -> RunRegistry:
    """Get the background run registry singleton."""
    global _run_registry
    if _run_registry is None:
        _run_registry = RunRegistry(engine_factory=lambda: ExecutionEngine(runner=get_command_runner()))
    return _run_registry


def reset_dependencies() -> None:
    """Drop all singletons so they are rebuilt from fresh settings."""
    global _template_store, _yaml_validator, _manifest_generator
    global _command_runner, _execution_engine, _run_registry
    _template_store = None
    _yaml_validator = None
    _manifest_generator = None
    _command_runner = None
    _execution_engine = None
    _run_registry = None
    get_settings.cache_clear()
    logger.debug("API dependencies reset")
