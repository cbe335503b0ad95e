"""Template scanning, materialization, validation and storage."""

from .generator import ManifestGenerator, QuotaSpec, calculate_quota, quota_from_placeholders
from .materializer import MaterializedTemplate, materialize
from .resolver import categorize, scan_document, scan_template
from .store import ConfigRecord, TemplateStore
from .validator import YAMLValidator

__all__ = [
    "ConfigRecord",
    "ManifestGenerator",
    "MaterializedTemplate",
    "QuotaSpec",
    "TemplateStore",
    "YAMLValidator",
    "calculate_quota",
    "categorize",
    "materialize",
    "quota_from_placeholders",
    "scan_document",
    "scan_template",
]
