"""
tagstrings: translator-tagged string extraction and catalog synchronization.

Finds every call of a project's translator function (`i("Hello")`,
`i(f"Total: {count}")`), derives a stable key for each string, and adds the
missing ones to per-language catalogs, machine-translated when a translation
backend is configured.

License: MIT
"""

__version__ = "0.1.0"

from tagstrings.models import StringTable, TemplateRecord
from tagstrings.pipeline import PipelineResult, SyncConfig, SyncPipeline

__all__ = [
    "PipelineResult",
    "StringTable",
    "SyncConfig",
    "SyncPipeline",
    "TemplateRecord",
]
