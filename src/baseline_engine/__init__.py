"""
SEO Baseline Engine.

Core engine for checking a page's meta tags and JSON-LD structured data against
stored baselines. Designed to be reusable by the CLI and by test suites.
"""

from .comparator import BaselineComparator, compare_with_baseline, update_baseline
from .differ import FieldDiffer, find_field_differences
from .job_runner import JobRunner
from .models import (
    Baseline,
    BaselineKind,
    DifferenceType,
    FieldDifference,
    JsonLdComparison,
    JsonLdDifference,
    MetaTagComparison,
    PageCheck,
    PageTarget,
    RunResult,
)
from .storage import BaselineNotFoundError, FileBaselineStore, StorageError, ensure_directory

__all__ = [
    # Models
    "Baseline",
    "BaselineKind",
    "DifferenceType",
    "FieldDifference",
    "JsonLdComparison",
    "JsonLdDifference",
    "MetaTagComparison",
    "PageCheck",
    "PageTarget",
    "RunResult",
    # Diff engine
    "FieldDiffer",
    "find_field_differences",
    "BaselineComparator",
    "compare_with_baseline",
    "update_baseline",
    # Storage
    "FileBaselineStore",
    "BaselineNotFoundError",
    "StorageError",
    "ensure_directory",
    # Main entry point
    "JobRunner",
]
