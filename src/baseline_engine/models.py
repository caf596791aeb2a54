"""
Core data models for the SEO baseline engine.

All models are pure data structures that can be serialized and reused
by both the CLI and test suites that consume comparison results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class BaselineKind(str, Enum):
    """
    Payload shape discriminator.

    Controls which comparison semantics apply to an extracted value.
    """

    META_TAGS = "meta-tags"  # Flat map of tag key -> attributes
    JSON_LD = "json-ld"  # Ordered list of structured-data blocks

    @classmethod
    def parse(cls, value: "BaselineKind | str") -> "BaselineKind":
        """Convert a string such as 'json-ld' into a BaselineKind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported baseline type: {value}") from None


class DifferenceType(str, Enum):
    """Kinds of field-level discrepancy between two values."""

    ADDED = "added"
    REMOVED = "removed"
    TYPE_CHANGED = "type_changed"
    VALUE_CHANGED = "value_changed"
    ARRAY_LENGTH_CHANGED = "array_length_changed"


@dataclass(frozen=True)
class FieldDifference:
    """
    One discrepancy between a baseline value and a current value.

    Added/removed differences carry `value`; every other type carries
    `baseline` and `current` (array lengths for array_length_changed).
    """

    path: str
    type: DifferenceType
    value: Any = None
    baseline: Any = None
    current: Any = None

    def to_dict(self) -> dict:
        """Convert to a dictionary holding only the keys relevant to the type."""
        if self.type in (DifferenceType.ADDED, DifferenceType.REMOVED):
            return {"path": self.path, "type": self.type.value, "value": self.value}
        return {
            "path": self.path,
            "type": self.type.value,
            "baseline": self.baseline,
            "current": self.current,
        }


@dataclass
class Baseline:
    """
    A persisted snapshot of a previously accepted extracted value.

    Identified by page name and kind.
    """

    page_name: str
    kind: BaselineKind
    value: Any  # dict for meta-tags, list for json-ld
    last_updated: str | None = None

    @property
    def count(self) -> int:
        """Number of tags or structured-data blocks in the snapshot."""
        return len(self.value)


@dataclass
class MetaTagComparison:
    """Result of comparing a meta tag map with its baseline."""

    differences: dict[str, dict[str, Any]] = field(default_factory=dict)
    missing_tags: list[str] = field(default_factory=list)
    new_tags: list[str] = field(default_factory=list)
    baseline_created: bool = False

    kind = BaselineKind.META_TAGS

    @property
    def matches(self) -> bool:
        """True when no tag is missing, new, or changed."""
        return (
            len(self.differences) == 0
            and len(self.missing_tags) == 0
            and len(self.new_tags) == 0
        )

    @property
    def difference_count(self) -> int:
        return len(self.differences) + len(self.missing_tags) + len(self.new_tags)

    def to_dict(self) -> dict:
        return {
            "matches": self.matches,
            "differences": self.differences,
            "missingTags": self.missing_tags,
            "newTags": self.new_tags,
        }


@dataclass
class JsonLdDifference:
    """
    A structured-data block whose content differs from the baseline.

    For parse-error mismatches `baseline` and `current` hold the whole
    items and `field_differences` is empty.
    """

    index: int
    baseline: Any
    current: Any
    field_differences: list[FieldDifference] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {"index": self.index, "baseline": self.baseline, "current": self.current}
        if self.field_differences:
            data["fieldDifferences"] = [diff.to_dict() for diff in self.field_differences]
        return data


@dataclass
class JsonLdComparison:
    """Result of comparing a list of JSON-LD blocks with its baseline."""

    differences: list[JsonLdDifference] = field(default_factory=list)
    missing_data: list[dict[str, Any]] = field(default_factory=list)
    new_data: list[dict[str, Any]] = field(default_factory=list)
    baseline_created: bool = False

    kind = BaselineKind.JSON_LD

    @property
    def matches(self) -> bool:
        """True when no block is missing, new, or changed."""
        return (
            len(self.differences) == 0
            and len(self.missing_data) == 0
            and len(self.new_data) == 0
        )

    @property
    def difference_count(self) -> int:
        return len(self.differences) + len(self.missing_data) + len(self.new_data)

    def to_dict(self) -> dict:
        return {
            "matches": self.matches,
            "differences": [diff.to_dict() for diff in self.differences],
            "missingData": self.missing_data,
            "newData": self.new_data,
        }


ComparisonResult = MetaTagComparison | JsonLdComparison


@dataclass(frozen=True)
class PageTarget:
    """
    A named page to check.

    The name is used verbatim as the baseline file stem.
    """

    name: str
    url: str

    def __post_init__(self):
        """Validate name and URL format."""
        if not self.name or not isinstance(self.name, str):
            raise ValueError(f"Page name must be a non-empty string: {self.name}")

        if not self.url or not isinstance(self.url, str):
            raise ValueError(f"URL must be a non-empty string: {self.url}")

        url_lower = self.url.lower().strip()
        if not url_lower.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://: {self.url}")


@dataclass
class RawFetchResult:
    """
    Results from fetching a URL without JavaScript execution.
    """

    url: str  # Final URL after redirects
    original_url: str  # URL as requested
    status_code: int
    headers: dict[str, str]
    html: str
    fetch_time_ms: int

    @property
    def success(self) -> bool:
        """Check if the fetch was successful (2xx status)."""
        return 200 <= self.status_code < 300


@dataclass
class RenderedFetchResult:
    """
    Results from loading a URL in a browser.
    """

    url: str  # Final URL after redirects
    original_url: str  # URL as requested
    html: str
    success: bool
    fetch_time_ms: int
    used_fallback: bool = False  # Navigation fell back to domcontentloaded
    error_message: str | None = None


@dataclass
class PageCheck:
    """
    Outcome of checking (or re-baselining) one page.

    Combines the extracted value with the comparison result and any errors.
    """

    target: PageTarget
    kind: BaselineKind
    extracted: Any = None
    comparison: ComparisonResult | None = None
    baseline_updated: bool = False
    baseline_file: str | None = None

    fetch_errors: list[str] = field(default_factory=list)
    extraction_errors: list[str] = field(default_factory=list)
    storage_errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the page was fetched, extracted and compared (or saved) without errors."""
        return (
            len(self.fetch_errors) == 0
            and len(self.extraction_errors) == 0
            and len(self.storage_errors) == 0
            and (self.comparison is not None or self.baseline_updated)
        )

    @property
    def has_differences(self) -> bool:
        """Check if the comparison found any drift from the baseline."""
        return self.comparison is not None and not self.comparison.matches

    @property
    def passed(self) -> bool:
        """A check passes when it succeeded and matches its baseline."""
        return self.success and not self.has_differences

    @property
    def errors(self) -> list[str]:
        return (
            [f"Fetch: {e}" for e in self.fetch_errors]
            + [f"Extraction: {e}" for e in self.extraction_errors]
            + [f"Storage: {e}" for e in self.storage_errors]
        )

    def to_dict(self) -> dict:
        """
        Convert the check to a dictionary for report export.
        """
        return {
            "name": self.target.name,
            "url": self.target.url,
            "kind": self.kind.value,
            "extracted": self.extracted,
            "count": len(self.extracted) if self.extracted is not None else 0,
            "comparisonResult": self.comparison.to_dict() if self.comparison else None,
            "baselineCreated": bool(self.comparison and self.comparison.baseline_created),
            "baselineUpdated": self.baseline_updated,
            "baselineFile": self.baseline_file,
            "errors": self.errors,
            "success": self.success,
            "passed": self.passed,
        }


@dataclass
class RunResult:
    """
    Complete results for a batch of pages.
    """

    started_at: datetime
    finished_at: datetime | None
    kind: BaselineKind
    update_mode: bool
    checks: list[PageCheck]

    @property
    def pages_processed(self) -> int:
        return len(self.checks)

    @property
    def pages_passed(self) -> int:
        return sum(1 for check in self.checks if check.passed)

    @property
    def pages_failed(self) -> int:
        return self.pages_processed - self.pages_passed

    @property
    def pass_rate(self) -> float:
        """Percentage of pages that passed."""
        if self.pages_processed == 0:
            return 0.0
        return round((self.pages_passed / self.pages_processed) * 100, 2)

    def get_failed_checks(self) -> list[PageCheck]:
        """Get all checks that could not be completed."""
        return [check for check in self.checks if not check.success]

    def get_checks_with_differences(self) -> list[PageCheck]:
        """Get all checks that drifted from their baseline."""
        return [check for check in self.checks if check.has_differences]
