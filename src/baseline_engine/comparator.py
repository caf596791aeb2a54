"""
Comparison orchestrator for checking extracted SEO metadata against baselines.

Loads (or creates) a page's baseline, compares it with the freshly extracted
value using kind-specific semantics and shapes the result.
"""

import logging
from pathlib import Path
from typing import Any

from .differ import FieldDiffer
from .models import (
    BaselineKind,
    ComparisonResult,
    JsonLdComparison,
    JsonLdDifference,
    MetaTagComparison,
)
from .storage import BaselineNotFoundError, BaselineStore, FileBaselineStore

logger = logging.getLogger(__name__)


class BaselineComparator:
    """
    Compares extracted values with stored baselines.

    A page seen for the first time has its extracted value stored as the new
    baseline and is reported as matching. Whatever the first run captured,
    including a wrong value, becomes the reference until `update_baseline`
    replaces it.
    """

    def __init__(self, store: BaselineStore, differ: FieldDiffer | None = None):
        """
        Initialize the comparator.

        Args:
            store: Baseline store owning all baseline reads and writes
            differ: Field-level differ for structured data (default: FieldDiffer())
        """
        self.store = store
        self.differ = differ or FieldDiffer()

    @classmethod
    def for_directory(cls, baseline_path: str | Path) -> "BaselineComparator":
        """Create a comparator backed by a FileBaselineStore."""
        return cls(FileBaselineStore(baseline_path))

    def compare(self, extracted: Any, page_name: str, kind: BaselineKind | str) -> ComparisonResult:
        """
        Compare an extracted value with the page's baseline.

        Args:
            extracted: Meta tag map (meta-tags) or list of JSON-LD blocks (json-ld)
            page_name: Page identifier, used as the baseline file stem
            kind: Baseline kind

        Returns:
            MetaTagComparison or JsonLdComparison

        Raises:
            ValueError: If the kind is not supported
            StorageError: If the baseline cannot be read or created
        """
        kind = BaselineKind.parse(kind)

        try:
            baseline = self.store.load(page_name, kind)
        except BaselineNotFoundError:
            location = self.store.save(page_name, kind, extracted, timestamp=False)
            logger.warning(
                "Baseline file not found for %s. Created a new %s baseline at %s; "
                "the current value is now the reference.",
                page_name,
                kind.value,
                location,
            )
            return self._empty_result(kind)

        if kind == BaselineKind.JSON_LD:
            result = self.compare_json_ld(extracted, baseline.value)
        else:
            result = self.compare_meta_tags(extracted, baseline.value)

        logger.debug(
            "Compared %s for %s: %s",
            kind.value,
            page_name,
            "match" if result.matches else f"{result.difference_count} difference(s)",
        )
        return result

    def update_baseline(self, extracted: Any, page_name: str, kind: BaselineKind | str) -> str:
        """
        Overwrite the page's baseline with the current value, skipping comparison.

        Returns:
            Location of the updated baseline

        Raises:
            StorageError: If the baseline cannot be written
        """
        kind = BaselineKind.parse(kind)
        location = self.store.save(page_name, kind, extracted, timestamp=True)
        logger.info("Updated baseline file: %s", location)
        return location

    def compare_meta_tags(
        self, meta_tags: dict[str, dict], baseline_meta_tags: dict[str, dict]
    ) -> MetaTagComparison:
        """
        Compare meta tag maps by key and `content` value only.

        Args:
            meta_tags: Current tag map
            baseline_meta_tags: Baseline tag map

        Returns:
            MetaTagComparison
        """
        result = MetaTagComparison()

        for key, baseline_tag in baseline_meta_tags.items():
            if key not in meta_tags:
                result.missing_tags.append(key)
                continue

            baseline_content = baseline_tag.get("content")
            current_content = meta_tags[key].get("content")
            if baseline_content != current_content:
                result.differences[key] = {
                    "baseline": baseline_content,
                    "current": current_content,
                }

        result.new_tags.extend(key for key in meta_tags if key not in baseline_meta_tags)

        return result

    def compare_json_ld(
        self, json_ld_data: list[dict], baseline_json_ld: list[dict]
    ) -> JsonLdComparison:
        """
        Compare lists of JSON-LD blocks positionally.

        Args:
            json_ld_data: Current blocks ({index, data} or {index, error, rawContent})
            baseline_json_ld: Baseline blocks

        Returns:
            JsonLdComparison
        """
        result = JsonLdComparison()

        for i in range(len(json_ld_data), len(baseline_json_ld)):
            result.missing_data.append({"index": i, "data": baseline_json_ld[i].get("data")})

        for i in range(len(baseline_json_ld), len(json_ld_data)):
            result.new_data.append({"index": i, "data": json_ld_data[i].get("data")})

        for i in range(min(len(baseline_json_ld), len(json_ld_data))):
            baseline_item = baseline_json_ld[i]
            current_item = json_ld_data[i]

            # Unparseable blocks are compared by their error message only
            if baseline_item.get("error") or current_item.get("error"):
                if baseline_item.get("error") != current_item.get("error"):
                    result.differences.append(
                        JsonLdDifference(index=i, baseline=baseline_item, current=current_item)
                    )
                continue

            # Key order and 5 vs 5.0 are not changes
            baseline_data = baseline_item.get("data")
            current_data = current_item.get("data")
            field_differences = self.differ.compare(baseline_data, current_data)
            if field_differences:
                result.differences.append(
                    JsonLdDifference(
                        index=i,
                        baseline=baseline_data,
                        current=current_data,
                        field_differences=field_differences,
                    )
                )

        return result

    def _empty_result(self, kind: BaselineKind) -> ComparisonResult:
        if kind == BaselineKind.JSON_LD:
            return JsonLdComparison(baseline_created=True)
        return MetaTagComparison(baseline_created=True)


def compare_with_baseline(
    extracted: Any, page_name: str, baseline_path: str | Path, kind: BaselineKind | str
) -> ComparisonResult:
    """Compare an extracted value with the baseline stored under `baseline_path`."""
    return BaselineComparator.for_directory(baseline_path).compare(extracted, page_name, kind)


def update_baseline(
    extracted: Any, page_name: str, baseline_path: str | Path, kind: BaselineKind | str
) -> str:
    """Overwrite the baseline stored under `baseline_path` with the current value."""
    return BaselineComparator.for_directory(baseline_path).update_baseline(
        extracted, page_name, kind
    )
