"""
Storage layer for baselines and run reports.

Provides an abstract baseline store with a file-based implementation, plus
file export of run results in CSV and JSON.
"""

import csv
import json
import logging
import os
import stat
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import Baseline, BaselineKind, RunResult

logger = logging.getLogger(__name__)

# Payload and count keys of the baseline file, per kind
BASELINE_KEYS = {
    BaselineKind.META_TAGS: ("metaTags", "metaTagCount"),
    BaselineKind.JSON_LD: ("jsonLdData", "count"),
}


class StorageError(Exception):
    """Base exception for storage errors."""

    pass


class BaselineNotFoundError(StorageError):
    """Raised when no baseline has been stored for a page yet."""

    def __init__(self, page_name: str, kind: BaselineKind, path: Path):
        super().__init__(f"No {kind.value} baseline for '{page_name}' at {path}")
        self.page_name = page_name
        self.kind = kind
        self.path = path


def ensure_directory(path: str | Path) -> Path:
    """
    Create a directory (and its parents) if it doesn't exist.

    Args:
        path: Directory to create

    Returns:
        The directory as a Path

    Raises:
        StorageError: If the path exists as a non-directory or cannot be created
    """
    directory = Path(path)

    if directory.exists() and not directory.is_dir():
        raise StorageError(f"Not a directory: {directory}")

    if not directory.exists():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory {directory}: {e}") from e
        logger.info("Created directory: %s", directory)

    return directory


def _file_mode(path: Path) -> int:
    """Mode of the existing file, or 0666 masked by the process umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON to a temp file next to `path` and rename it into place.

    Readers see either the old file or the new one, never a partial write.
    """
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        # mkstemp creates 0600; give the file the mode open() would
        os.chmod(temp_name, _file_mode(path))
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


class BaselineStore(ABC):
    """
    Abstract interface for baseline storage backends.
    """

    @abstractmethod
    def load(self, page_name: str, kind: BaselineKind) -> Baseline:
        """
        Load the stored baseline for a page.

        Raises:
            BaselineNotFoundError: If no baseline exists yet
            StorageError: If the baseline exists but cannot be read
        """
        pass

    @abstractmethod
    def save(
        self, page_name: str, kind: BaselineKind, value: Any, timestamp: bool = True
    ) -> str:
        """
        Replace the stored baseline for a page.

        Args:
            page_name: Page identifier
            kind: Baseline kind
            value: Extracted value to store
            timestamp: Whether to record a lastUpdated timestamp

        Returns:
            Location of the saved baseline

        Raises:
            StorageError: If the save operation fails
        """
        pass

    @abstractmethod
    def exists(self, page_name: str, kind: BaselineKind) -> bool:
        """
        Check whether a readable baseline of the given kind is stored for a page.

        A missing or unreadable baseline, or one holding only the other kind, is
        reported as absent.
        """
        pass


class FileBaselineStore(BaselineStore):
    """
    Stores one JSON file per page under a root directory.

    Files are named `{page_name}-baseline.json`.
    """

    def __init__(self, baseline_directory: str | Path):
        """
        Initialize file baseline storage.

        Args:
            baseline_directory: Directory holding baseline files (created if missing)
        """
        self.baseline_directory = ensure_directory(baseline_directory)

    def path_for(self, page_name: str) -> Path:
        return self.baseline_directory / f"{page_name}-baseline.json"

    def exists(self, page_name: str, kind: BaselineKind) -> bool:
        try:
            self.load(page_name, kind)
        except StorageError:
            return False
        return True

    def load(self, page_name: str, kind: BaselineKind) -> Baseline:
        kind = BaselineKind.parse(kind)
        baseline_file = self.path_for(page_name)

        try:
            with open(baseline_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise BaselineNotFoundError(page_name, kind, baseline_file) from None
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read baseline {baseline_file}: {e}") from e

        value_key, _ = BASELINE_KEYS[kind]
        if not isinstance(data, dict) or value_key not in data:
            raise StorageError(f"Baseline {baseline_file} has no '{value_key}' section")

        return Baseline(
            page_name=page_name,
            kind=kind,
            value=data[value_key],
            last_updated=data.get("lastUpdated"),
        )

    def save(
        self, page_name: str, kind: BaselineKind, value: Any, timestamp: bool = True
    ) -> str:
        kind = BaselineKind.parse(kind)
        baseline_file = self.path_for(page_name)
        value_key, count_key = BASELINE_KEYS[kind]

        data: dict[str, Any] = {value_key: value, count_key: len(value)}
        if timestamp:
            data["lastUpdated"] = datetime.now(timezone.utc).isoformat()

        try:
            write_json_atomic(baseline_file, data)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save baseline {baseline_file}: {e}") from e

        return str(baseline_file)


class FileReportStorage:
    """
    Exports run results to CSV or JSON files.
    """

    def __init__(self, output_directory: str | Path = "."):
        """
        Initialize report storage.

        Args:
            output_directory: Directory to save report files (default: current directory)
        """
        self.output_directory = ensure_directory(output_directory)

    def save(self, result: RunResult, format: str = "json", output_path: str | None = None) -> str:
        """
        Save run results to file.

        Args:
            result: RunResult to save
            format: Output format ('csv' or 'json')
            output_path: Optional output file name. If not provided, generates one.

        Returns:
            Path to the saved file

        Raises:
            StorageError: If save operation fails
        """
        format_lower = format.lower()

        if format_lower not in ("csv", "json"):
            raise StorageError(f"Unsupported format: {format}. Use 'csv' or 'json'.")

        if output_path is None:
            timestamp = result.started_at.strftime("%Y%m%d_%H%M%S")
            output_path = f"{result.kind.value}_results_{timestamp}.{format_lower}"

        output_file_path = self.output_directory / output_path

        try:
            if format_lower == "csv":
                self._save_csv(result, output_file_path)
            else:
                self._save_json(result, output_file_path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save results: {e}") from e

        logger.info("Report saved to %s", output_file_path)
        return str(output_file_path)

    def _save_csv(self, result: RunResult, output_path: Path):
        """
        Save results to CSV format, one row per page.
        """
        with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
            csvfile.write(f"# SEO Baseline Report ({result.kind.value})\n")
            csvfile.write(f"# Generated: {result.finished_at}\n")
            csvfile.write(f"# Pages Processed: {result.pages_processed}\n")
            csvfile.write(f"# Pages Passed: {result.pages_passed}\n")
            csvfile.write(f"# Pages Failed: {result.pages_failed}\n")
            csvfile.write("\n")

            fieldnames = [
                "Page",
                "URL",
                "Count",
                "Matches",
                "Missing",
                "New",
                "Changed",
                "Baseline Created",
                "Baseline Updated",
                "Passed",
                "Errors",
            ]

            writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
            writer.writeheader()

            for check in result.checks:
                comparison = check.comparison
                missing, new = self._bucket_names(comparison)

                writer.writerow(
                    {
                        "Page": check.target.name,
                        "URL": check.target.url,
                        "Count": len(check.extracted) if check.extracted is not None else 0,
                        "Matches": "" if comparison is None else ("Yes" if comparison.matches else "No"),
                        "Missing": ", ".join(missing),
                        "New": ", ".join(new),
                        "Changed": len(comparison.differences) if comparison else 0,
                        "Baseline Created": "Yes" if comparison and comparison.baseline_created else "No",
                        "Baseline Updated": "Yes" if check.baseline_updated else "No",
                        "Passed": "Yes" if check.passed else "No",
                        "Errors": "; ".join(check.errors),
                    }
                )

    def _save_json(self, result: RunResult, output_path: Path):
        """
        Save results to JSON format with full comparison detail.
        """
        data = {
            "metadata": {
                "kind": result.kind.value,
                "update_mode": result.update_mode,
                "started_at": result.started_at.isoformat(),
                "finished_at": result.finished_at.isoformat() if result.finished_at else None,
                "pages_processed": result.pages_processed,
                "pages_passed": result.pages_passed,
                "pages_failed": result.pages_failed,
                "pass_rate": result.pass_rate,
            },
            "results": [check.to_dict() for check in result.checks],
        }

        with open(output_path, "w", encoding="utf-8") as jsonfile:
            json.dump(data, jsonfile, indent=2, ensure_ascii=False)

    def _bucket_names(self, comparison) -> tuple[list[str], list[str]]:
        """Readable names for the missing and new buckets of a comparison."""
        if comparison is None:
            return [], []
        if comparison.kind == BaselineKind.META_TAGS:
            return comparison.missing_tags, comparison.new_tags
        return (
            [f"#{item['index']}" for item in comparison.missing_data],
            [f"#{item['index']}" for item in comparison.new_data],
        )
