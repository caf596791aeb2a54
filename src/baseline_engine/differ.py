"""
Field-level differ for comparing arbitrary JSON-compatible values.

Walks two trees (dicts, lists, scalars) depth-first and reports every point
where they diverge as a flat list of typed, path-addressed differences.
"""

from typing import Any

from .models import DifferenceType, FieldDifference


def json_type(value: Any) -> str:
    """
    Classify a value by its JSON type.

    bool is checked before int because it is an int subclass in Python.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class FieldDiffer:
    """
    Compares two JSON-compatible values field by field.

    Arrays are compared positionally: an insertion at the head of an array
    shows up as a change at every shifted index plus a length change.
    """

    def compare(self, baseline: Any, current: Any, path: str = "") -> list[FieldDifference]:
        """
        Compare a baseline value with a current value.

        Args:
            baseline: Previously accepted value
            current: Freshly extracted value
            path: Path prefix for reported differences (root when empty)

        Returns:
            List of FieldDifference in deterministic traversal order
        """
        differences: list[FieldDifference] = []
        self._compare_values(baseline, current, path, differences)
        return differences

    def _compare_values(
        self, baseline: Any, current: Any, path: str, differences: list[FieldDifference]
    ) -> None:
        baseline_type = json_type(baseline)
        current_type = json_type(current)

        if baseline_type != current_type:
            differences.append(
                FieldDifference(
                    path=path,
                    type=DifferenceType.TYPE_CHANGED,
                    baseline=baseline,
                    current=current,
                )
            )
            return

        if baseline_type == "object":
            self._compare_objects(baseline, current, path, differences)
        elif baseline_type == "array":
            self._compare_arrays(baseline, current, path, differences)
        elif baseline != current:
            differences.append(
                FieldDifference(
                    path=path,
                    type=DifferenceType.VALUE_CHANGED,
                    baseline=baseline,
                    current=current,
                )
            )

    def _compare_objects(
        self,
        baseline: dict,
        current: dict,
        path: str,
        differences: list[FieldDifference],
    ) -> None:
        # Baseline keys first, then keys only the current value has
        keys = list(baseline)
        keys.extend(key for key in current if key not in baseline)

        for key in keys:
            key_path = f"{path}.{key}" if path else str(key)

            if key not in baseline:
                differences.append(
                    FieldDifference(path=key_path, type=DifferenceType.ADDED, value=current[key])
                )
            elif key not in current:
                differences.append(
                    FieldDifference(path=key_path, type=DifferenceType.REMOVED, value=baseline[key])
                )
            else:
                self._compare_values(baseline[key], current[key], key_path, differences)

    def _compare_arrays(
        self,
        baseline: list,
        current: list,
        path: str,
        differences: list[FieldDifference],
    ) -> None:
        if len(baseline) != len(current):
            differences.append(
                FieldDifference(
                    path=path,
                    type=DifferenceType.ARRAY_LENGTH_CHANGED,
                    baseline=len(baseline),
                    current=len(current),
                )
            )

        for i in range(min(len(baseline), len(current))):
            self._compare_values(baseline[i], current[i], f"{path}[{i}]", differences)


def find_field_differences(baseline: Any, current: Any, path: str = "") -> list[FieldDifference]:
    """Compare two values with a default FieldDiffer."""
    return FieldDiffer().compare(baseline, current, path)
