"""
Terminal output formatter for CLI.

Handles all display logic - no business logic, just presentation.
"""

from baseline_engine.models import (
    BaselineKind,
    JsonLdComparison,
    MetaTagComparison,
    PageCheck,
    RunResult,
)

# Maximum entries shown per section
MAX_ITEMS = 5


def print_results_summary(result: RunResult) -> None:
    """
    Print a human-readable summary of results to terminal.

    Shows overall statistics and the differences found for each drifting page.

    Args:
        result: RunResult containing all page checks
    """
    title = "BASELINE UPDATE" if result.update_mode else "BASELINE COMPARISON"

    print("\n" + "=" * 80)
    print(f"SEO {result.kind.value.upper()} {title}")
    print("=" * 80)
    print(f"\nPages Processed: {result.pages_processed}")
    print(f"Pages Passed:    {result.pages_passed}")
    print(f"Pages Failed:    {result.pages_failed}")
    print(f"Pass Rate:       {result.pass_rate}%")

    if result.finished_at:
        duration = (result.finished_at - result.started_at).total_seconds()
        print(f"Duration:        {duration:.1f} seconds")

    if result.update_mode:
        for check in result.checks:
            if check.baseline_updated:
                print(f"  ✓ {check.target.name}: {check.baseline_file}")
    else:
        _print_differences(result)

    failed_checks = result.get_failed_checks()
    if failed_checks:
        print(f"\n{'=' * 80}")
        print(f"FAILED PAGES ({len(failed_checks)})")
        print(f"{'=' * 80}\n")

        for i, check in enumerate(failed_checks, 1):
            print(f"[{i}] {check.target.name} ({check.target.url})")
            for error in check.errors:
                print(f"    • {error}")
            print("-" * 80 + "\n")


def _print_differences(result: RunResult) -> None:
    checks_with_differences = result.get_checks_with_differences()

    created = [c for c in result.checks if c.comparison and c.comparison.baseline_created]
    for check in created:
        print(f"\n  ! No baseline for {check.target.name}; current values stored as baseline")

    print(f"\n{'=' * 80}")
    print(
        f"Differences Detected: {len(checks_with_differences)} / {result.pages_processed} pages"
    )
    print(f"{'=' * 80}\n")

    if not checks_with_differences:
        print("✓ All pages match their baselines.\n")
        return

    for i, check in enumerate(checks_with_differences, 1):
        print(f"[{i}] {check.target.name}")
        print(f"    URL: {check.target.url}")

        if check.kind == BaselineKind.META_TAGS:
            _print_meta_tag_differences(check)
        else:
            _print_json_ld_differences(check.comparison)

        print("\n" + "-" * 80 + "\n")


def _print_meta_tag_differences(check: PageCheck) -> None:
    comparison: MetaTagComparison = check.comparison

    if comparison.missing_tags:
        print(f"\n    Missing tags ({len(comparison.missing_tags)}):")
        _print_items(comparison.missing_tags)

    if comparison.differences:
        print(f"\n    Different content ({len(comparison.differences)}):")
        for key, diff in list(comparison.differences.items())[:MAX_ITEMS]:
            print(f"      • {key}")
            print(f"          Baseline: {diff['baseline']}")
            print(f"          Current:  {diff['current']}")
        _print_remaining(len(comparison.differences))

    if comparison.new_tags:
        print(f"\n    New tags ({len(comparison.new_tags)}):")
        _print_items(
            [
                f"{tag}: {check.extracted[tag].get('content') or 'No content'}"
                for tag in comparison.new_tags
            ]
        )


def _print_json_ld_differences(comparison: JsonLdComparison) -> None:
    if comparison.missing_data:
        print(f"\n    Missing blocks ({len(comparison.missing_data)}):")
        _print_items([_describe_block(item) for item in comparison.missing_data])

    if comparison.new_data:
        print(f"\n    New blocks ({len(comparison.new_data)}):")
        _print_items([_describe_block(item) for item in comparison.new_data])

    for diff in comparison.differences[:MAX_ITEMS]:
        print(f"\n    Block #{diff.index} changed:")
        if not diff.field_differences:
            print(f"      • Baseline: {_error_or_value(diff.baseline)}")
            print(f"      • Current:  {_error_or_value(diff.current)}")
            continue
        _print_items([_describe_field(field) for field in diff.field_differences])
    _print_remaining(len(comparison.differences))


def _describe_block(item: dict) -> str:
    data = item.get("data")
    schema_type = data.get("@type", "unknown type") if isinstance(data, dict) else "unparsed"
    return f"#{item['index']} ({schema_type})"


def _error_or_value(item) -> str:
    if isinstance(item, dict) and "error" in item:
        return f"error: {item['error']}"
    return repr(item)


def _describe_field(field) -> str:
    path = field.path or "(root)"
    if field.type.value in ("added", "removed"):
        return f"{path}: {field.type.value} {field.value!r}"
    return f"{path}: {field.type.value} {field.baseline!r} -> {field.current!r}"


def _print_items(items: list[str]) -> None:
    for item in items[:MAX_ITEMS]:
        print(f"      • {item}")
    _print_remaining(len(items))


def _print_remaining(total: int) -> None:
    if total > MAX_ITEMS:
        print(f"      ... and {total - MAX_ITEMS} more")
