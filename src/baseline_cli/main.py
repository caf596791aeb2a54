"""
CLI main entry point for the SEO baseline checker.

Thin wrapper around the core engine - no business logic here.
"""

import argparse
import logging
import sys

from baseline_engine import BaselineKind, JobRunner
from baseline_engine.config import DEFAULT_URLS_PROPERTY, AuditConfig, ConfigError, load_pages
from baseline_engine.storage import FileReportStorage, StorageError

from .output import print_results_summary


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Check page meta tags and JSON-LD structured data against stored baselines.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s compare -c test_data/env.json
  %(prog)s compare -c test_data/env.json --kind json-ld --property lessons_urls
  %(prog)s update -c test_data/env.json --kind meta-tags
  %(prog)s compare -c test_data/env.json --raw --format csv
        """,
    )

    parser.add_argument(
        "mode",
        choices=["compare", "update"],
        help="compare against baselines, or overwrite baselines with current values",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        required=True,
        help="JSON file mapping page names to URLs (env.json)",
    )

    parser.add_argument(
        "-p",
        "--property",
        type=str,
        default=DEFAULT_URLS_PROPERTY,
        help=f"Property of the config file holding the URLs (default: {DEFAULT_URLS_PROPERTY})",
    )

    parser.add_argument(
        "-k",
        "--kind",
        type=str,
        choices=[kind.value for kind in BaselineKind],
        default=BaselineKind.META_TAGS.value,
        help="Metadata to check (default: meta-tags)",
    )

    parser.add_argument(
        "-b",
        "--baseline-dir",
        type=str,
        default=None,
        help="Directory holding baseline files (default depends on --kind)",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default="reports/seo",
        help="Directory to save report files (default: reports/seo)",
    )

    parser.add_argument(
        "-f",
        "--format",
        type=str,
        choices=["csv", "json"],
        default="json",
        help="Report format (default: json)",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        default=3,
        help="Maximum number of pages to process concurrently (default: 3)",
    )

    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        default=60,
        help="Timeout in seconds for each navigation attempt (default: 60)",
    )

    parser.add_argument(
        "--settle",
        type=float,
        default=5.0,
        help="Seconds to let a page settle after navigation (default: 5)",
    )

    parser.add_argument(
        "--raw",
        action="store_true",
        help="Fetch plain HTML over HTTP instead of rendering in a browser",
    )

    parser.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="Custom User-Agent header (optional)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AuditConfig:
    """
    Build the run configuration from parsed arguments.

    Raises:
        ConfigError: If the config file or its pages are invalid
    """
    kind = BaselineKind(args.kind)
    pages = load_pages(args.config, args.property)

    if not pages:
        raise ConfigError(f"No pages found under '{args.property}' in {args.config}")

    return AuditConfig(
        pages=pages,
        kind=kind,
        baseline_directory=args.baseline_dir,
        output_directory=args.output_dir,
        max_concurrency=args.concurrency,
        timeout=args.timeout * 1000,  # Convert to milliseconds
        settle_delay=args.settle,
        rendered=not args.raw,
        user_agent=args.user_agent,
    )


def main(argv: list[str] | None = None) -> None:
    """
    Main CLI entry point.

    Orchestrates the entire CLI workflow:
    1. Parse arguments
    2. Load pages from the config file
    3. Run engine job (compare or update)
    4. Display results
    5. Save the report to file
    """
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Found {len(config.pages)} pages to process\n")

    try:
        runner = JobRunner(config)
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    update = args.mode == "update"
    print("Updating baselines..." if update else "Comparing with baselines...")
    result = runner.run_job(update=update)

    print_results_summary(result)

    print(f"\nSaving report to {args.format.upper()} file...")
    storage = FileReportStorage(output_directory=config.output_directory)

    try:
        output_path = storage.save(result, format=args.format)
        print(f"✓ Report saved to: {output_path}")
    except StorageError as e:
        print(f"✗ Failed to save report: {e}", file=sys.stderr)
        sys.exit(1)

    if result.pages_failed > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
