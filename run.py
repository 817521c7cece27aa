#!/usr/bin/env python3
"""
Shopify Customer Segment Exporter — Entry Point.

Fetches one page of customer segment members from the Shopify Admin GraphQL
API and writes them to a CSV file (or standard output). Configuration comes
from a .env file; CLI flags override it.

The pipeline (managed by SegmentExportOrchestrator) performs 3 steps:
  1. Build the segment members GraphQL query from the fetch parameters
  2. Execute it against /admin/api/{version}/graphql.json
  3. Write the CSV report

Usage:
    python run.py                                  # Defaults from .env / settings
    python run.py -q "customer_tags CONTAINS 'vip'" -f 100
    python run.py --no-reverse -s name             # Ascending by name
    python run.py -o -                             # CSV to stdout
    python run.py --debug                          # Verbose output
    python run.py --version                        # Show version
    python run.py --env /path                      # Use alternate .env file
"""

import argparse
import sys
import time
from pathlib import Path

from core import SegmentExportOrchestrator

# Read version from the repo-root VERSION file (e.g., "0.1.0").
VERSION_FILE = Path(__file__).resolve().parent / "VERSION"
VERSION = VERSION_FILE.read_text().strip() if VERSION_FILE.exists() else "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Shopify Segment Exporter - Fetch customer segment members and export to CSV"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--query", "-q", help="Segment filter expression")
    parser.add_argument("--first", "-f", type=int, help="Number of customers to fetch")
    parser.add_argument("--sort-key", "-s", dest="sort_key", help="Sort key for results")
    parser.add_argument("--reverse", "-r", action=argparse.BooleanOptionalAction, default=None,
                        help="Reverse sort order")
    parser.add_argument("--output", "-o",
                        help="Output CSV filename ('-' or empty for stdout)")
    parser.add_argument("--timeout", "-t", type=float, help="Deadline in seconds for fetch + export")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
    return parser


def apply_overrides(orchestrator: SegmentExportOrchestrator, args: argparse.Namespace):
    """Apply CLI overrides on top of .env values."""
    if args.query is not None:
        orchestrator.segment_query = args.query
    if args.first is not None:
        orchestrator.first = args.first
    if args.sort_key is not None:
        orchestrator.sort_key = args.sort_key
    if args.reverse is not None:
        orchestrator.reverse = args.reverse
    if args.output is not None:
        orchestrator.output_file = args.output
    if args.timeout is not None:
        orchestrator.timeout = args.timeout
    if args.debug:
        orchestrator.debug = True


def main(argv=None) -> int:
    """Parse CLI arguments and run the export pipeline."""
    # The fetch + export deadline counts from here
    started_at = time.monotonic()
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"shopify-segment-export {VERSION}")
        return 0

    # Initialize the orchestrator (loads .env and builds internal config)
    orchestrator = SegmentExportOrchestrator(env_file=args.env)
    apply_overrides(orchestrator, args)

    # Print header
    orchestrator.echo(f"\n{'='*60}")
    orchestrator.echo(f"SHOPIFY SEGMENT EXPORTER v{VERSION}")
    orchestrator.echo("="*60)
    orchestrator.echo(f"Store: {orchestrator.domain}")
    orchestrator.echo(f"API Version: {orchestrator.api_version}")
    orchestrator.echo(f"Output: {orchestrator.output_label}")

    if not orchestrator.validate_config():
        return 1

    results = orchestrator.run(started_at=started_at)
    orchestrator.print_summary(results)

    return 0 if results.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
