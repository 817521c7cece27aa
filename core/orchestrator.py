"""
Segment Export Orchestrator — Pipeline coordination for the CSV report.

This module ties the other core modules together into a sequential 3-step
workflow, all bounded by one Deadline counted from invocation entry:

  Step 1: BUILD QUERY
      build_query_envelope() pairs CUSTOMER_SEGMENT_MEMBERS_QUERY with the
      fetch parameters (filter, page size, sort key, direction).

  Step 2: GRAPHQL REQUEST
      ShopifyGraphQLClient.execute() sends the single POST to the Admin API
      and returns the decoded customer records, or raises a classified error.

  Step 3: CSV EXPORT
      export_customers() writes the header and one row per record to the
      output file or standard output, stopping if the deadline expires.

Configuration:
    All settings are loaded from environment variables (typically via .env file).
    Required: SHOPIFY_DOMAIN, SHOPIFY_ACCESS_TOKEN.
    See config/settings.py for defaults.

Typical usage:
    orchestrator = SegmentExportOrchestrator(env_file="./.env")
    if orchestrator.validate_config():
        results = orchestrator.run()
        orchestrator.print_summary(results)
"""

import math
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .csv_exporter import export_customers, is_stdout
from .deadline import Deadline
from .errors import ConfigError, GraphQLError, HttpError, SegmentExportError
from .graphql_queries import build_query_envelope
from .models import FetchParameters
from .shopify_client import ShopifyGraphQLClient

from config import DEFAULT_SETTINGS


class SegmentExportOrchestrator:
    """Orchestrates the fetch-and-export pipeline.

    Attributes:
        domain: Shop domain (e.g., "example.myshopify.com").
        access_token: Admin API access token.
        api_version: Admin API version segment (default: "2025-01").
        timeout: Deadline in seconds for request + export (default: 5).
        output_file: CSV path, or "" / "-" for standard output.
        debug: Whether to enable verbose output (default: False).
        segment_query, first, sort_key, reverse: Fetch parameter defaults.
    """

    def __init__(self, env_file: str = "./.env"):
        """Initialize the orchestrator by loading configuration from environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}", file=sys.stderr)
        else:
            print(f"Warning: {env_file} not found, using defaults/environment", file=sys.stderr)

        # Values that fail to parse are reported by check_config()
        self._parse_errors = []

        # Shopify connection (required)
        self.domain = os.getenv("SHOPIFY_DOMAIN", "")
        self.access_token = os.getenv("SHOPIFY_ACCESS_TOKEN", "")
        self.api_version = os.getenv("SHOPIFY_API_VERSION", DEFAULT_SETTINGS["SHOPIFY_API_VERSION"])

        # One deadline for the API call and the export
        self.timeout = self._env_number("REQUEST_TIMEOUT_SECONDS", float)

        self.output_file = os.getenv("OUTPUT_FILE", DEFAULT_SETTINGS["OUTPUT_FILE"])
        self.debug = os.getenv("DEBUG", str(DEFAULT_SETTINGS["DEBUG"])).lower() == "true"

        # Fetch parameter defaults; CLI flags override these
        self.segment_query = os.getenv("SEGMENT_QUERY", DEFAULT_SETTINGS["SEGMENT_QUERY"])
        self.first = self._env_number("FIRST", int)
        self.sort_key = os.getenv("SORT_KEY", DEFAULT_SETTINGS["SORT_KEY"])
        self.reverse = os.getenv("REVERSE", str(DEFAULT_SETTINGS["REVERSE"])).lower() == "true"

    def _env_number(self, name: str, cast):
        raw = os.getenv(name)
        if raw is None or raw.strip() == "":
            return DEFAULT_SETTINGS[name]
        try:
            return cast(raw)
        except ValueError:
            self._parse_errors.append(f"{name} must be a number, got {raw!r}")
            return DEFAULT_SETTINGS[name]

    @property
    def output_label(self) -> str:
        return "stdout" if is_stdout(self.output_file) else self.output_file

    def echo(self, message: str = ""):
        # Keep stdout clean when the CSV itself is written there
        stream = sys.stderr if is_stdout(self.output_file) else sys.stdout
        print(message, file=stream)

    def check_config(self):
        """Raise ConfigError listing every missing or invalid setting.

        Checks:
            - SHOPIFY_DOMAIN is set
            - SHOPIFY_ACCESS_TOKEN is set
            - numeric settings parsed and the timeout is finite and positive
        """
        errors = list(self._parse_errors)
        if not self.domain:
            errors.append("SHOPIFY_DOMAIN is required")
        if not self.access_token:
            errors.append("SHOPIFY_ACCESS_TOKEN is required")
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            errors.append("REQUEST_TIMEOUT_SECONDS must be a finite number greater than 0")
        if errors:
            raise ConfigError("; ".join(errors))

    def validate_config(self) -> bool:
        """Validate that all required configuration values are present.

        Returns:
            True if all required values are present, False otherwise.
            Prints specific error messages for each problem.
        """
        try:
            self.check_config()
        except ConfigError as e:
            self.echo("\nConfiguration Errors:")
            for err in e.message.split("; "):
                self.echo(f"  - {err}")
            return False
        return True

    def fetch_parameters(self) -> FetchParameters:
        """FetchParameters from the current settings (raises ConfigError)."""
        return FetchParameters(
            filter_query=self.segment_query,
            limit=self.first,
            sort_key=self.sort_key,
            reverse=self.reverse,
        )

    def run(self, params: Optional[FetchParameters] = None,
            started_at: Optional[float] = None) -> Dict[str, Any]:
        """Execute the 3-step pipeline.

        Args:
            params: Fetch parameters; built from settings when omitted.
            started_at: time.monotonic() reading the deadline counts from;
                        defaults to now.

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - config: domain, API version, output, timeout
                - success: True if the CSV was fully written
                - count: Number of customers exported (on success)
                - error, error_type, phase: Failure details (if success=False)
                - status_code / messages: Extra detail for HTTP / GraphQL errors
        """
        results = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "connector": "shopify-segment-export",
            "config": {
                "domain": self.domain,
                "api_version": self.api_version,
                "output": self.output_label,
                "timeout": self.timeout,
            },
            "success": False,
        }

        try:
            self.check_config()
            deadline = Deadline(self.timeout, started_at=started_at)
            if params is None:
                params = self.fetch_parameters()

            # Step 1: Build the GraphQL request document
            self.echo(f"\n{'='*60}")
            self.echo("STEP 1: BUILD QUERY")
            self.echo("="*60)
            envelope = build_query_envelope(params)
            self.echo(f"  Filter: {params.filter_query}")
            self.echo(f"  First: {params.limit}  Sort: {params.sort_key}  Reverse: {params.reverse}")

            # Step 2: Execute the single GraphQL request
            self.echo(f"\n{'='*60}")
            self.echo("STEP 2: GRAPHQL REQUEST")
            self.echo("="*60)
            client = ShopifyGraphQLClient(
                self.domain, self.access_token, self.api_version, self.debug
            )
            response = client.execute(envelope, deadline)
            self.echo(f"  Fetched {len(response.records)} customers")

            # Step 3: Write the CSV report
            self.echo(f"\n{'='*60}")
            self.echo("STEP 3: CSV EXPORT")
            self.echo("="*60)
            count = export_customers(response.records, self.output_file, deadline)
            self.echo(f"  Wrote {count} rows to {self.output_label}")

            results["success"] = True
            results["count"] = count
            results["output"] = self.output_label

        except SegmentExportError as e:
            results["error"] = str(e)
            results["error_type"] = type(e).__name__
            results["phase"] = e.phase
            if isinstance(e, HttpError):
                results["status_code"] = e.status_code
            if isinstance(e, GraphQLError):
                results["messages"] = e.messages
            self.echo(f"\n  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()

        results["completed_at"] = datetime.now(timezone.utc).isoformat()
        return results

    def print_summary(self, results: Dict):
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        self.echo(f"\n{'='*60}")
        self.echo("EXPORT COMPLETE")
        self.echo("="*60)
        self.echo(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")

        if results.get("success"):
            self.echo(
                f"Successfully exported {results.get('count', 0)} customers "
                f"to {results.get('output', self.output_label)}"
            )

        if results.get("error"):
            self.echo(f"Error ({results.get('phase', 'unknown')}): {results['error']}")
