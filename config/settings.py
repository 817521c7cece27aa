"""
Settings — Default configuration values for the Shopify segment exporter.

This module provides the DEFAULT_SETTINGS dict that the orchestrator uses as
fallback values when environment variables are not set. The actual
configuration is loaded from .env at runtime.

Configuration precedence (highest to lowest):
  1. CLI flags (--query, --first, --sort-key, --reverse, --output, --timeout, --debug)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  SHOPIFY_API_VERSION      Admin API version segment in the endpoint URL
  REQUEST_TIMEOUT_SECONDS  One deadline covering the API call and the CSV export
  OUTPUT_FILE              CSV path; empty or "-" writes to standard output
  DEBUG                    Whether to print verbose output (default: False)
  SEGMENT_QUERY            Segment filter expression sent as the "query" variable
  FIRST                    Number of members to fetch (single page)
  SORT_KEY                 Sort key passed to the API
  REVERSE                  Reverse the sort order

SHOPIFY_DOMAIN and SHOPIFY_ACCESS_TOKEN have no defaults and must be set.
"""

DEFAULT_SETTINGS = {
    "SHOPIFY_API_VERSION": "2025-01",
    "REQUEST_TIMEOUT_SECONDS": 5,
    "OUTPUT_FILE": "customers.csv",
    "DEBUG": False,
    "SEGMENT_QUERY": "customer_tags CONTAINS 'task1' AND customer_tags CONTAINS 'level:3'",
    "FIRST": 50,
    "SORT_KEY": "amount_spent",
    "REVERSE": True,
}
