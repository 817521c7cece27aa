"""
Shopify API Client — Executes the segment members query against the Admin API.

This module is responsible for the single HTTP call the pipeline makes:

    POST https://{domain}/admin/api/{api_version}/graphql.json
    Headers:
        Content-Type: application/json
        X-Shopify-Access-Token: {access_token}
    Body: {"query": "...", "variables": {...}}

The call is bounded by the invocation's Deadline. The requests timeout is set
to whatever time the deadline has left, so connect, send and receive all
share one budget. There are no retries: the first failure is raised.

Failure classification (see core/errors.py):
  - deadline already elapsed, requests timeout, or a late response
        -> RequestTimeoutError
  - connection/TLS failure before the deadline    -> TransportError
  - non-2xx status                                -> HttpError (raw body kept)
  - body not JSON or not the expected shape       -> DecodeError
  - response carries a non-empty "errors" array   -> GraphQLError

Pipeline context:
    Used in Step 2 of the orchestrator pipeline. Input is the QueryEnvelope
    from build_query_envelope() (Step 1); output feeds export_customers()
    (Step 3).
"""

from decimal import Decimal

import requests

from .deadline import Deadline
from .errors import (
    DecodeError,
    GraphQLError,
    HttpError,
    RequestTimeoutError,
    TransportError,
)
from .models import QueryEnvelope, ResponseEnvelope

DEFAULT_API_VERSION = "2025-01"


class ShopifyGraphQLClient:
    """Client for the Shopify Admin GraphQL API.

    All calls go through a single requests.Session with the access token
    header attached.

    Attributes:
        domain: Shop domain without scheme (e.g., "example.myshopify.com").
        api_version: Admin API version segment (e.g., "2025-01").
        debug: If True, print request/response details (never the token).
    """

    ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"

    def __init__(self, domain: str, access_token: str,
                 api_version: str = DEFAULT_API_VERSION, debug: bool = False):
        """Initialize the client.

        Args:
            domain: Shop domain; a leading "https://" and trailing "/" are stripped.
            access_token: Admin API access token.
            api_version: Admin API version segment.
            debug: Enable verbose output.
        """
        domain = domain.strip()
        for prefix in ("https://", "http://"):
            if domain.startswith(prefix):
                domain = domain[len(prefix):]
        self.domain = domain.rstrip("/")
        self.api_version = api_version
        self.debug = debug
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            self.ACCESS_TOKEN_HEADER: access_token,
        })

    @property
    def endpoint(self) -> str:
        return f"https://{self.domain}/admin/api/{self.api_version}/graphql.json"

    def execute(self, envelope: QueryEnvelope, deadline: Deadline) -> ResponseEnvelope:
        """Execute a GraphQL request and return the validated response.

        Args:
            envelope: Query text and variables.
            deadline: Time bound for the whole call.

        Returns:
            A ResponseEnvelope with no application errors.

        Raises:
            RequestTimeoutError: If the deadline elapses before a response.
            TransportError: If the request fails for any other network reason.
            HttpError: If the status is not 2xx.
            DecodeError: If the body cannot be decoded.
            GraphQLError: If the response reports application errors.
        """
        remaining = deadline.remaining()
        if remaining <= 0:
            raise RequestTimeoutError(
                f"Request not sent: deadline of {deadline.timeout}s already elapsed"
            )

        if self.debug:
            print(f"  POST {self.endpoint}")
            print(f"  Variables: {envelope.variables}")
            print(f"  Timeout budget: {remaining:.2f}s")

        try:
            response = self._session.post(
                self.endpoint, json=envelope.to_payload(), timeout=remaining
            )
        except requests.exceptions.Timeout as exc:
            raise RequestTimeoutError(
                f"Request timed out after {deadline.timeout} seconds"
            ) from exc
        except requests.exceptions.RequestException as exc:
            if deadline.expired():
                raise RequestTimeoutError(
                    f"Request timed out after {deadline.timeout} seconds"
                ) from exc
            raise TransportError(f"HTTP request failed: {exc}") from exc

        if self.debug:
            print(f"  Response: HTTP {response.status_code} ({len(response.content)} bytes)")

        if deadline.expired():
            raise RequestTimeoutError(
                f"Response arrived after the {deadline.timeout} second deadline"
            )

        if not 200 <= response.status_code < 300:
            raise HttpError(response.status_code, response.text)

        try:
            body = response.json(parse_float=Decimal)
        except ValueError as exc:
            raise DecodeError(f"Failed to decode response: {exc}") from exc

        result = ResponseEnvelope.from_json(body)
        if result.errors:
            raise GraphQLError(result.errors)

        if self.debug:
            print(f"  Decoded {len(result.records)} customer records")

        return result


def execute(domain: str, credential: str, envelope: QueryEnvelope,
            deadline: Deadline, api_version: str = DEFAULT_API_VERSION) -> ResponseEnvelope:
    """One-shot helper: build a client for the shop domain and run envelope."""
    client = ShopifyGraphQLClient(domain, credential, api_version=api_version)
    return client.execute(envelope, deadline)
