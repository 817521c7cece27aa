"""
Core package — The fetch-and-export pipeline modules.

Each module handles one concern:

  orchestrator.py     Pipeline coordination (Steps 1-3)
  graphql_queries.py  GraphQL query definition and variables (Step 1)
  shopify_client.py   HTTP communication with the Admin API (Step 2)
  csv_exporter.py     CSV report writing (Step 3)
  models.py           FetchParameters, CustomerRecord, envelopes
  deadline.py         Shared time bound for Steps 2-3
  errors.py           Failure taxonomy
"""

from .orchestrator import SegmentExportOrchestrator
from .shopify_client import ShopifyGraphQLClient, execute
from .graphql_queries import CUSTOMER_SEGMENT_MEMBERS_QUERY, build_query_envelope
from .csv_exporter import CSV_HEADER, export_customers, format_amount
from .deadline import Deadline
from .models import CustomerRecord, FetchParameters, QueryEnvelope, ResponseEnvelope
from .errors import (
    SegmentExportError,
    ConfigError,
    RequestTimeoutError,
    TransportError,
    HttpError,
    DecodeError,
    GraphQLError,
    ExportCancelledError,
    ExportWriteError,
)
