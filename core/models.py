"""
Models — Typed records passed between the pipeline steps.

The Shopify response for customerSegmentMembers has this structure:
    {
      "data": {
        "customerSegmentMembers": {
          "edges": [
            {
              "node": {
                "id": "gid://shopify/CustomerSegmentMember/1",
                "displayName": "Jane Doe",
                "defaultEmailAddress": {"emailAddress": "jane@example.com"} | null,
                "amountSpent": {"amount": "100.0", "currencyCode": "USD"}
              }
            }
          ]
        }
      },
      "errors": [ {"message": "..."} ]      # optional
    }

ResponseEnvelope.from_json() turns that into a list of CustomerRecord plus
the list of error messages. Amounts become Decimal; a missing email stays
None until the CSV boundary.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from .errors import ConfigError, DecodeError


@dataclass(frozen=True)
class FetchParameters:
    """Caller-supplied filter and sort options for one fetch.

    filter_query and sort_key are passed to the API verbatim.
    """

    filter_query: str
    limit: int
    sort_key: str
    reverse: bool

    def __post_init__(self):
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ConfigError(f"limit must be an integer, got {self.limit!r}")
        if self.limit <= 0:
            raise ConfigError(f"limit must be greater than 0, got {self.limit}")


@dataclass(frozen=True)
class CustomerRecord:
    id: str
    display_name: str
    email: Optional[str]
    amount: Decimal
    currency_code: str


@dataclass(frozen=True)
class QueryEnvelope:
    query: str
    variables: Dict[str, Any]

    def to_payload(self) -> Dict[str, Any]:
        """The JSON request body."""
        return {"query": self.query, "variables": dict(self.variables)}


@dataclass
class ResponseEnvelope:
    """Decoded API response.

    If errors is non-empty, records must not be used.
    """

    records: List[CustomerRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, body: Any) -> "ResponseEnvelope":
        """Build an envelope from the decoded JSON body.

        Raises:
            DecodeError: If the body does not have the expected shape.
        """
        if not isinstance(body, dict):
            raise DecodeError(f"Expected a JSON object, got {type(body).__name__}")

        raw_errors = body.get("errors") or []
        if not isinstance(raw_errors, list):
            raise DecodeError("'errors' must be a list")
        errors = [_error_message(e) for e in raw_errors]
        if errors:
            # data may be null or partial when errors are reported
            return cls(records=[], errors=errors)

        data = body.get("data")
        if not isinstance(data, dict):
            raise DecodeError("Response has no 'data' object")
        members = data.get("customerSegmentMembers")
        if not isinstance(members, dict):
            raise DecodeError("Response has no 'customerSegmentMembers' object")
        edges = members.get("edges")
        if not isinstance(edges, list):
            raise DecodeError("'customerSegmentMembers.edges' must be a list")

        records = []
        for index, edge in enumerate(edges):
            node = edge.get("node") if isinstance(edge, dict) else None
            if not isinstance(node, dict):
                raise DecodeError(f"Edge {index} has no 'node' object")
            records.append(_decode_node(node, index))
        return cls(records=records, errors=[])


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message", error))
    return str(error)


def _require_str(node: Dict[str, Any], key: str, index: int) -> str:
    value = node.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"Edge {index}: '{key}' must be a string")
    return value


def _decode_node(node: Dict[str, Any], index: int) -> CustomerRecord:
    email = None
    email_obj = node.get("defaultEmailAddress")
    if email_obj is not None:
        if not isinstance(email_obj, dict):
            raise DecodeError(f"Edge {index}: 'defaultEmailAddress' must be an object")
        email = email_obj.get("emailAddress")
        if email is not None and not isinstance(email, str):
            raise DecodeError(f"Edge {index}: 'emailAddress' must be a string")

    spent = node.get("amountSpent")
    if not isinstance(spent, dict):
        raise DecodeError(f"Edge {index}: 'amountSpent' must be an object")
    raw_amount = spent.get("amount")
    # bool is an int subclass; reject it explicitly
    if isinstance(raw_amount, bool) or not isinstance(raw_amount, (str, int, Decimal)):
        raise DecodeError(f"Edge {index}: 'amountSpent.amount' must be a decimal string")
    try:
        amount = Decimal(str(raw_amount))
    except InvalidOperation as exc:
        raise DecodeError(f"Edge {index}: invalid amount {raw_amount!r}") from exc
    if not amount.is_finite():
        raise DecodeError(f"Edge {index}: invalid amount {raw_amount!r}")

    return CustomerRecord(
        id=_require_str(node, "id", index),
        display_name=_require_str(node, "displayName", index),
        email=email,
        amount=amount,
        currency_code=_require_str(spent, "currencyCode", index),
    )
