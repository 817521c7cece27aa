"""
GraphQL Query Definitions — The customer segment members query.

CUSTOMER_SEGMENT_MEMBERS_QUERY fetches one page of members matching a saved
segment filter expression. It takes four variables:

  first     Int!      page size
  query     String!   segment filter expression (passed through verbatim)
  sortKey   String    e.g. "amount_spent"
  reverse   Boolean!  reverse the sort order

Member fields extracted:
  - id, displayName
  - defaultEmailAddress { emailAddress }   (null when the customer has none)
  - amountSpent { amount currencyCode }
"""

from .models import FetchParameters, QueryEnvelope

CUSTOMER_SEGMENT_MEMBERS_QUERY = """
query GetCustomerSegmentMembers($first: Int!, $query: String!, $sortKey: String, $reverse: Boolean!) {
  customerSegmentMembers(first: $first, query: $query, sortKey: $sortKey, reverse: $reverse) {
    edges {
      node {
        id
        displayName
        defaultEmailAddress {
          emailAddress
        }
        amountSpent {
          amount
          currencyCode
        }
      }
    }
  }
}
"""


def build_query_envelope(params: FetchParameters) -> QueryEnvelope:
    """Pair the fixed query document with variables taken from params."""
    return QueryEnvelope(
        query=CUSTOMER_SEGMENT_MEMBERS_QUERY,
        variables={
            "first": params.limit,
            "query": params.filter_query,
            "sortKey": params.sort_key,
            "reverse": params.reverse,
        },
    )
