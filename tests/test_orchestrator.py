"""Tests for core.orchestrator.SegmentExportOrchestrator."""

import csv
import os
import time
from decimal import Decimal
from unittest.mock import patch, MagicMock

import pytest

from core.errors import (
    ConfigError,
    DecodeError,
    GraphQLError,
    HttpError,
    RequestTimeoutError,
)
from core.models import CustomerRecord, FetchParameters, ResponseEnvelope


_BASE_ENV = {
    "SHOPIFY_DOMAIN": "example.myshopify.com",
    "SHOPIFY_ACCESS_TOKEN": "shpat_test",
    "SHOPIFY_API_VERSION": "2025-01",
    "REQUEST_TIMEOUT_SECONDS": "5",
    "OUTPUT_FILE": "/tmp/shopify_test_customers.csv",
    "DEBUG": "false",
}


def _make_orchestrator(env_overrides=None):
    env = dict(_BASE_ENV)
    if env_overrides:
        env.update(env_overrides)

    with patch.dict(os.environ, env, clear=True):
        from core.orchestrator import SegmentExportOrchestrator
        orchestrator = SegmentExportOrchestrator(env_file="/nonexistent/.env")
    return orchestrator


def _records():
    return [
        CustomerRecord(id="gid://1", display_name="Jane Doe", email=None,
                       amount=Decimal("100"), currency_code="USD"),
        CustomerRecord(id="gid://2", display_name="Bob", email="bob@example.com",
                       amount=Decimal("12.345"), currency_code="USD"),
    ]


def _mock_client(records=None, error=None):
    client = MagicMock()
    if error is not None:
        client.execute.side_effect = error
    else:
        client.execute.return_value = ResponseEnvelope(records=records or [])
    return client


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_defaults_applied():
    orch = _make_orchestrator()
    assert orch.first == 50
    assert orch.sort_key == "amount_spent"
    assert orch.reverse is True
    assert "customer_tags CONTAINS 'task1'" in orch.segment_query
    assert orch.timeout == 5.0


def test_env_overrides_defaults():
    orch = _make_orchestrator({"FIRST": "10", "REVERSE": "false", "SORT_KEY": "name"})
    assert orch.first == 10
    assert orch.reverse is False
    assert orch.sort_key == "name"


def test_validate_config_missing_domain():
    orch = _make_orchestrator({"SHOPIFY_DOMAIN": ""})
    assert orch.validate_config() is False


def test_validate_config_missing_token():
    orch = _make_orchestrator({"SHOPIFY_ACCESS_TOKEN": ""})
    assert orch.validate_config() is False


def test_check_config_names_every_problem():
    orch = _make_orchestrator({"SHOPIFY_DOMAIN": "", "SHOPIFY_ACCESS_TOKEN": "", "FIRST": "lots"})
    with pytest.raises(ConfigError) as exc_info:
        orch.check_config()
    message = str(exc_info.value)
    assert "SHOPIFY_DOMAIN" in message
    assert "SHOPIFY_ACCESS_TOKEN" in message
    assert "FIRST" in message


def test_validate_config_rejects_non_positive_timeout():
    orch = _make_orchestrator({"REQUEST_TIMEOUT_SECONDS": "0"})
    assert orch.validate_config() is False


@pytest.mark.parametrize("value", ["nan", "inf", "-inf", "NaN"])
def test_validate_config_rejects_non_finite_timeout(value):
    orch = _make_orchestrator({"REQUEST_TIMEOUT_SECONDS": value})
    assert orch.validate_config() is False


@pytest.mark.parametrize("value", ["nan", "inf"])
def test_run_non_finite_timeout_is_config_error(value):
    orch = _make_orchestrator({"REQUEST_TIMEOUT_SECONDS": value})
    with patch("core.orchestrator.ShopifyGraphQLClient") as client_cls:
        results = orch.run()
    assert results["success"] is False
    assert results["error_type"] == "ConfigError"
    assert "REQUEST_TIMEOUT_SECONDS" in results["error"]
    client_cls.assert_not_called()


def test_validate_config_valid():
    orch = _make_orchestrator()
    assert orch.validate_config() is True


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def test_run_success_writes_csv(tmp_path):
    output = tmp_path / "customers.csv"
    orch = _make_orchestrator({"OUTPUT_FILE": str(output)})
    client = _mock_client(_records())
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=client) as client_cls:
        results = orch.run()

    assert results["success"] is True
    assert results["count"] == 2
    assert results["output"] == str(output)
    client_cls.assert_called_once_with("example.myshopify.com", "shpat_test", "2025-01", False)

    with open(output, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[1] == ["gid://1", "Jane Doe", "", "100.00", "USD"]
    assert rows[2][3] == "12.34"


def test_run_passes_query_variables(tmp_path):
    orch = _make_orchestrator({"OUTPUT_FILE": str(tmp_path / "c.csv")})
    client = _mock_client([])
    params = FetchParameters(filter_query="customer_tags CONTAINS 'vip'", limit=5,
                             sort_key="name", reverse=False)
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=client):
        orch.run(params)
    envelope, deadline = client.execute.call_args[0]
    assert envelope.variables == {
        "first": 5, "query": "customer_tags CONTAINS 'vip'", "sortKey": "name", "reverse": False,
    }
    assert deadline.timeout == 5.0


def test_run_zero_records(tmp_path):
    output = tmp_path / "customers.csv"
    orch = _make_orchestrator({"OUTPUT_FILE": str(output)})
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=_mock_client([])):
        results = orch.run()
    assert results["success"] is True
    assert results["count"] == 0
    assert output.read_text().splitlines() == [
        "ID,Display Name,Email Address,Amount Spent,Currency Code"
    ]


def test_run_config_error_makes_no_request():
    orch = _make_orchestrator({"SHOPIFY_ACCESS_TOKEN": ""})
    with patch("core.orchestrator.ShopifyGraphQLClient") as client_cls:
        results = orch.run()
    assert results["success"] is False
    assert results["error_type"] == "ConfigError"
    assert results["phase"] == "config"
    client_cls.assert_not_called()


def test_run_invalid_first_is_config_error():
    orch = _make_orchestrator({"FIRST": "0"})
    with patch("core.orchestrator.ShopifyGraphQLClient") as client_cls:
        results = orch.run()
    assert results["error_type"] == "ConfigError"
    client_cls.assert_not_called()


def test_run_http_error_reported(tmp_path):
    output = tmp_path / "customers.csv"
    orch = _make_orchestrator({"OUTPUT_FILE": str(output)})
    client = _mock_client(error=HttpError(401, "Unauthorized"))
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=client):
        results = orch.run()
    assert results["success"] is False
    assert results["error_type"] == "HttpError"
    assert results["status_code"] == 401
    assert results["error"] == "HTTP 401: Unauthorized"
    assert not output.exists()


def test_run_graphql_error_skips_export(tmp_path):
    output = tmp_path / "customers.csv"
    orch = _make_orchestrator({"OUTPUT_FILE": str(output)})
    client = _mock_client(error=GraphQLError(["Invalid segment query"]))
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=client), \
         patch("core.orchestrator.export_customers") as export:
        results = orch.run()
    assert results["phase"] == "graphql"
    assert results["messages"] == ["Invalid segment query"]
    export.assert_not_called()


@pytest.mark.parametrize("error,phase", [
    (RequestTimeoutError("Request timed out after 5.0 seconds"), "request"),
    (DecodeError("Failed to decode response"), "decode"),
])
def test_run_request_failures(tmp_path, error, phase):
    orch = _make_orchestrator({"OUTPUT_FILE": str(tmp_path / "c.csv")})
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=_mock_client(error=error)):
        results = orch.run()
    assert results["success"] is False
    assert results["phase"] == phase
    assert results["error"] == str(error)


def test_run_unexpected_errors_propagate(tmp_path):
    orch = _make_orchestrator({"OUTPUT_FILE": str(tmp_path / "c.csv")})
    client = _mock_client(error=KeyError("bug"))
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=client):
        with pytest.raises(KeyError):
            orch.run()


def test_status_goes_to_stderr_when_csv_on_stdout(capsys):
    orch = _make_orchestrator({"OUTPUT_FILE": "-"})
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=_mock_client(_records())):
        results = orch.run()
        orch.print_summary(results)
    captured = capsys.readouterr()
    assert captured.out.splitlines()[0] == "ID,Display Name,Email Address,Amount Spent,Currency Code"
    assert "STEP" not in captured.out
    assert "Successfully exported 2 customers to stdout" in captured.err


def test_print_summary_failure(capsys, tmp_path):
    orch = _make_orchestrator({"OUTPUT_FILE": str(tmp_path / "c.csv")})
    orch.print_summary({"success": False, "error": "HTTP 401: Unauthorized", "phase": "request"})
    out = capsys.readouterr().out
    assert "FAILED" in out
    assert "Error (request): HTTP 401: Unauthorized" in out


def test_run_deadline_counts_from_started_at(tmp_path):
    orch = _make_orchestrator({"OUTPUT_FILE": str(tmp_path / "c.csv")})
    client = _mock_client([])
    # started well over the 5s budget ago
    started_at = time.monotonic() - 60
    with patch("core.orchestrator.ShopifyGraphQLClient", return_value=client):
        orch.run(started_at=started_at)
    deadline = client.execute.call_args[0][1]
    assert deadline.expired() is True
