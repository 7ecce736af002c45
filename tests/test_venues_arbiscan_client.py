"""
Tests for the ArbiscanClient HTTP wrapper.

**Purpose**: Verify that ArbiscanClient builds the getabi request correctly,
parses the ABI payload, and raises the right exception for HTTP and API-level
failures.

**Testing philosophy**: Mocked HTTP responses only (no real API calls), so the
tests are fast, deterministic and need no API key.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from src.config.settings import ArbiscanSettings
from src.venues.arbiscan_client import (
    ArbiscanAbiUnavailableError,
    ArbiscanClient,
    ArbiscanClientError,
    ArbiscanRateLimitError,
    ArbiscanServerError,
)

ADDRESS = "0x82C13fCab02A168F06E12373F9e5D2C2Bd47e399"
ABI = [{"type": "function", "name": "computeRewards", "inputs": [], "outputs": []}]


@pytest.fixture
def arbiscan_settings():
    return ArbiscanSettings(
        base_url="https://api.test-arbiscan.io/api",
        api_key="test_key_123",
        timeout_seconds=15,
    )


def make_response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    return response


def test_client_initialization(arbiscan_settings):
    client = ArbiscanClient(arbiscan_settings)
    assert client.session.headers["Accept"] == "application/json"


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_success(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(
        payload={"status": "1", "message": "OK", "result": json.dumps(ABI)}
    )

    client = ArbiscanClient(arbiscan_settings)
    abi = client.get_contract_abi(ADDRESS)

    assert abi == ABI
    mock_get.assert_called_once()
    call_args = mock_get.call_args
    assert call_args.args[0] == "https://api.test-arbiscan.io/api"
    assert call_args.kwargs["params"] == {
        "module": "contract",
        "action": "getabi",
        "address": ADDRESS,
        "apikey": "test_key_123",
    }
    assert call_args.kwargs["timeout"] == 15


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_not_verified(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(
        payload={"status": "0", "message": "NOTOK", "result": "Contract source code not verified"}
    )

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanAbiUnavailableError) as exc_info:
        client.get_contract_abi(ADDRESS)

    assert "not verified" in str(exc_info.value)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_api_rate_limit_message(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(
        payload={"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}
    )

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanRateLimitError):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_http_429(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(status_code=429, text="Too Many Requests")

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanRateLimitError):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_server_error(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(status_code=503, text="Service Unavailable")

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanServerError, match="status 503"):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_client_error(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(status_code=403, text="Forbidden")

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanClientError, match="status 403"):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_invalid_json_body(mock_get, arbiscan_settings):
    response = make_response(text="<html>")
    response.json.side_effect = ValueError("No JSON")
    mock_get.return_value = response

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanClientError, match="Failed to parse JSON"):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_malformed_abi_payload(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(
        payload={"status": "1", "message": "OK", "result": "{not json"}
    )

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanClientError, match="not valid JSON"):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_payload_not_a_list(mock_get, arbiscan_settings):
    mock_get.return_value = make_response(
        payload={"status": "1", "message": "OK", "result": json.dumps({"abi": []})}
    )

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanClientError, match="Expected ABI to be a list"):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_timeout(mock_get, arbiscan_settings):
    mock_get.side_effect = requests.Timeout("slow")

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(requests.Timeout, match="timed out after 15s"):
        client.get_contract_abi(ADDRESS)


@patch("src.venues.arbiscan_client.requests.Session.get")
def test_get_contract_abi_connection_error(mock_get, arbiscan_settings):
    mock_get.side_effect = requests.ConnectionError("refused")

    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ArbiscanClientError, match="Failed to connect"):
        client.get_contract_abi(ADDRESS)


def test_get_contract_abi_empty_address(arbiscan_settings):
    client = ArbiscanClient(arbiscan_settings)
    with pytest.raises(ValueError, match="cannot be empty"):
        client.get_contract_abi("  ")


def test_client_context_manager_closes_session(arbiscan_settings):
    with ArbiscanClient(arbiscan_settings) as client:
        client.session = Mock()

    client.session.close.assert_called_once()
