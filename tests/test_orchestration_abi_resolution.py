"""
Tests for ABI resolution (cache first, then Arbiscan).
"""

import json
from unittest.mock import Mock

import pytest

from src.orchestration.abi_resolution import load_manual_abi, resolve_contract_abi
from src.venues.arbiscan_client import ArbiscanAbiUnavailableError

ADDRESS = "0x82C13fCab02A168F06E12373F9e5D2C2Bd47e399"
ABI = [{"type": "function", "name": "computeRewards", "inputs": [], "outputs": []}]


def test_cache_hit_skips_fetch(tmp_path):
    cache = tmp_path / "contract-abi.json"
    cache.write_text(json.dumps(ABI))
    client = Mock()

    assert resolve_contract_abi(ADDRESS, cache, client) == ABI
    client.get_contract_abi.assert_not_called()


def test_cache_miss_fetches_and_writes_cache(tmp_path):
    cache = tmp_path / "contract-abi.json"
    client = Mock()
    client.get_contract_abi.return_value = ABI

    assert resolve_contract_abi(ADDRESS, cache, client) == ABI
    client.get_contract_abi.assert_called_once_with(ADDRESS)
    assert json.loads(cache.read_text()) == ABI


def test_corrupt_cache_is_refetched(tmp_path):
    cache = tmp_path / "contract-abi.json"
    cache.write_text("{broken")
    client = Mock()
    client.get_contract_abi.return_value = ABI

    assert resolve_contract_abi(ADDRESS, cache, client) == ABI
    assert json.loads(cache.read_text()) == ABI


def test_refresh_ignores_cache(tmp_path):
    cache = tmp_path / "contract-abi.json"
    cache.write_text(json.dumps([]))
    client = Mock()
    client.get_contract_abi.return_value = ABI

    assert resolve_contract_abi(ADDRESS, cache, client, refresh=True) == ABI


def test_fetch_failure_propagates_and_leaves_no_cache(tmp_path):
    cache = tmp_path / "contract-abi.json"
    client = Mock()
    client.get_contract_abi.side_effect = ArbiscanAbiUnavailableError("not verified")

    with pytest.raises(ArbiscanAbiUnavailableError):
        resolve_contract_abi(ADDRESS, cache, client)

    assert not cache.exists()


def test_load_manual_abi_copies_into_cache(tmp_path):
    source = tmp_path / "my-abi.json"
    source.write_text(json.dumps(ABI))
    cache = tmp_path / "contract-abi.json"

    assert load_manual_abi(source, cache) == ABI
    assert json.loads(cache.read_text()) == ABI


def test_cache_write_failure_still_returns_fetched_abi(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    cache = blocker / "contract-abi.json"
    client = Mock()
    client.get_contract_abi.return_value = ABI

    assert resolve_contract_abi(ADDRESS, cache, client) == ABI
    assert not cache.exists()
