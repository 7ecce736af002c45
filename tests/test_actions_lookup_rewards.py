"""
Tests for the interactive rewards CLI.

**Purpose**: Drive the prompt flows with scripted answers and a fake contract
caller, then check what was printed and what landed in the results CSV.

**Testing philosophy**: Every prompt function takes an `input_fn`, so tests
never touch stdin and never reach the network.
"""

import json
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add project root to path so we can import actions module
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions.lookup_rewards import (
    SessionAborted,
    ask_yes_no,
    ensure_contract_address,
    main,
    obtain_abi,
    run_function,
    run_interactive_session,
    select_function,
)
from src.config.settings import OutputSettings, PoolSettings, RpcSettings, Settings
from src.contracts.abi import COMPUTE_REWARDS_ABI, read_functions
from src.data.schemas import build_pool_entries
from src.venues.arbiscan_client import ArbiscanAbiUnavailableError

CONTRACT = "0x82C13fCab02A168F06E12373F9e5D2C2Bd47e399"
POOL_A = "0x" + "aa" * 32
POOL_B = "0x" + "bb" * 32

BALANCE_OF = {
    "type": "function",
    "name": "balanceOf",
    "inputs": [{"name": "account", "type": "address"}],
    "outputs": [{"name": "", "type": "uint256"}],
    "stateMutability": "view",
}
TOTAL_AT = {
    "type": "function",
    "name": "totalAt",
    "inputs": [{"name": "epoch", "type": "uint256"}],
    "outputs": [{"name": "", "type": "uint256"}],
    "stateMutability": "view",
}
FULL_ABI = [BALANCE_OF, TOTAL_AT] + COMPUTE_REWARDS_ABI


def scripted(*answers):
    """Return an input() replacement that plays back `answers` in order."""
    remaining = iter(answers)
    return lambda prompt="": next(remaining)


class FakeCaller:
    def __init__(self, failures=()):
        self.failures = set(failures)
        self.calls = []

    def call_function(self, function_name, args):
        self.calls.append((function_name, list(args)))
        if args and args[0] in self.failures:
            raise RuntimeError("execution reverted")
        return 3 * 10 ** 18


@pytest.fixture
def settings(tmp_path):
    return Settings(
        rpc=RpcSettings(rpc_url="http://localhost:8545", contract_address=CONTRACT),
        output=OutputSettings(
            results_path=tmp_path / "results.csv",
            abi_cache_path=tmp_path / "contract-abi.json",
        ),
        pools=PoolSettings(entries=build_pool_entries([POOL_A, POOL_B], ["Alpha", "Beta"])),
    )


def function_named(name):
    return next(f for f in read_functions(FULL_ABI) if f.name == name)


# ============================================================================
# Small prompts
# ============================================================================

def test_ask_yes_no():
    assert ask_yes_no("?", scripted("y"))
    assert ask_yes_no("?", scripted(" Y "))
    assert ask_yes_no("?", scripted("yes"))
    assert ask_yes_no("?", scripted("YES"))
    assert not ask_yes_no("?", scripted("n"))
    assert not ask_yes_no("?", scripted(""))


def test_ensure_contract_address_uses_configured_value(monkeypatch, tmp_path):
    monkeypatch.setenv("CONTRACT_ADDRESS", CONTRACT)

    address = ensure_contract_address(scripted(), env_path=tmp_path / ".env")

    assert address == CONTRACT
    assert not (tmp_path / ".env").exists()


def test_ensure_contract_address_prompts_and_saves(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("CONTRACT_ADDRESS", "")
    env_path = tmp_path / ".env"
    env_path.write_text("RPC_URL=http://localhost:8545\n")

    address = ensure_contract_address(scripted("not-an-address", CONTRACT), env_path=env_path)

    assert address == CONTRACT
    content = env_path.read_text()
    assert "RPC_URL=http://localhost:8545" in content
    assert "CONTRACT_ADDRESS=" in content and CONTRACT in content
    assert "Invalid address" in capsys.readouterr().out


def test_select_function_retries_until_valid(capsys):
    functions = read_functions(FULL_ABI)

    chosen = select_function(functions, scripted("9", "abc", "2"))

    assert chosen.name == "totalAt"
    out = capsys.readouterr().out
    assert "1. balanceOf(address account) -> (uint256)" in out
    assert out.count("Invalid selection") == 2


# ============================================================================
# ABI loading
# ============================================================================

def test_obtain_abi_from_client(settings):
    client = Mock()
    client.get_contract_abi.return_value = FULL_ABI

    assert obtain_abi(settings, scripted(), client=client) == FULL_ABI
    assert settings.output.abi_cache_path.exists()


def test_obtain_abi_falls_back_to_manual_file(settings, tmp_path):
    client = Mock()
    client.get_contract_abi.side_effect = ArbiscanAbiUnavailableError("not verified")
    manual = tmp_path / "manual.json"
    manual.write_text(json.dumps(FULL_ABI))

    abi = obtain_abi(
        settings,
        scripted("y", str(tmp_path / "missing.json"), "y", str(manual)),
        client=client,
    )

    assert abi == FULL_ABI
    assert json.loads(settings.output.abi_cache_path.read_text()) == FULL_ABI


def test_obtain_abi_survives_unwritable_cache(settings, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    settings = Settings(
        rpc=settings.rpc,
        output=OutputSettings(
            results_path=settings.output.results_path,
            abi_cache_path=blocker / "contract-abi.json",
        ),
        pools=settings.pools,
    )
    client = Mock()
    client.get_contract_abi.return_value = FULL_ABI

    assert obtain_abi(settings, scripted(), client=client) == FULL_ABI


def test_obtain_abi_declined(settings):
    client = Mock()
    client.get_contract_abi.side_effect = ArbiscanAbiUnavailableError("not verified")

    with pytest.raises(SessionAborted):
        obtain_abi(settings, scripted("n"), client=client)


# ============================================================================
# Call flows
# ============================================================================

def test_pool_epoch_flow_queries_every_pool(settings, capsys):
    caller = FakeCaller(failures=[POOL_B])

    results = run_function(
        caller, function_named("computeRewards"), settings,
        settings.output.results_path, scripted("abc", "42"),
    )

    assert [r.ok for r in results] == [True, False]
    assert caller.calls == [("computeRewards", [POOL_A, 42]), ("computeRewards", [POOL_B, 42])]

    lines = settings.output.results_path.read_text().splitlines()
    assert lines[0] == "Timestamp,Function,input1,input2,Result,FormattedResult,PoolName"
    assert len(lines) == 2
    assert lines[1].endswith(f",computeRewards,{POOL_A},42,3000000000000000000,3,Alpha")

    out = capsys.readouterr().out
    assert "Invalid input for type uint256" in out
    assert "Total pools processed: 2" in out
    assert "Failed: 1" in out


def test_batch_flow_for_single_input_function(settings, capsys):
    caller = FakeCaller()

    records = run_function(
        caller, function_named("totalAt"), settings,
        settings.output.results_path, scripted("y", "", "1, x", "1, 2, 0x03"),
    )

    assert [record.inputs for record in records] == [(1,), (2,), (3,)]
    lines = settings.output.results_path.read_text().splitlines()
    assert lines[0] == "Timestamp,Function,epoch,Result,FormattedResult,PoolName"
    assert len(lines) == 4
    assert lines[1].endswith(",totalAt,1,3000000000000000000,3,Unknown")

    out = capsys.readouterr().out
    assert "No values provided" in out
    assert "Invalid values for type uint256: x" in out
    assert "Total values processed: 3" in out


def test_single_call_flow(settings):
    caller = FakeCaller()

    records = run_function(
        caller, function_named("balanceOf"), settings,
        settings.output.results_path,
        scripted("n", "0x82c13fcab02a168f06e12373f9e5d2c2bd47e399"),
    )

    assert len(records) == 1
    assert caller.calls == [("balanceOf", [CONTRACT])]


def test_failed_single_call_is_not_recorded(settings):
    caller = FakeCaller(failures=[CONTRACT])

    records = run_function(
        caller, function_named("balanceOf"), settings,
        settings.output.results_path, scripted("n", CONTRACT),
    )

    assert not records[0].ok
    assert not settings.output.results_path.exists()


def test_interactive_session_loops_until_done(settings, capsys):
    caller = FakeCaller()

    run_interactive_session(
        settings, caller, FULL_ABI, settings.output.results_path,
        scripted(
            "3", "7",          # computeRewards for epoch 7
            "y",               # another call -> back to the menu
            "2", "n", "5",     # totalAt(5), single value
            "y", "y", "n", "6",  # same function again, totalAt(6)
            "n",               # done
        ),
    )

    assert [name for name, _ in caller.calls] == [
        "computeRewards", "computeRewards", "totalAt", "totalAt",
    ]
    assert "Goodbye!" in capsys.readouterr().out


def test_interactive_session_without_read_functions(settings):
    abi = [{**BALANCE_OF, "stateMutability": "nonpayable"}]

    with pytest.raises(SessionAborted, match="No readable functions"):
        run_interactive_session(settings, FakeCaller(), abi, settings.output.results_path, scripted())


# ============================================================================
# main()
# ============================================================================

@pytest.fixture
def clean_env(monkeypatch):
    for name in ["POOL_IDS", "POOL_NAMES", "CONTRACT_ADDRESS", "RPC_URL", "OUTPUT_FILE_PATH"]:
        monkeypatch.delenv(name, raising=False)


def test_main_epoch_mode_writes_csv(tmp_path, clean_env):
    output = tmp_path / "rewards.csv"

    with patch("actions.lookup_rewards.Web3ContractCaller", return_value=FakeCaller()):
        with pytest.raises(SystemExit) as exc_info:
            main(["--epoch", "42", "--output", str(output)], input_fn=scripted())

    assert exc_info.value.code == 0
    assert len(output.read_text().splitlines()) == 6


def test_main_epoch_mode_partial_failure_exit_code(tmp_path, clean_env):
    from src.config.settings import DEFAULT_POOL_IDS

    caller = FakeCaller(failures=[DEFAULT_POOL_IDS[2]])
    with patch("actions.lookup_rewards.Web3ContractCaller", return_value=caller):
        with pytest.raises(SystemExit) as exc_info:
            main(["--epoch", "1", "--output", str(tmp_path / "r.csv")], input_fn=scripted())

    assert exc_info.value.code == 1


def test_main_invalid_epoch(tmp_path, clean_env):
    with pytest.raises(SystemExit) as exc_info:
        main(["--epoch", "soon", "--output", str(tmp_path / "r.csv")], input_fn=scripted())

    assert exc_info.value.code == 1


def test_main_invalid_pool_config(monkeypatch, clean_env):
    monkeypatch.setenv("POOL_IDS", "0xnope")

    with pytest.raises(SystemExit) as exc_info:
        main(["--epoch", "1"], input_fn=scripted())

    assert exc_info.value.code == 1


def test_main_interrupted(tmp_path, clean_env, monkeypatch):
    monkeypatch.setenv("ABI_CACHE_PATH", str(tmp_path / "abi.json"))

    def interrupt(prompt=""):
        raise KeyboardInterrupt

    with patch("actions.lookup_rewards.ArbiscanClient") as client_cls:
        client_cls.return_value.get_contract_abi.side_effect = ArbiscanAbiUnavailableError("nope")
        with pytest.raises(SystemExit) as exc_info:
            main(["--output", str(tmp_path / "r.csv")], input_fn=interrupt)

    assert exc_info.value.code == 130
