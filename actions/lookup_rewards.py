#!/usr/bin/env python3
"""
Interactive caller for the rewards contract's read functions.

**Purpose**: Look up Stryke gauge rewards for an epoch from the command line.
The script lists the contract's read-only functions, prompts for inputs, calls
the contract over JSON-RPC, prints each result scaled from wei, and appends
every successful call to the results CSV.

**Usage**:
    python actions/lookup_rewards.py                      # interactive session
    python actions/lookup_rewards.py --epoch 42           # all pools, no prompts
    python actions/lookup_rewards.py --output out.csv     # override OUTPUT_FILE_PATH

**What this script does** (interactive mode):
  1. Make sure a contract address is configured (prompt and save to .env if not)
  2. Load the contract ABI: cache file, then Arbiscan, then a manual file
  3. List the read functions and let the user pick one
  4. Depending on the function's inputs:
     a. (bytes*, *int*) like computeRewards: ask for the epoch only and query
        every configured pool
     b. one input: optionally take several comma-separated values
     c. otherwise: prompt for each input and make one call
  5. Save each successful call to the results CSV and print a summary
  6. Ask whether to make another call

**Requirements**:
  - Network access to the RPC endpoint (RPC_URL, Arbitrum One by default)
  - ARBISCAN_API_KEY is optional but avoids the anonymous rate limit

**Example output**:
    $ python actions/lookup_rewards.py --epoch 42
    Processing 5 pools with epoch = 42...

    [1/5] PancakeSwap WETH
      ✓ Result: 1.5
    ...
    ===== PROCESSING SUMMARY =====
    Total pools processed: 5
    Successful: 5
    Failed: 0
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

# Add project root to Python path so we can import src modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import requests
from dotenv import set_key
from web3 import Web3

from src.config.settings import DEFAULT_CONTRACT_ADDRESS, Settings
from src.contracts.abi import (
    COMPUTE_REWARDS_ABI,
    AbiFunction,
    AbiParameter,
    AbiTypeError,
    format_input,
    read_functions,
    type_hint,
    validate_input,
)
from src.data.io import append_result_row
from src.orchestration.abi_resolution import load_manual_abi, resolve_contract_abi
from src.orchestration.rewards_query import (
    call_function_batch,
    parse_epoch,
    query_pool_rewards,
    results_to_frame,
    summarize_results,
)
from src.utils.log_setup import configure_logging
from src.venues.arbiscan_client import ArbiscanClient, ArbiscanClientError
from src.venues.base import ContractCaller
from src.venues.web3_contract import Web3ContractCaller

InputFn = Callable[[str], str]

ENV_FILE_PATH = project_root / ".env"

GOODBYE = "\nThank you for using the Contract Function Caller. Goodbye!"


class SessionAborted(Exception):
    """Raised when the session can't continue (e.g. no ABI available)."""
    pass


def parse_args(argv: Optional[Sequence[str]] = None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: epoch (str or None), output (str or None)
    """
    parser = argparse.ArgumentParser(
        description="Call read functions on the Stryke rewards contract",
        epilog="""
Examples:
  # Interactive session (function menu, prompts, CSV recording)
  python actions/lookup_rewards.py

  # Query computeRewards for every configured pool at epoch 42
  python actions/lookup_rewards.py --epoch 42

  # Write results somewhere else
  python actions/lookup_rewards.py --epoch 42 --output data/rewards.csv
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--epoch",
        type=str,
        default=None,
        help="Run computeRewards for all configured pools at this epoch and exit",
    )

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Results CSV path (default: OUTPUT_FILE_PATH or ./results.csv)",
    )

    return parser.parse_args(argv)


def ask_yes_no(question: str, input_fn: InputFn = input) -> bool:
    return input_fn(question).strip().lower() in ("y", "yes")


def ensure_contract_address(input_fn: InputFn = input, env_path: Path = ENV_FILE_PATH) -> str:
    """
    Return the configured contract address, prompting for one if it's blank.

    CONTRACT_ADDRESS falls back to the rewards contract when unset; an
    explicitly empty value makes the script ask. The entered address is
    written to the .env file and the current environment.
    """
    address = os.getenv("CONTRACT_ADDRESS", DEFAULT_CONTRACT_ADDRESS).strip()
    if address:
        return address

    print("⚠ CONTRACT_ADDRESS is not set in .env file")
    while True:
        address = input_fn("\nPlease enter the contract address: ").strip()
        if Web3.is_address(address):
            break
        print("✗ Invalid address. Please enter a 0x-prefixed 20-byte address.")

    set_key(str(env_path), "CONTRACT_ADDRESS", address)
    os.environ["CONTRACT_ADDRESS"] = address
    print(f"✓ Contract address saved to {env_path}")
    return address


def obtain_abi(settings: Settings, input_fn: InputFn = input, client: Optional[ArbiscanClient] = None) -> list[dict]:
    """
    Load the contract ABI from cache or Arbiscan, falling back to a manual file.

    Raises:
        SessionAborted: If no ABI could be obtained and the user declined to
                        provide one.
    """
    cache_path = settings.output.abi_cache_path
    owns_client = client is None
    client = client or ArbiscanClient(settings.arbiscan)

    try:
        print("Fetching contract ABI...")
        abi = resolve_contract_abi(settings.rpc.contract_address, cache_path, client)
        print("✓ Contract ABI loaded")
        return abi
    except (ArbiscanClientError, requests.RequestException) as e:
        print(f"✗ Failed to fetch ABI: {e}")
    finally:
        if owns_client:
            client.close()

    while ask_yes_no("\nWould you like to provide the contract ABI manually? (y/n): ", input_fn):
        abi_path = input_fn("\nEnter the file path to your ABI JSON file: ").strip()
        try:
            abi = load_manual_abi(abi_path, cache_path)
        except (OSError, ValueError) as e:
            print(f"✗ Error loading ABI file: {e}")
            continue
        print("✓ ABI loaded successfully!")
        return abi

    raise SessionAborted("Cannot proceed without ABI")


def select_function(functions: Sequence[AbiFunction], input_fn: InputFn = input) -> AbiFunction:
    """Print the read-function menu and return the user's choice."""
    print("\n--- Arbiscan Contract Function Caller ---")
    print("\nAvailable read functions:")
    for index, function in enumerate(functions, start=1):
        print(f"{index}. {function.signature()}")

    while True:
        selection = input_fn("\nSelect a function by number: ").strip()
        if selection.isdigit() and 1 <= int(selection) <= len(functions):
            function = functions[int(selection) - 1]
            print(f"\n✓ Selected: {function.name}")
            return function
        print("✗ Invalid selection. Please try again.")


def prompt_for_value(param: AbiParameter, index: int, input_fn: InputFn = input, suffix: str = "") -> Any:
    """Prompt until the user enters a valid value for `param`; return it formatted."""
    label = param.display_name(index)
    while True:
        value = input_fn(f"Enter {label} ({param.type}){type_hint(param)}{suffix}: ")
        if validate_input(value, param):
            try:
                return format_input(value, param)
            except AbiTypeError as e:
                print(f"✗ {e}")
                continue
        print(f"✗ Invalid input for type {param.type}. Please try again.")


def prompt_for_batch_values(param: AbiParameter, input_fn: InputFn = input) -> list[Any]:
    """Prompt for comma-separated values; every value must be valid."""
    label = param.name or "input"
    while True:
        text = input_fn(
            f"\nEnter multiple values for {label} ({param.type}){type_hint(param)}, separated by commas: "
        )
        values = [value.strip() for value in text.split(",") if value.strip()]
        if not values:
            print("✗ No values provided. Please try again.")
            continue

        invalid = [value for value in values if not validate_input(value, param)]
        if invalid:
            print(f"✗ Invalid values for type {param.type}: {', '.join(invalid)}")
            print("Please try again.")
            continue

        try:
            return [format_input(value, param) for value in values]
        except AbiTypeError as e:
            print(f"✗ {e}")


def run_pool_epoch_flow(
    caller: ContractCaller,
    function: AbiFunction,
    settings: Settings,
    epoch: int,
    results_path: Path,
):
    """
    Query `function` for every configured pool at `epoch` and record successes.

    Returns:
        List of QueryResult, one per configured pool.
    """
    pools = settings.pools.entries
    print(f"\nProcessing {len(pools)} pools with epoch = {epoch}...")

    def record(entry, epoch_value, result):
        append_result_row(
            results_path,
            function.name,
            [entry.id, epoch_value],
            result.raw_result,
            pool_name=entry.name,
            input_headers=function.input_names,
        )

    results = query_pool_rewards(caller, pools, epoch, function_name=function.name, recorder=record)

    for index, result in enumerate(results, start=1):
        print(f"\n[{index}/{len(results)}] {result.pool_name}")
        if result.ok:
            print(f"  ✓ Result: {result.formatted_value}")
        else:
            print(f"  ✗ Error: {result.error}")

    summary = summarize_results(results)
    print("\n===== PROCESSING SUMMARY =====")
    print(f"Total pools processed: {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed: {summary['failed']}")
    print("")
    print(results_to_frame(results)[["pool_name", "formatted_value", "error"]].to_string(index=False))
    print(f"\n📝 Results saved to {results_path}")
    return results


def run_call_flow(
    caller: ContractCaller,
    function: AbiFunction,
    argument_sets: Sequence[Sequence[Any]],
    results_path: Path,
):
    """Call `function` once per argument set, record successes, print outcomes."""

    def record(args, call_record):
        append_result_row(
            results_path,
            function.name,
            args,
            call_record.raw_result,
            input_headers=function.input_names,
        )

    print(f"\nCalling contract function {function.name}...")
    records = call_function_batch(caller, function.name, argument_sets, recorder=record)

    for index, call_record in enumerate(records, start=1):
        inputs = ", ".join(str(value) for value in call_record.inputs)
        if call_record.ok:
            print(f"[{index}/{len(records)}] ({inputs}) ✓ Result: {call_record.raw_result}")
            print(f"   Formatted result (÷ 1e18): {call_record.formatted_value}")
        else:
            print(f"[{index}/{len(records)}] ({inputs}) ✗ Error: {call_record.error}")

    if len(records) > 1:
        summary = summarize_results(records)
        print("\n===== BATCH PROCESSING SUMMARY =====")
        print(f"Total values processed: {summary['total']}")
        print(f"Successful: {summary['successful']}")
        print(f"Failed: {summary['failed']}")

    if any(call_record.ok for call_record in records):
        print(f"\n📝 Results saved to {results_path}")
    return records


def run_function(
    caller: ContractCaller,
    function: AbiFunction,
    settings: Settings,
    results_path: Path,
    input_fn: InputFn = input,
):
    """Collect inputs for `function` in the way its shape calls for, then run it."""
    print("\nFunction details:")
    print(f"Name: {function.name}")
    print(f"Inputs: {len(function.inputs)}")
    for index, param in enumerate(function.inputs, start=1):
        print(f"  Input {index}: {param.name or 'unnamed'} ({param.type})")

    if function.is_pool_epoch_shape():
        print("\nUsing predefined pool IDs:")
        for index, entry in enumerate(settings.pools.entries, start=1):
            print(f"  {index}. {entry.name}: {entry.id}")
        epoch = prompt_for_value(
            function.inputs[1], 1, input_fn, suffix=" for all predefined pool IDs"
        )
        return run_pool_epoch_flow(caller, function, settings, epoch, results_path)

    if len(function.inputs) == 1 and ask_yes_no(
        "\nDo you want to process multiple values for this input? (y/n): ", input_fn
    ):
        values = prompt_for_batch_values(function.inputs[0], input_fn)
        return run_call_flow(caller, function, [[value] for value in values], results_path)

    args = [prompt_for_value(param, index, input_fn) for index, param in enumerate(function.inputs)]
    return run_call_flow(caller, function, [args], results_path)


def run_interactive_session(
    settings: Settings,
    caller: ContractCaller,
    abi: Sequence[dict],
    results_path: Path,
    input_fn: InputFn = input,
) -> None:
    """Function menu, calls and "another call?" loop until the user quits."""
    functions = read_functions(abi)
    if not functions:
        raise SessionAborted("No readable functions found in this contract")

    function = select_function(functions, input_fn)
    while True:
        run_function(caller, function, settings, results_path, input_fn)

        if not ask_yes_no("\nDo you want to make another call? (y/n): ", input_fn):
            print(GOODBYE)
            return

        if function.is_pool_epoch_shape() or not ask_yes_no(
            "Call the same function again? (y/n): ", input_fn
        ):
            function = select_function(functions, input_fn)


def main(argv: Optional[Sequence[str]] = None, input_fn: InputFn = input):
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Success
      - 1: Configuration error, missing ABI, or some pools failed (--epoch)
      - 2: Fatal error (results file not writable, unexpected failure)
      - 130: Interrupted
    """
    try:
        args = parse_args(argv)
        # Progress goes to stdout via print; log records only for warnings unless asked
        configure_logging(os.getenv("LOG_LEVEL", "WARNING"))

        try:
            if args.epoch is None:
                ensure_contract_address(input_fn)
            settings = Settings.from_env()
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        results_path = Path(args.output) if args.output else settings.output.results_path

        if args.epoch is not None:
            function = read_functions(COMPUTE_REWARDS_ABI)[0]
            try:
                epoch = parse_epoch(args.epoch)
            except ValueError as e:
                print(f"Error: --epoch: {e}", file=sys.stderr)
                sys.exit(1)
            caller = Web3ContractCaller(settings.rpc, COMPUTE_REWARDS_ABI)
            results = run_pool_epoch_flow(caller, function, settings, epoch, results_path)
            sys.exit(0 if summarize_results(results)["failed"] == 0 else 1)

        print("Checking configuration...")
        try:
            abi = obtain_abi(settings, input_fn)
            caller = Web3ContractCaller(settings.rpc, abi)
            run_interactive_session(settings, caller, abi, results_path, input_fn)
        except SessionAborted as e:
            print(f"\n{e}. Exiting.")
            sys.exit(1)

        sys.exit(0)

    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user. Exiting...")
        sys.exit(130)

    except OSError as e:
        print(f"Fatal error: file operation failed: {e}", file=sys.stderr)
        sys.exit(2)

    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(2)


if __name__ == "__main__":
    main()
