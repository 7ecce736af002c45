"""
Sequential reward queries over the configured pool list.

**Conceptual**: For one epoch, call computeRewards(poolId, epoch) once per
configured pool, in list order, and collect one QueryResult per pool. This is
the only workflow both the CLI and the web form run.

**Processing rules**:
  - Strictly sequential: each call completes before the next starts.
  - Best effort: a failed call becomes a QueryResult with `error` set and the
    loop moves on. Failures are data, not exceptions.
  - No retries, no sorting, no aggregation: the returned list has exactly one
    entry per pool, in the same order as the input.
  - No timeout is applied here; the RPC adapter's HTTP timeout is the only one.

**Recording**: An optional recorder callback runs after every successful call
(the CLI uses it to append CSV rows). Filesystem errors from the recorder are
fatal and propagate to the caller.
"""

import logging
from typing import Any, Callable, Optional, Sequence

import pandas as pd

from src.contracts.abi import COMPUTE_REWARDS_FUNCTION
from src.data.schemas import (
    CallRecord,
    PoolEntry,
    QueryResult,
    lookup_pool_name,
)
from src.utils.math import call_result_to_string, normalize_reward_value
from src.venues.base import ContractCaller

logger = logging.getLogger(__name__)

# Called after each successful pool query: recorder(entry, epoch, result)
PoolRecorder = Callable[[PoolEntry, int, QueryResult], None]

# Called after each successful generic call: recorder(args, record)
CallRecorder = Callable[[Sequence[Any], CallRecord], None]


def parse_epoch(value: Any) -> int:
    """
    Parse a user-supplied epoch into a non-negative integer.

    Accepts ints, decimal strings and 0x-prefixed hex strings (surrounding
    whitespace is ignored). Booleans and negative numbers are rejected since
    the contract parameter is a uint256.

    Raises:
        ValueError: If the value is missing, not an integer, or negative.

    Example:
        >>> parse_epoch("42")
        42
        >>> parse_epoch("0x2a")
        42
    """
    if value is None or isinstance(value, bool):
        raise ValueError("Epoch is required")

    if isinstance(value, int):
        epoch = value
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("Epoch is required")
        try:
            epoch = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise ValueError(f"Epoch must be a non-negative integer, got: {value!r}")

    if epoch < 0:
        raise ValueError(f"Epoch must be a non-negative integer, got: {value!r}")

    return epoch


def query_pool(
    caller: ContractCaller,
    entry: PoolEntry,
    epoch: int,
    function_name: str = COMPUTE_REWARDS_FUNCTION,
) -> QueryResult:
    """
    Query one pool and capture the outcome as a QueryResult.

    Any exception from the caller is caught and its message stored in
    `error`; this function itself never raises for call failures.
    """
    try:
        value = caller.call_function(function_name, [entry.id, epoch])
    except Exception as e:
        logger.warning("Error processing %s: %s", entry.name, e)
        return QueryResult.failure(entry, str(e))

    return QueryResult.success(entry, call_result_to_string(value))


def query_pool_rewards(
    caller: ContractCaller,
    pools: Sequence[PoolEntry],
    epoch: int,
    function_name: str = COMPUTE_REWARDS_FUNCTION,
    recorder: Optional[PoolRecorder] = None,
) -> list[QueryResult]:
    """
    Query every pool for one epoch, sequentially, and return all outcomes.

    **Workflow** (per pool, in list order):
      1. caller.call_function(function_name, [pool.id, epoch])
      2. Success: QueryResult with raw_result and formatted_value set, then
         recorder(pool, epoch, result) if a recorder was given.
      3. Failure: QueryResult with error set; processing continues.

    Args:
        caller: Contract-call collaborator.
        pools: Ordered pool entries.
        epoch: Reward epoch (see parse_epoch()).
        function_name: Read function taking (bytes32 poolId, uint256 epoch).
        recorder: Optional callback for successful results.

    Returns:
        One QueryResult per pool, in input order.

    Raises:
        OSError: Propagated from the recorder (e.g. the results CSV can't be
                 written). Call failures never raise.

    Example:
        >>> results = query_pool_rewards(caller, settings.pools.entries, epoch=42)
        >>> [r.formatted_value for r in results]
        ['1.234567', '0.5', None, '12', '0']
    """
    logger.info(
        "Processing %d predefined pool IDs with epoch = %d", len(pools), epoch
    )

    results = []
    for index, entry in enumerate(pools, start=1):
        logger.info("[%d/%d] Processing %s with ID: %s", index, len(pools), entry.name, entry.id)

        result = query_pool(caller, entry, epoch, function_name=function_name)
        if result.ok and recorder is not None:
            recorder(entry, epoch, result)

        results.append(result)

    return results


def query_single_pool(
    caller: ContractCaller,
    pool_id: str,
    epoch: int,
    pools: Sequence[PoolEntry] = (),
    function_name: str = COMPUTE_REWARDS_FUNCTION,
) -> QueryResult:
    """
    Query one pool by id.

    The display name comes from the configured pool list, or is
    "Custom Pool" when the id isn't configured.
    """
    entry = PoolEntry(id=pool_id, name=lookup_pool_name(pool_id, pools))
    return query_pool(caller, entry, epoch, function_name=function_name)


def call_function_batch(
    caller: ContractCaller,
    function_name: str,
    argument_sets: Sequence[Sequence[Any]],
    recorder: Optional[CallRecorder] = None,
) -> list[CallRecord]:
    """
    Call a read function once per argument set, sequentially.

    Same failure semantics as query_pool_rewards(): each failure becomes a
    CallRecord with `error` set and the loop continues.
    """
    records = []
    for index, args in enumerate(argument_sets, start=1):
        logger.info("[%d/%d] Calling %s with %s", index, len(argument_sets), function_name, list(args))

        try:
            value = caller.call_function(function_name, list(args))
        except Exception as e:
            logger.warning("Error calling %s with %s: %s", function_name, list(args), e)
            records.append(CallRecord(inputs=tuple(args), error=str(e)))
            continue

        raw_result = call_result_to_string(value)
        record = CallRecord(
            inputs=tuple(args),
            raw_result=raw_result,
            formatted_value=normalize_reward_value(raw_result),
        )
        if recorder is not None:
            recorder(args, record)
        records.append(record)

    return records


def summarize_results(results: Sequence[QueryResult | CallRecord]) -> dict[str, int]:
    """Count total, successful and failed outcomes."""
    successful = sum(1 for result in results if result.ok)
    return {
        "total": len(results),
        "successful": successful,
        "failed": len(results) - successful,
    }


def results_to_frame(results: Sequence[QueryResult]) -> pd.DataFrame:
    """
    Tabulate query results for display.

    Columns: pool_name, pool_id, raw_result, formatted_value, error (in that
    order, one row per result, input order preserved).
    """
    columns = ["pool_name", "pool_id", "raw_result", "formatted_value", "error"]
    return pd.DataFrame(
        [
            {
                "pool_name": result.pool_name,
                "pool_id": result.pool_id,
                "raw_result": result.raw_result,
                "formatted_value": result.formatted_value,
                "error": result.error,
            }
            for result in results
        ],
        columns=columns,
    )
