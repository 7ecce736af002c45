"""
Data contracts for pool entries, query results, and the results CSV.

**Conceptual**: This module defines the shapes that flow between the
orchestration loop, the CSV sink, the CLI and the web form:
  - PoolEntry: one (pool id, display name) pair from the configured list.
  - QueryResult: the outcome of one computeRewards call for one pool.
  - CallRecord: the outcome of one generic contract call made from the CLI.
  - The results CSV header, which is *mutable schema*: files written by older
    versions of the tool may lack the FormattedResult and/or PoolName columns
    and are upgraded in place before new rows are appended (see data/io.py).

**Schema rules for the results CSV**:
  - Header: Timestamp,Function,<input headers>,Result,FormattedResult,PoolName
  - Input headers are parameter names when known, otherwise Input1..InputN.
  - Rows are plain comma-joined values, newline terminated, append-only.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

import pandas as pd

from src.utils.math import normalize_reward_value


class SchemaValidationError(Exception):
    """
    Raised when a results CSV or pool list does not conform to the expected schema.

    Messages include the source (file path or setting name) so the problem
    can be fixed without a debugger.
    """
    pass


# Columns that lead every results CSV header
RESULTS_LEADING_COLUMNS = ["Timestamp", "Function"]

# Column holding the raw contract result
RESULT_COLUMN = "Result"

# Columns added by later schema versions, with the placeholder written into
# pre-existing rows when a file is migrated. Order matters: it is the order the
# columns are appended to an old header.
MIGRATED_COLUMN_PLACEHOLDERS = {
    "FormattedResult": "N/A",
    "PoolName": "Unknown",
}

# Value written into the PoolName column when no pool is associated with a row
UNKNOWN_POOL_NAME = "Unknown"

# Name returned for a pool id that is not in the configured list
CUSTOM_POOL_NAME = "Custom Pool"

_POOL_ID_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def positional_input_headers(count: int) -> list[str]:
    """Return Input1..InputN headers for `count` inputs."""
    return [f"Input{index + 1}" for index in range(count)]


def resolve_input_headers(
    names: Optional[Sequence[Optional[str]]],
    count: int,
) -> list[str]:
    """
    Build the input column headers for a new results CSV.

    **Functionally**:
      - If `names` is None, every header is positional (Input1, Input2, ...).
      - Otherwise each non-blank name is used as-is; blank/None names fall back
        to their positional header (so ["", "epoch"] -> ["Input1", "epoch"]).

    Args:
        names: Parameter names from the selected function's ABI, or None.
        count: Number of input values in the row being written. Used when
               `names` is None.

    Returns:
        List of header strings.
    """
    if names is None:
        return positional_input_headers(count)

    return [
        name if name else f"Input{index + 1}"
        for index, name in enumerate(names)
    ]


def build_results_header(input_headers: Sequence[str]) -> str:
    """
    Build the full header line (without trailing newline) for a new results CSV.

    Example:
        >>> build_results_header(["input1", "input2"])
        'Timestamp,Function,input1,input2,Result,FormattedResult,PoolName'
    """
    columns = (
        RESULTS_LEADING_COLUMNS
        + list(input_headers)
        + [RESULT_COLUMN]
        + list(MIGRATED_COLUMN_PLACEHOLDERS)
    )
    return ",".join(columns)


def missing_results_columns(header_line: str) -> list[str]:
    """
    Return the later-version columns absent from an existing header line.

    Columns are compared by exact name after splitting on commas, and are
    returned in the order they must be appended.

    Example:
        >>> missing_results_columns("Timestamp,Function,Input1,Result")
        ['FormattedResult', 'PoolName']
        >>> missing_results_columns("Timestamp,Function,Input1,Result,FormattedResult")
        ['PoolName']
    """
    present = {column.strip() for column in header_line.rstrip("\r").split(",")}
    return [column for column in MIGRATED_COLUMN_PLACEHOLDERS if column not in present]


def validate_results_frame(df: pd.DataFrame, context: Optional[str] = None) -> None:
    """
    Validate that a results CSV loaded into a DataFrame has the base columns.

    Only the columns every schema version shares are required (Timestamp,
    Function, Result); input columns vary per function and the migrated
    columns may be absent in files that have not been appended to yet.

    Raises:
        SchemaValidationError: If a base column is missing.
    """
    ctx = f"{context}: " if context else ""
    required = RESULTS_LEADING_COLUMNS + [RESULT_COLUMN]
    missing = [column for column in required if column not in df.columns]
    if missing:
        raise SchemaValidationError(
            f"{ctx}Missing required columns: {missing}. "
            f"Expected at least: {required}. "
            f"Found columns: {list(df.columns)}."
        )


@dataclass(frozen=True)
class PoolEntry:
    """
    One configured pool: a bytes32 identifier and its display name.

    Attributes:
        id: 0x-prefixed 32-byte hex string, passed as the first argument of
            computeRewards.
        name: Human-readable name shown in the CLI, web form and CSV.
    """
    id: str
    name: str


def build_pool_entries(
    pool_ids: Sequence[str],
    pool_names: Sequence[str] = (),
) -> tuple[PoolEntry, ...]:
    """
    Pair pool ids with display names by position.

    **Functionally**:
      - Ids are validated as 0x-prefixed 64-hex-digit strings (mixed case OK).
      - When names run short, "Pool N" (1-indexed) is substituted.
      - Blank names also fall back to "Pool N".
      - Extra names beyond the id list are ignored.

    Raises:
        SchemaValidationError: If any id is malformed.

    Example:
        >>> entries = build_pool_entries(["0x" + "ab" * 32, "0x" + "cd" * 32], ["WETH"])
        >>> [e.name for e in entries]
        ['WETH', 'Pool 2']
    """
    entries = []
    for index, pool_id in enumerate(pool_ids):
        pool_id = pool_id.strip()
        if not _POOL_ID_PATTERN.match(pool_id):
            raise SchemaValidationError(
                f"Pool id #{index + 1} is not a 0x-prefixed 32-byte hex string: {pool_id!r}"
            )

        name = pool_names[index].strip() if index < len(pool_names) else ""
        entries.append(PoolEntry(id=pool_id, name=name or f"Pool {index + 1}"))

    return tuple(entries)


def lookup_pool_name(pool_id: str, pools: Sequence[PoolEntry]) -> str:
    """Return the configured name for `pool_id`, or "Custom Pool" if unknown."""
    for entry in pools:
        if entry.id.lower() == pool_id.lower():
            return entry.name
    return CUSTOM_POOL_NAME


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of one computeRewards call for one pool.

    Exactly one of `raw_result` / `error` is set. `formatted_value` is derived
    from `raw_result` (and is "N/A" when the raw value is not numeric); it is
    None when the call failed.
    """
    pool_id: str
    pool_name: str
    raw_result: Optional[str] = None
    formatted_value: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, entry: PoolEntry, raw_result: str) -> "QueryResult":
        return cls(
            pool_id=entry.id,
            pool_name=entry.name,
            raw_result=raw_result,
            formatted_value=normalize_reward_value(raw_result),
            error=None,
        )

    @classmethod
    def failure(cls, entry: PoolEntry, error: str) -> "QueryResult":
        return cls(
            pool_id=entry.id,
            pool_name=entry.name,
            raw_result=None,
            formatted_value=None,
            error=error,
        )

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CallRecord:
    """Outcome of one generic contract call (CLI batch and single-call flows)."""
    inputs: tuple = field(default_factory=tuple)
    raw_result: Optional[str] = None
    formatted_value: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
