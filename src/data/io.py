"""
File I/O for the results CSV and the contract ABI cache.

**Conceptual**: This module is the *only* I/O boundary for files the tool
writes. The CLI records every successful contract call as one CSV row, and the
fetched contract ABI is cached as JSON so later runs skip the block-explorer
round trip. Centralising the writes here means:
  - The results CSV header is checked (and upgraded) before every append.
  - Schema upgrades of old files are atomic: a crash mid-rewrite never leaves
    a half-written file behind.
  - Filesystem faults surface as OSError with the path in the message.

**Rule**: Never open the results CSV directly from the CLI, web, or
orchestration code. Use append_result_row() / read_results_csv() instead.

**Concurrency**: No locking is performed. Within one process appends happen
strictly one after another; several processes appending to the same file can
interleave rows.
"""

import json
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd

from src.data.schemas import (
    MIGRATED_COLUMN_PLACEHOLDERS,
    UNKNOWN_POOL_NAME,
    SchemaValidationError,
    build_results_header,
    missing_results_columns,
    resolve_input_headers,
    validate_results_frame,
)
from src.utils.math import normalize_reward_value
from src.utils.time import Clock, RealClock, format_iso_timestamp

logger = logging.getLogger(__name__)


class SchemaAction(Enum):
    """What ensure_results_csv_schema() had to do to the file."""
    CREATED = "created"
    MIGRATED = "migrated"
    UNCHANGED = "unchanged"


def _atomic_write_text(path: Path, content: str) -> None:
    """
    Replace `path` with `content` atomically.

    The content is written to a temp file in the same directory and moved into
    place with os.replace(), so readers see either the old file or the new
    one. On any failure the temp file is removed and the original is left as
    it was.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def migrate_results_csv(path: Path | str) -> list[str]:
    """
    Upgrade an existing results CSV to the current column set.

    **Conceptual**: Files written by earlier versions of the tool can be missing
    the FormattedResult and/or PoolName columns. Before appending a row in the
    current format we rewrite the whole file:
      - The missing column names are appended to the header line.
      - Every non-blank data line gets the matching placeholders appended
        ("N/A" for FormattedResult, "Unknown" for PoolName).
      - Blank lines, row order and all original values are kept unchanged.

    **Idempotent**: Once both columns are present the file is not touched, so
    running this twice leaves the file byte-for-byte identical.

    **Atomic**: The rewrite goes through a temp file and os.replace().

    Args:
        path: Existing results CSV.

    Returns:
        The column names that were added (empty list if nothing changed).

    Raises:
        OSError: If the file can't be read or rewritten.
    """
    path = Path(path)

    try:
        with open(path, "r", encoding="utf-8", newline="") as handle:
            content = handle.read()
    except OSError as e:
        raise OSError(f"{path}: Failed to read results CSV. Error: {e}") from e

    lines = content.split("\n")
    missing = missing_results_columns(lines[0])
    if not missing:
        return []

    suffix = "".join(f",{column}" for column in missing)
    placeholders = "".join(f",{MIGRATED_COLUMN_PLACEHOLDERS[column]}" for column in missing)

    upgraded = []
    for index, line in enumerate(lines):
        # Keep CRLF files CRLF: the extra cells go before the carriage return
        body, cr = (line[:-1], "\r") if line.endswith("\r") else (line, "")
        if index == 0:
            upgraded.append(f"{body}{suffix}{cr}")
        elif body.strip() != "":
            upgraded.append(f"{body}{placeholders}{cr}")
        else:
            upgraded.append(line)

    try:
        _atomic_write_text(path, "\n".join(upgraded))
    except OSError as e:
        raise OSError(f"{path}: Failed to migrate results CSV. Error: {e}") from e

    logger.info("Updated %s to include columns %s", path, missing)
    return missing


def ensure_results_csv_schema(
    path: Path | str,
    input_headers: Sequence[str],
) -> SchemaAction:
    """
    Make sure `path` exists with a current results CSV header.

    **Functionally**:
      - Missing or empty file: create it (and its parent directory) with the
        full header built from `input_headers`.
      - Existing file lacking later-version columns: migrate it in place.
      - Otherwise: leave it alone.

    Args:
        path: Results CSV path.
        input_headers: Input column headers, used only when creating the file.

    Returns:
        SchemaAction describing what was done.

    Raises:
        OSError: On filesystem faults.
    """
    path = Path(path)

    if path.exists() and path.stat().st_size > 0:
        added = migrate_results_csv(path)
        return SchemaAction.MIGRATED if added else SchemaAction.UNCHANGED

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(build_results_header(input_headers) + "\n")
    except OSError as e:
        raise OSError(f"{path}: Failed to create results CSV. Error: {e}") from e

    logger.info("Created new results CSV with headers at %s", path)
    return SchemaAction.CREATED


def append_result_row(
    path: Path | str,
    function_name: str,
    input_values: Sequence[Any],
    raw_result: str,
    pool_name: Optional[str] = None,
    input_headers: Optional[Sequence[Optional[str]]] = None,
    clock: Optional[Clock] = None,
) -> str:
    """
    Append one contract call result to the results CSV.

    **Conceptual**: This is the CSV sink used after every successful call.
    Each call opens the file, possibly upgrades its header, appends one line
    and closes it again; no handle is held between calls.

    **Workflow**:
      1. Ensure the header exists and is current (create or migrate).
      2. Format the raw result (÷ 1e18, 6 fractional digits, or "N/A").
      3. Append "timestamp,function,<inputs>,raw,formatted,pool" + newline
         in append mode (existing content is never truncated here).

    Values are joined as-is (no quoting), matching files produced by earlier
    versions of the tool.

    Args:
        path: Results CSV path.
        function_name: Contract function that was called.
        input_values: Call arguments, in order. Converted with str().
        raw_result: Raw result string from the call.
        pool_name: Pool display name, or None ("Unknown" is written).
        input_headers: Parameter names for a new file's header. None means
                       positional Input1..InputN headers.
        clock: Time source for the row timestamp (RealClock by default).

    Returns:
        The formatted result written to the row.

    Raises:
        OSError: On filesystem faults (permissions, disk full, ...).

    Example:
        >>> append_result_row(
        ...     "results.csv",
        ...     "computeRewards",
        ...     ["0x02d1...893a", 42],
        ...     "1500000000000000000",
        ...     pool_name="PancakeSwap WETH",
        ... )
        '1.5'
    """
    path = Path(path)
    clock = clock or RealClock()

    headers = resolve_input_headers(input_headers, len(input_values))
    ensure_results_csv_schema(path, headers)

    formatted_result = normalize_reward_value(raw_result)
    timestamp = format_iso_timestamp(clock.now())
    cells = [timestamp, function_name]
    cells += [str(value) for value in input_values]
    cells += [raw_result, formatted_result, pool_name or UNKNOWN_POOL_NAME]
    line = ",".join(cells) + "\n"

    try:
        with open(path, "a", encoding="utf-8", newline="") as handle:
            handle.write(line)
    except OSError as e:
        raise OSError(f"{path}: Failed to append result row. Error: {e}") from e

    logger.debug("Appended result for %s to %s", function_name, path)
    return formatted_result


def read_results_csv(path: Path | str) -> pd.DataFrame:
    """
    Read a results CSV into a DataFrame with every value kept as a string.

    **Why strings?** Raw results are uint256 values far beyond int64, and
    "N/A"/"Unknown" placeholders must not turn into NaN. Reading with dtype=str
    and keep_default_na=False preserves the file exactly as written.

    Rows whose cell count does not match the header (for example rows written
    by a different function with more inputs) make pandas fail; that surfaces
    as SchemaValidationError.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SchemaValidationError: If the CSV can't be parsed or lacks base columns.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Results CSV not found: {path}. "
            f"Run a lookup first or check OUTPUT_FILE_PATH."
        )

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except Exception as e:
        raise SchemaValidationError(f"{path}: Failed to read CSV. Error: {e}")

    validate_results_frame(df, context=str(path))
    return df


def read_abi_file(path: Path | str) -> list[dict]:
    """
    Load a contract ABI from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a JSON array.
    """
    path = Path(path)

    with open(path, "r", encoding="utf-8") as handle:
        try:
            abi = json.load(handle)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: ABI file is not valid JSON. Error: {e}") from e

    if not isinstance(abi, list):
        raise ValueError(f"{path}: Expected ABI to be a JSON array, got {type(abi).__name__}")

    return abi


def write_abi_file(path: Path | str, abi: list[dict]) -> None:
    """
    Save a contract ABI as pretty-printed JSON (atomic replace).

    Raises:
        OSError: If the file can't be written.
    """
    path = Path(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write_text(path, json.dumps(abi, indent=2))
    except OSError as e:
        raise OSError(f"{path}: Failed to write ABI cache. Error: {e}") from e
