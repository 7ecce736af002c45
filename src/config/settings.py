"""
Configuration settings for the rewards lookup tool.

**Conceptual**: This module provides strongly-typed, immutable configuration
objects that load from environment variables (via .env files). All settings
are validated when constructed, so a typo in POOL_IDS or a non-numeric timeout
fails at startup rather than halfway through a batch of contract calls.

**No global settings object**: entry points build one Settings value with
Settings.from_env() and pass it (or the relevant sub-settings) explicitly to
the code that needs it. Tests construct settings directly.

This module uses python-dotenv to load .env files and frozen dataclasses for
type safety.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from src.data.schemas import PoolEntry, SchemaValidationError, build_pool_entries

# Load .env from project root (dev/local environments); real environment wins
_ENV_PATH = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=_ENV_PATH)


DEFAULT_RPC_URL = "https://arb1.arbitrum.io/rpc"

# Stryke rewards contract on Arbitrum One
DEFAULT_CONTRACT_ADDRESS = "0x82C13fCab02A168F06E12373F9e5D2C2Bd47e399"

DEFAULT_ARBISCAN_BASE_URL = "https://api.arbiscan.io/api"

DEFAULT_OUTPUT_FILE_PATH = "./results.csv"
DEFAULT_ABI_CACHE_PATH = "./contract-abi.json"

# Built-in pool list: bytes32 gauge ids and their display names, matched by index
DEFAULT_POOL_IDS = (
    "0x02d1dc927ecebd87407e1a58a6f2d81f0d6c0ade72ac926e865310aa482b893a",
    "0x726dd6a67a7c5b399e0e6954596d6b01605ec97e34e75f5547416146ec001a6c",
    "0x74b6b9b1267a0a12d24cfa963f1a3c96aae2f2cd870847cbc9a70c46b7803ae1",
    "0xbb8c79b0fc39426b2cf4bb42501aaa2bdcc7a72f86a564d44a42c6385496618d",
    "0x36ff4f3050b6a776353d7d160276dcf6b310a658502e226fdd2fa049e6c603dd",
)
DEFAULT_POOL_NAMES = (
    "PancakeSwap WETH",
    "PancakeSwap WBTC",
    "OrangeFinance PCS WETH",
    "OrangeFinance PCS WBTC",
    "OrangeFinance PCS ARB",
)


def _parse_int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")


def _split_env_list(name: str) -> Optional[tuple[str, ...]]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return None
    return tuple(item.strip() for item in raw.split(","))


@dataclass(frozen=True)
class RpcSettings:
    """
    Configuration for the JSON-RPC endpoint and the rewards contract.

    Attributes:
        rpc_url: HTTP JSON-RPC endpoint (Arbitrum One by default).
        contract_address: Address of the contract whose read functions are
                          called. REQUIRED - raises ValueError if empty.
        timeout_seconds: HTTP timeout for each RPC request (default 30).
                         This is the only timeout applied to contract calls.
    """
    rpc_url: str
    contract_address: str
    timeout_seconds: int = 30

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.rpc_url:
            raise ValueError(
                "RPC_URL is required but not set. "
                "Please set it in your .env file or environment variables."
            )
        if not self.contract_address:
            raise ValueError(
                "CONTRACT_ADDRESS is required but not set. "
                "Please set it in your .env file or environment variables."
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"RPC_TIMEOUT_SECONDS must be positive, got: {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "RpcSettings":
        """
        Load RPC settings from environment variables.

        **Environment variables**:
          - RPC_URL (optional): defaults to https://arb1.arbitrum.io/rpc
          - CONTRACT_ADDRESS (optional): defaults to the Stryke rewards contract.
            An explicitly empty value is rejected.
          - RPC_TIMEOUT_SECONDS (optional): defaults to 30.

        Raises:
            ValueError: If a value is missing or not a valid integer.
        """
        return cls(
            rpc_url=os.getenv("RPC_URL", DEFAULT_RPC_URL),
            contract_address=os.getenv("CONTRACT_ADDRESS", DEFAULT_CONTRACT_ADDRESS).strip(),
            timeout_seconds=_parse_int_env("RPC_TIMEOUT_SECONDS", "30"),
        )


@dataclass(frozen=True)
class ArbiscanSettings:
    """
    Configuration for the Arbiscan (Etherscan-compatible) contract ABI API.

    **No required key**: Arbiscan serves verified ABIs without an API key at
    a low rate limit. Setting ARBISCAN_API_KEY raises that limit.

    Attributes:
        base_url: API endpoint (default https://api.arbiscan.io/api).
        api_key: Optional API key; empty string when not configured.
        timeout_seconds: HTTP request timeout in seconds (default 30).
    """
    base_url: str = DEFAULT_ARBISCAN_BASE_URL
    api_key: str = ""
    timeout_seconds: int = 30

    def __post_init__(self):
        if not self.base_url:
            raise ValueError(
                "ARBISCAN_BASE_URL must not be empty. "
                "Unset it to use the default endpoint."
            )

    @classmethod
    def from_env(cls) -> "ArbiscanSettings":
        """
        Load Arbiscan settings from environment variables.

        **Environment variables**:
          - ARBISCAN_API_KEY (optional)
          - ARBISCAN_BASE_URL (optional)
          - ARBISCAN_TIMEOUT_SECONDS (optional, default 30)
        """
        return cls(
            base_url=os.getenv("ARBISCAN_BASE_URL", DEFAULT_ARBISCAN_BASE_URL),
            api_key=os.getenv("ARBISCAN_API_KEY", ""),
            timeout_seconds=_parse_int_env("ARBISCAN_TIMEOUT_SECONDS", "30"),
        )


@dataclass(frozen=True)
class OutputSettings:
    """
    Where the tool writes files.

    Attributes:
        results_path: Results CSV that every successful call is appended to.
        abi_cache_path: JSON file caching the fetched contract ABI.
    """
    results_path: Path = Path(DEFAULT_OUTPUT_FILE_PATH)
    abi_cache_path: Path = Path(DEFAULT_ABI_CACHE_PATH)

    @classmethod
    def from_env(cls) -> "OutputSettings":
        return cls(
            results_path=Path(os.getenv("OUTPUT_FILE_PATH", DEFAULT_OUTPUT_FILE_PATH)),
            abi_cache_path=Path(os.getenv("ABI_CACHE_PATH", DEFAULT_ABI_CACHE_PATH)),
        )


@dataclass(frozen=True)
class PoolSettings:
    """
    The ordered list of pools every epoch query runs over.

    **Conceptual**: Pools are configured as two parallel lists, ids and names,
    matched by index. The list is static for the life of the process.

    Attributes:
        entries: Validated PoolEntry tuple, in query order.
    """
    entries: tuple[PoolEntry, ...] = field(
        default_factory=lambda: build_pool_entries(DEFAULT_POOL_IDS, DEFAULT_POOL_NAMES)
    )

    def __post_init__(self):
        if not self.entries:
            raise ValueError("At least one pool must be configured (POOL_IDS is empty).")

    @classmethod
    def from_env(cls) -> "PoolSettings":
        """
        Load the pool list from environment variables.

        **Environment variables**:
          - POOL_IDS (optional): comma-separated bytes32 ids. Defaults to the
            built-in list of 5 pools.
          - POOL_NAMES (optional): comma-separated display names, matched to
            POOL_IDS by position. Missing names become "Pool N". When POOL_IDS
            is not set the built-in names are used unless POOL_NAMES is given.

        Raises:
            ValueError: If an id is not a 0x-prefixed 32-byte hex string.
        """
        pool_ids = _split_env_list("POOL_IDS")
        pool_names = _split_env_list("POOL_NAMES")

        if pool_ids is None:
            pool_ids = DEFAULT_POOL_IDS
            if pool_names is None:
                pool_names = DEFAULT_POOL_NAMES

        try:
            entries = build_pool_entries(pool_ids, pool_names or ())
        except SchemaValidationError as e:
            raise ValueError(f"Invalid POOL_IDS: {e}")

        return cls(entries=entries)


@dataclass(frozen=True)
class Settings:
    """
    Top-level settings for the rewards lookup tool.

    **Usage pattern**:
      ```python
      from src.config.settings import Settings

      settings = Settings.from_env()
      results = query_pool_rewards(caller, settings.pools.entries, epoch)
      ```

    Attributes:
        rpc: RPC endpoint and contract address.
        arbiscan: ABI API settings.
        output: File locations.
        pools: Configured pool list.
    """
    rpc: RpcSettings
    arbiscan: ArbiscanSettings = field(default_factory=ArbiscanSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    pools: PoolSettings = field(default_factory=PoolSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load every settings group from environment variables.

        Raises:
            ValueError: If any group fails validation; the message names the
                        offending variable.
        """
        return cls(
            rpc=RpcSettings.from_env(),
            arbiscan=ArbiscanSettings.from_env(),
            output=OutputSettings.from_env(),
            pools=PoolSettings.from_env(),
        )
