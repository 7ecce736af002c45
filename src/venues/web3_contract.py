"""
web3.py adapter for calling read-only functions on the rewards contract.

**Conceptual**: This module is a thin wrapper around web3.py. It owns the
HTTP provider and the contract handle and maps web3/requests exceptions onto a
small ContractCallError hierarchy. It does NOT format results or write files;
that's the orchestration loop's and data/io.py's job.

**Why wrap web3?**
  - The orchestration loop depends on the ContractCaller protocol, not web3.
  - One place decides how RPC failures are classified and described.
  - Tests can drive the adapter with a mocked contract handle.
"""

import logging
from typing import Any, Sequence

import requests
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception

from src.config.settings import RpcSettings

logger = logging.getLogger(__name__)


class ContractCallError(Exception):
    """
    Base exception for failed contract calls.

    The orchestration loop catches any exception per item and stores its
    message; callers that want to distinguish failure kinds can catch the
    subclasses below.
    """
    pass


class ContractFunctionNotFoundError(ContractCallError):
    """Raised when the requested function is not in the contract ABI."""
    pass


class ContractRevertError(ContractCallError):
    """
    Raised when the call reverted on-chain.

    **Typical causes**: unknown pool id, epoch not finalised yet.
    """
    pass


class ContractConnectionError(ContractCallError):
    """Raised when the RPC endpoint can't be reached or timed out."""
    pass


class Web3ContractCaller:
    """
    ContractCaller backed by a web3.py HTTP provider.

    **Responsibilities**:
      - Build the provider with the configured timeout.
      - Build the contract handle from the address and ABI.
      - Call view/pure functions and return the decoded value.
      - Raise descriptive ContractCallError subclasses.

    **NOT responsible for**:
      - Formatting (÷ 1e18) or CSV recording.
      - Retrying: every call is attempted exactly once.

    **Example usage**:
        >>> settings = Settings.from_env()
        >>> caller = Web3ContractCaller(settings.rpc, COMPUTE_REWARDS_ABI)
        >>> caller.call_function("computeRewards", [pool_id, 42])
        1234567890123456789
    """

    def __init__(self, settings: RpcSettings, abi: Sequence[dict]):
        """
        Args:
            settings: RPC URL, contract address and timeout.
            abi: Contract ABI (full or minimal) as a list of dicts.

        Raises:
            ValueError: If the contract address is not a valid address.
        """
        self.settings = settings
        self.web3 = Web3(
            Web3.HTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.timeout_seconds},
            )
        )
        self.contract = self.web3.eth.contract(
            address=Web3.to_checksum_address(settings.contract_address),
            abi=list(abi),
        )

    def call_function(self, function_name: str, args: Sequence[Any]) -> Any:
        """
        Call a read-only contract function once.

        Args:
            function_name: Function to call (must exist in the ABI).
            args: Positional arguments in web3 types (int, hex str, bool, ...).

        Returns:
            Decoded return value.

        Raises:
            ContractFunctionNotFoundError: Unknown function name.
            ContractRevertError: Call reverted.
            ContractConnectionError: RPC unreachable or timed out.
            ContractCallError: Any other web3 failure (bad arguments,
                               undecodable output, JSON-RPC error).
        """
        try:
            function = getattr(self.contract.functions, function_name)
        except (Web3Exception, AttributeError) as e:
            raise ContractFunctionNotFoundError(
                f"Function '{function_name}' not found in contract ABI"
            ) from e

        logger.debug("Calling %s(%s) on %s", function_name, list(args), self.settings.contract_address)

        try:
            return function(*args).call()

        except ContractLogicError as e:
            raise ContractRevertError(f"Call to {function_name} reverted: {e}") from e

        except requests.Timeout as e:
            raise ContractConnectionError(
                f"RPC request timed out after {self.settings.timeout_seconds}s "
                f"({self.settings.rpc_url})"
            ) from e

        except requests.RequestException as e:
            raise ContractConnectionError(
                f"Failed to reach RPC endpoint at {self.settings.rpc_url}: {e}"
            ) from e

        except (Web3Exception, ValueError, TypeError) as e:
            raise ContractCallError(f"Call to {function_name} failed: {e}") from e
