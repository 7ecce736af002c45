"""
Base abstraction for the contract-call collaborator.

**Conceptual**: The orchestration loop never talks to web3 directly. It
depends on the ContractCaller protocol, which any object with a matching
call_function() method satisfies. Production code passes a
Web3ContractCaller; tests pass a small fake that returns canned values or
raises.

**Contract every implementation must honour**:
  1. call_function() performs one read-only call and returns the decoded
     value: a single value, or a list/tuple for multi-output functions.
  2. Failures (network errors, reverts, malformed responses, unknown
     function names) raise an exception. The orchestration loop records the
     exception message per item; it never retries.
  3. No state is changed on-chain (only view/pure functions are called).
"""

from typing import Any, Protocol, Sequence


class ContractCaller(Protocol):
    """
    Protocol for calling a read-only function on the configured contract.

    **Testing strategy**:
        >>> class FakeCaller:
        ...     def call_function(self, function_name, args):
        ...         pool_id, epoch = args
        ...         return 1_500_000_000_000_000_000
        >>>
        >>> results = query_pool_rewards(FakeCaller(), pools, epoch=42)
    """

    def call_function(self, function_name: str, args: Sequence[Any]) -> Any:
        """
        Call `function_name(*args)` on the contract and return the result.

        Args:
            function_name: Name of a view/pure function in the contract ABI.
            args: Positional arguments, already converted to web3 types.

        Returns:
            Decoded return value (single value or sequence of values).

        Raises:
            Exception: Any failure; implementations should raise subclasses of
                       ContractCallError (see web3_contract.py).
        """
        ...
