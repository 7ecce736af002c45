"""
Typed view of a contract ABI and per-parameter input handling.

**Conceptual**: An ABI is a JSON list describing a contract's functions. The
CLI lets the user pick one read-only function, then asks for each input as
text. This module turns the raw JSON into small frozen dataclasses and maps
every Solidity parameter type to one of five kinds:

    INTEGER  uint8..uint256, int8..int256
    ADDRESS  address
    BOOL     bool
    BYTES    bytes, bytes1..bytes32
    STRING   string, plus arrays and tuples (passed through unchanged)

Validation, formatting and prompt hints are each a single function that
branches over AbiParamKind, so adding a kind means touching one place per
concern rather than hunting for substring checks on type names.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from web3 import Web3

COMPUTE_REWARDS_FUNCTION = "computeRewards"

# Minimal ABI containing only computeRewards(bytes32, uint256) -> uint256.
# Used by the web form, which never fetches the full ABI.
COMPUTE_REWARDS_ABI = [
    {
        "inputs": [
            {"name": "input1", "type": "bytes32"},
            {"name": "input2", "type": "uint256"},
        ],
        "name": COMPUTE_REWARDS_FUNCTION,
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]

_READ_ONLY_MUTABILITY = ("view", "pure")
_INTEGER_TYPE = re.compile(r"^u?int(\d*)$")
_BYTES_TYPE = re.compile(r"^bytes(\d*)$")
_DECIMAL = re.compile(r"^-?\d+$")
_HEX = re.compile(r"^0x[0-9a-fA-F]*$")


class AbiTypeError(ValueError):
    """Raised when an input value can't be converted for its ABI parameter type."""
    pass


class AbiParamKind(Enum):
    INTEGER = "integer"
    ADDRESS = "address"
    BOOL = "bool"
    BYTES = "bytes"
    STRING = "string"


def classify_abi_type(abi_type: str) -> AbiParamKind:
    """
    Map a Solidity type name to its AbiParamKind.

    Arrays ("uint256[]") and tuples are not entered element by element; they
    are treated as STRING and passed through unchanged.

    Example:
        >>> classify_abi_type("uint256")
        <AbiParamKind.INTEGER: 'integer'>
        >>> classify_abi_type("bytes32")
        <AbiParamKind.BYTES: 'bytes'>
    """
    normalized = abi_type.strip().lower()

    if normalized.endswith("]") or normalized.startswith("tuple"):
        return AbiParamKind.STRING
    if _INTEGER_TYPE.match(normalized):
        return AbiParamKind.INTEGER
    if normalized == "address":
        return AbiParamKind.ADDRESS
    if normalized == "bool":
        return AbiParamKind.BOOL
    if _BYTES_TYPE.match(normalized):
        return AbiParamKind.BYTES
    return AbiParamKind.STRING


@dataclass(frozen=True)
class AbiParameter:
    """One function input or output: a (possibly empty) name and a Solidity type."""
    name: str
    type: str

    @property
    def kind(self) -> AbiParamKind:
        return classify_abi_type(self.type)

    @property
    def byte_size(self) -> Optional[int]:
        """Fixed size of a bytesN parameter, or None for dynamic/non-bytes types."""
        match = _BYTES_TYPE.match(self.type.strip().lower())
        if match and match.group(1):
            return int(match.group(1))
        return None

    def display_name(self, index: int) -> str:
        """Name for prompts: the ABI name, or "input N" (1-indexed) when blank."""
        return self.name or f"input {index + 1}"


@dataclass(frozen=True)
class AbiFunction:
    """
    A function entry from a contract ABI.

    Attributes:
        name: Function name.
        inputs: Input parameters, in call order.
        outputs: Output parameters.
        state_mutability: "view", "pure", "nonpayable" or "payable".
    """
    name: str
    inputs: tuple[AbiParameter, ...]
    outputs: tuple[AbiParameter, ...]
    state_mutability: str

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in _READ_ONLY_MUTABILITY

    @property
    def input_names(self) -> list[str]:
        return [param.name for param in self.inputs]

    def signature(self) -> str:
        """
        Human-readable signature used in the function menu.

        Example:
            'computeRewards(bytes32 input1, uint256 input2) -> (uint256)'
        """
        inputs = ", ".join(f"{p.type} {p.name}".rstrip() for p in self.inputs)
        outputs = ", ".join(p.type for p in self.outputs)
        return f"{self.name}({inputs}) -> ({outputs})"

    def is_pool_epoch_shape(self) -> bool:
        """
        True for functions shaped like computeRewards: (bytes*, *int*).

        These are driven by the configured pool list: the pool id fills the
        first argument and the user only enters the second (the epoch).
        """
        return (
            len(self.inputs) == 2
            and self.inputs[0].kind is AbiParamKind.BYTES
            and self.inputs[1].kind is AbiParamKind.INTEGER
        )


def _parse_params(entries: Sequence[dict]) -> tuple[AbiParameter, ...]:
    return tuple(
        AbiParameter(name=entry.get("name") or "", type=entry.get("type", ""))
        for entry in entries
    )


def parse_abi(abi: Sequence[dict]) -> list[AbiFunction]:
    """
    Extract function entries from a raw ABI list.

    Events, errors, constructors and fallback entries are skipped. Entries
    without stateMutability (very old compilers) fall back to the legacy
    "constant" flag.
    """
    functions = []
    for entry in abi:
        if entry.get("type", "function") != "function":
            continue

        mutability = entry.get("stateMutability")
        if mutability is None:
            mutability = "view" if entry.get("constant") else "nonpayable"

        functions.append(
            AbiFunction(
                name=entry.get("name", ""),
                inputs=_parse_params(entry.get("inputs", [])),
                outputs=_parse_params(entry.get("outputs", [])),
                state_mutability=mutability,
            )
        )
    return functions


def read_functions(abi: Sequence[dict]) -> list[AbiFunction]:
    """Return the read-only (view/pure) functions of an ABI, in ABI order."""
    return [function for function in parse_abi(abi) if function.is_read_only]


def _is_integer_text(value: str) -> bool:
    return bool(_DECIMAL.match(value) or (_HEX.match(value) and len(value) > 2))


def validate_input(value: str, param: AbiParameter) -> bool:
    """
    Check that user-entered text is acceptable for `param`.

    **Rules by kind**:
      - INTEGER: decimal (optionally negative) or 0x hex.
      - ADDRESS: a valid 20-byte address (checksummed or all one case).
      - BOOL: "true", "false", "1" or "0".
      - BYTES: decimal number (converted to padded bytes) or 0x hex.
      - STRING: anything non-empty.

    Empty input is always rejected.
    """
    value = value.strip()
    if not value:
        return False

    kind = param.kind
    if kind is AbiParamKind.INTEGER:
        return _is_integer_text(value)
    if kind is AbiParamKind.ADDRESS:
        return Web3.is_address(value)
    if kind is AbiParamKind.BOOL:
        return value in ("true", "false", "1", "0")
    if kind is AbiParamKind.BYTES:
        return bool(_DECIMAL.match(value) and not value.startswith("-")) or bool(_HEX.match(value))
    if kind is AbiParamKind.STRING:
        return True
    raise AssertionError(f"Unhandled ABI parameter kind: {kind}")


def format_input(value: str, param: AbiParameter) -> Any:
    """
    Convert validated text into the Python value web3 expects for `param`.

    **Conversions by kind**:
      - INTEGER: int (decimal or 0x hex).
      - ADDRESS: checksum address string.
      - BOOL: True for "true"/"1", else False.
      - BYTES: 0x hex passes through; a decimal number becomes big-endian
        bytes, left-padded to the fixed size for bytesN (minimal length for
        dynamic bytes), rendered as 0x hex.
      - STRING: unchanged.

    Raises:
        AbiTypeError: If the value doesn't fit the type (e.g. a number too
                      large for bytes32).
    """
    value = value.strip()
    kind = param.kind

    if kind is AbiParamKind.INTEGER:
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError:
            raise AbiTypeError(f"Invalid integer for {param.type}: {value!r}")

    if kind is AbiParamKind.ADDRESS:
        try:
            return Web3.to_checksum_address(value)
        except ValueError:
            raise AbiTypeError(f"Invalid address: {value!r}")

    if kind is AbiParamKind.BOOL:
        return value in ("true", "1")

    if kind is AbiParamKind.BYTES:
        if value.lower().startswith("0x"):
            return value
        number = int(value)
        size = param.byte_size or max(1, (number.bit_length() + 7) // 8)
        try:
            return "0x" + number.to_bytes(size, "big").hex()
        except OverflowError:
            raise AbiTypeError(f"Value {value} does not fit in {param.type}")

    if kind is AbiParamKind.STRING:
        return value

    raise AssertionError(f"Unhandled ABI parameter kind: {kind}")


def type_hint(param: AbiParameter) -> str:
    """Short prompt hint for `param`, e.g. " (number)"; empty for strings."""
    kind = param.kind
    if kind is AbiParamKind.INTEGER:
        return " (number)"
    if kind is AbiParamKind.ADDRESS:
        return " (0x...)"
    if kind is AbiParamKind.BOOL:
        return " (true/false)"
    if kind is AbiParamKind.BYTES:
        return " (number or 0x...)"
    if kind is AbiParamKind.STRING:
        return ""
    raise AssertionError(f"Unhandled ABI parameter kind: {kind}")
