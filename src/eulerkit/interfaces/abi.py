"""
ABI helpers.

ABIs come from the external euler-interfaces checkout as JSON artifacts
(``{"abi": [...]}``) or bare ABI lists. Helpers here look up function
entries by name or full signature and render canonical parameter types
for eth-abi.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError


def find_interfaces_root(start: Optional[Path] = None) -> Path:
    """
    Locate an ``euler-interfaces/`` directory.

    Searches from ``start`` (default: this file) upward.
    """
    current = (start or Path(__file__)).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / "euler-interfaces"
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        "Cannot find euler-interfaces/. Set EULER_INTERFACES_DIR to a checkout "
        "of the Euler interfaces package."
    )


@lru_cache(maxsize=64)
def load_abi(path: Path) -> tuple[dict[str, Any], ...]:
    """
    Load an ABI from a JSON artifact.

    Args:
        path: JSON file holding either ``{"abi": [...]}`` or a bare list

    Returns:
        ABI entries as a tuple of dicts

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"ABI not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)

    abi = artifact["abi"] if isinstance(artifact, dict) else artifact
    return tuple(abi)


def abi_type(param: dict[str, Any]) -> str:
    """Canonical type of an ABI parameter, expanding tuples to ``(t1,t2)``."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def input_types(func: dict[str, Any]) -> list[str]:
    return [abi_type(p) for p in func.get("inputs", [])]


def output_types(func: dict[str, Any]) -> list[str]:
    return [abi_type(p) for p in func.get("outputs", [])]


def signature(func: dict[str, Any]) -> str:
    return f"{func['name']}({','.join(input_types(func))})"


def find_function(abi, method: str) -> dict[str, Any]:
    """
    Find a function entry by name or by full signature.

    ``method`` may be ``"balanceOf"`` or ``"balanceOf(address)"``. A bare
    name must identify exactly one overload.

    Raises:
        ValueError: If no entry matches or a bare name is ambiguous
    """
    functions = [e for e in abi if e.get("type") == "function"]

    if "(" in method:
        wanted = method.replace(" ", "")
        for func in functions:
            if signature(func) == wanted:
                return func
        raise ValueError(f"Function {method} not found in ABI")

    matches = [f for f in functions if f.get("name") == method]
    if not matches:
        raise ValueError(f"Function {method} not found in ABI")
    if len(matches) > 1:
        overloads = ", ".join(signature(f) for f in matches)
        raise ValueError(
            f"Function {method} is overloaded ({overloads}); pass a full signature"
        )
    return matches[0]


def _fn(name: str, inputs: list, outputs: list, mutability: str = "view") -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


ERC20_ABI: tuple[dict[str, Any], ...] = (
    _fn("name", [], [("", "string")]),
    _fn("symbol", [], [("", "string")]),
    _fn("decimals", [], [("", "uint8")]),
    _fn("totalSupply", [], [("", "uint256")]),
    _fn("balanceOf", [("account", "address")], [("", "uint256")]),
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")]),
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")], "nonpayable"),
    _fn("transfer", [("to", "address"), ("amount", "uint256")], [("", "bool")], "nonpayable"),
    _fn(
        "transferFrom",
        [("from", "address"), ("to", "address"), ("amount", "uint256")],
        [("", "bool")],
        "nonpayable",
    ),
)


ERROR_SELECTOR = bytes.fromhex("08c379a0")  # Error(string)
PANIC_SELECTOR = bytes.fromhex("4e487b71")  # Panic(uint256)


def decode_revert_reason(data: bytes) -> Optional[str]:
    """Human-readable reason from revert data, or None if not a standard payload."""
    if len(data) < 4:
        return None

    selector, body = data[:4], data[4:]
    try:
        if selector == ERROR_SELECTOR:
            return decode(["string"], body)[0]
        if selector == PANIC_SELECTOR:
            return f"Panic(0x{decode(['uint256'], body)[0]:02x})"
    except (DecodingError, ValueError):
        return None
    return None
