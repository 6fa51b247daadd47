"""Shared fixtures: stub ABIs, an in-memory registry and offline providers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pytest

from eulerkit.chain.rpc import FeeData
from eulerkit.client import Euler
from eulerkit.contracts.batch import RawResult
from eulerkit.interfaces.registry import WETH_MAINNET, ChainRegistry

EULER = "0x27182842e098f60e3d576794a5bffb0777e025d3"
MARKETS = "0x3520d5a913427e6f0d6a83e07ccd4a4da316e4d3"
EXEC = "0x59828fdf7ee634aaad3f58b19fdba3b03e2d9d80"
LIQUIDATION = "0xf43ce1d09050bafd6980dd43cde2ab9f18c85b34"
SWAP = "0x7123c8cbbd76c5c7fcc9f7150f23179bec0ba341"
GENERAL_VIEW = "0xace5e5bc5a8f0fcd2a4ab4d9d5ae9c5ea4c3ab7e"

WETH = WETH_MAINNET
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
E_WETH = "0x1b808f49add4b8c6b5117d9681cf7312fcf0dc1d"
D_WETH = "0x62e28f054efc24b26a794f5c1249b6349454352c"
USER = "0x1111111111111111111111111111111111111111"


def fn(name: str, inputs: list[str], outputs: list[str], mutability: str = "view") -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": f"a{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


EULER_ABI = [fn("moduleIdToProxy", ["uint256"], ["address"])]

MARKETS_ABI = [
    fn("underlyingToEToken", ["address"], ["address"]),
    fn("underlyingToDToken", ["address"], ["address"]),
    fn("getEnteredMarkets", ["address"], ["address[]"]),
    fn("interestRate", ["address"], ["int96"]),
    fn("enterMarket", ["uint256", "address"], [], "nonpayable"),
]

EXEC_ABI = [
    fn("getPrice", ["address"], ["uint256", "uint256"]),
    {
        "type": "function",
        "name": "getPriceFull",
        "inputs": [{"name": "underlying", "type": "address"}],
        "outputs": [
            {"name": "twap", "type": "uint256"},
            {"name": "twapPeriod", "type": "uint256"},
            {"name": "currPrice", "type": "uint256"},
        ],
        "stateMutability": "view",
    },
]

LIQUIDATION_ABI = [fn("checkLiquidation", ["address", "address", "address", "address"], [])]
SWAP_ABI = [fn("swapUniExactInputSingle", ["uint256", "uint256", "address"], [], "nonpayable")]
GENERAL_VIEW_ABI = [fn("computeAPYs", ["uint256", "uint256", "uint256", "uint32"], ["uint256", "uint256"])]

E_TOKEN_ABI = [
    fn("balanceOf", ["address"], ["uint256"]),
    fn("balanceOfUnderlying", ["address"], ["uint256"]),
    fn("totalSupply", [], ["uint256"]),
    fn("deposit", ["uint256", "uint256"], [], "nonpayable"),
    fn("symbol", [], ["string"]),
]

D_TOKEN_ABI = [
    fn("balanceOf", ["address"], ["uint256"]),
    fn("borrow", ["uint256", "uint256"], [], "nonpayable"),
]

P_TOKEN_ABI = [fn("underlying", [], ["address"])]

ABIS = {
    "euler": EULER_ABI,
    "markets": MARKETS_ABI,
    "exec": EXEC_ABI,
    "liquidation": LIQUIDATION_ABI,
    "swap": SWAP_ABI,
    "eulerGeneralView": GENERAL_VIEW_ABI,
    "eToken": E_TOKEN_ABI,
    "dToken": D_TOKEN_ABI,
    "pToken": P_TOKEN_ABI,
}

ADDRESSES = {
    "euler": EULER,
    "markets": MARKETS,
    "exec": EXEC,
    "liquidation": LIQUIDATION,
    "swap": SWAP,
    "eulerGeneralView": GENERAL_VIEW,
}

# Module path -> registry key, as laid out in an euler-interfaces checkout.
MODULE_FILES = {
    "Euler": "euler",
    "modules/Exec": "exec",
    "modules/Liquidation": "liquidation",
    "modules/Markets": "markets",
    "modules/Swap": "swap",
    "views/EulerGeneralView": "eulerGeneralView",
    "modules/EToken": "eToken",
    "modules/DToken": "dToken",
    "PToken": "pToken",
}


class FakeProvider:
    """Offline stand-in for RpcProvider."""

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.call_results: dict[tuple[str, str], str] = {}
        self.batch_responses: Optional[list[dict[str, Any]]] = None
        self.calls: list[tuple[str, str, str]] = []
        self.batches: list[list[tuple[str, list]]] = []
        self.sent: list[str] = []
        self.fee_data = FeeData(10, 2_000, 100)

    def __repr__(self) -> str:
        return f"FakeProvider({self.name!r})"

    def call(self, to: str, data: str, block: str = "latest") -> str:
        self.calls.append((to, data, block))
        return self.call_results.get((to.lower(), data), "0x")

    def batch(self, calls: list[tuple[str, list]]) -> list[dict[str, Any]]:
        self.batches.append(calls)
        if self.batch_responses is not None:
            return self.batch_responses
        return [
            {"id": i, "result": self.call_results.get((p[0]["to"].lower(), p[0]["data"]), "0x")}
            for i, (_, p) in enumerate(calls)
        ]

    def get_fee_data(self) -> FeeData:
        return self.fee_data

    def get_chain_id(self) -> int:
        return 1

    def get_nonce(self, address: str) -> int:
        return 7

    def get_gas_price(self) -> int:
        return 10

    def send_raw_transaction(self, raw_tx: str) -> str:
        self.sent.append(raw_tx)
        return "0x" + "ab" * 32

    def wait_for_receipt(self, tx_hash: str, timeout: int = 120) -> dict:
        return {"transactionHash": tx_hash, "status": "0x1"}


class StubTransport:
    """Returns preconfigured raw results by position, recording the batch."""

    def __init__(self, results: list[Any]) -> None:
        self.results = results
        self.executed: list = []

    def execute(self, items):
        self.executed.append(list(items))
        return [RawResult.coerce(r) for r in self.results]


@pytest.fixture()
def registry() -> ChainRegistry:
    return ChainRegistry(
        chain_id=1, abis=ABIS, addresses=ADDRESSES, reference_asset=WETH
    )


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def euler(provider: FakeProvider, registry: ChainRegistry) -> Euler:
    return Euler(provider, chain_id=1, registry=registry)


@pytest.fixture()
def interfaces_root(tmp_path: Path) -> Path:
    """An euler-interfaces checkout with a mainnet deployment."""
    root = tmp_path / "euler-interfaces"
    mainnet = root / "mainnet"
    for module, key in MODULE_FILES.items():
        path = mainnet / "abis" / f"{module}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"abi": ABIS[key]}), encoding="utf-8")

    addresses = mainnet / "addresses" / "addresses-mainnet.json"
    addresses.parent.mkdir(parents=True, exist_ok=True)
    addresses.write_text(json.dumps({**ADDRESSES, "chainId": 1}), encoding="utf-8")
    return root
