"""
JSON-RPC provider.

Lightweight alternative to web3.py: uses httpx for HTTP. Supports
eth_call, JSON-RPC batches, fee data, nonces, raw transaction submission
and receipt polling.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..errors import RpcError
from ..log import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

# Matches ethers' getFeeData() default tip.
DEFAULT_PRIORITY_FEE = 1_500_000_000


@dataclass(frozen=True)
class FeeData:
    gas_price: Optional[int]
    max_fee_per_gas: Optional[int]
    max_priority_fee_per_gas: Optional[int]


class RpcProvider:
    """
    JSON-RPC client bound to a single endpoint.

    A provider is what contract handles read through; swapping it on the
    client rebinds every handle.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._client = client
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"RpcProvider({self.rpc_url!r})"

    def _post(self, payload: Any) -> Any:
        if self._client is not None:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            return response.json()

        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            return response.json()

    def _payload(self, method: str, params: list) -> dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        return payload

    def request(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: If the node returns an error object
        """
        data = self._post(self._payload(method, params))

        if "error" in data:
            raise RpcError(f"RPC error: {data['error']}", data["error"])

        return data.get("result")

    def batch(self, calls: list[tuple[str, list]]) -> list[dict[str, Any]]:
        """
        Send several calls as one JSON-RPC batch.

        Nodes may answer a batch out of order, so responses are matched
        back to requests by id.

        Args:
            calls: (method, params) pairs

        Returns:
            Raw response objects (with ``result`` or ``error``), in request order
        """
        if not calls:
            return []

        payloads = [self._payload(method, params) for method, params in calls]
        data = self._post(payloads)

        if isinstance(data, dict):
            # Some nodes reject the whole batch with a single error object.
            raise RpcError(f"RPC batch error: {data.get('error', data)}", data.get("error"))

        by_id = {item.get("id"): item for item in data}
        ordered = []
        for payload in payloads:
            item = by_id.get(payload["id"])
            if item is None:
                raise RpcError(f"RPC batch response missing id {payload['id']}")
            ordered.append(item)

        logger.debug("JSON-RPC batch of %d calls to %s", len(ordered), self.rpc_url)
        return ordered

    def call(self, to: str, data: str, block: str = "latest") -> str:
        """eth_call; returns 0x-prefixed hex return data."""
        return self.request("eth_call", [{"to": to, "data": data}, block])

    def get_chain_id(self) -> int:
        return int(self.request("eth_chainId", []), 16)

    def get_balance(self, address: str) -> int:
        return int(self.request("eth_getBalance", [address, "latest"]), 16)

    def get_nonce(self, address: str) -> int:
        return int(self.request("eth_getTransactionCount", [address, "latest"]), 16)

    def get_gas_price(self) -> int:
        return int(self.request("eth_gasPrice", []), 16)

    def get_fee_data(self) -> FeeData:
        """
        Current fee data.

        EIP-1559 fields are ``None`` on chains whose latest block has no
        base fee.
        """
        gas_price = self.get_gas_price()
        block = self.request("eth_getBlockByNumber", ["latest", False]) or {}

        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            return FeeData(gas_price, None, None)

        priority = DEFAULT_PRIORITY_FEE
        return FeeData(
            gas_price=gas_price,
            max_fee_per_gas=int(base_fee, 16) * 2 + priority,
            max_priority_fee_per_gas=priority,
        )

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        return self.request("eth_sendRawTransaction", [raw_tx])

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: int = 120,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Wait for a transaction receipt.

        Raises:
            TimeoutError: If receipt not found within timeout
        """
        start = time.time()
        while time.time() - start < timeout:
            receipt = self.request("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                return receipt
            time.sleep(poll_interval)

        raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")
