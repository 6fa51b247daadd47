"""
Batch transports.

A transport executes encoded ``BatchItem``s and returns one raw result per
item, in the same order. Partial-failure semantics belong to the transport;
the codec only relies on positional fidelity.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from ..contracts.batch import BatchItem, RawResult
from ..errors import RpcError
from ..utils import to_bytes, to_hex


class BatchTransport(Protocol):
    def execute(self, items: Sequence[BatchItem]) -> list[RawResult]:
        ...


class RpcBatchTransport:
    """
    Executes items as one JSON-RPC batch of ``eth_call`` requests.

    A node error on an item becomes ``RawResult(success=False)`` when the
    item allows errors (revert data, if the node returned any, is kept for
    reason decoding) and raises ``RpcError`` otherwise.
    """

    def __init__(self, provider: Any, block: str = "latest") -> None:
        self.provider = provider
        self.block = block

    def execute(self, items: Sequence[BatchItem]) -> list[RawResult]:
        calls = [
            ("eth_call", [{"to": item.proxy_addr, "data": to_hex(item.data)}, self.block])
            for item in items
        ]
        responses = self.provider.batch(calls)

        results = []
        for index, (item, response) in enumerate(zip(items, responses)):
            if "error" not in response:
                results.append(RawResult(to_bytes(response.get("result"))))
                continue

            error = response["error"]
            if not item.allow_error:
                raise RpcError(f"eth_call for batch item {index} failed: {error}", error)
            revert_data = error.get("data") if isinstance(error, dict) else None
            if isinstance(revert_data, dict):
                revert_data = revert_data.get("data")
            try:
                payload = to_bytes(revert_data) if isinstance(revert_data, str) else b""
            except ValueError:
                payload = b""
            results.append(RawResult(payload, success=False))

        return results
