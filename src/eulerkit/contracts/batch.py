"""
Batch codec.

Encodes an ordered list of ``CallDescriptor`` into ``BatchItem`` payloads
(target address + calldata) and decodes the raw results of an executed
batch back against the same descriptors. Position is the only link
between a request item and its result.

Encoding is fail-fast: the first item that cannot be resolved or encoded
aborts the build. Decoding always visits every item; failed items are
reported per item, and the batch only raises afterwards if a failed item
did not opt in with ``allow_error``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..errors import (
    DecodingError,
    EncodingError,
    LengthMismatchError,
    RevertedCallError,
    UnknownContractError,
)
from ..interfaces.abi import decode_revert_reason
from ..log import get_logger
from ..utils import to_bytes, to_hex
from .resolver import ContractRef, ModuleResolver, contract_ref

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallDescriptor:
    """
    One logical call in a batch.

    Attributes:
        contract: ContractHandle, singleton module name or per-token module name
        method: Function name or full signature
        args: Positional call arguments
        address: Instance address, required for per-token modules
        allow_error: Tolerate failure of this item
    """
    contract: Any
    method: str
    args: tuple = ()
    address: Optional[str] = None
    allow_error: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CallDescriptor":
        """Build from ``{"contract", "method", "args", "address", "allowError"}``."""
        return cls(
            contract=payload["contract"],
            method=payload["method"],
            args=tuple(payload.get("args", ())),
            address=payload.get("address"),
            allow_error=bool(payload.get("allowError", payload.get("allow_error", False))),
        )

    @property
    def ref(self) -> ContractRef:
        return contract_ref(self.contract, self.address)


@dataclass(frozen=True)
class BatchItem:
    proxy_addr: str
    data: bytes
    allow_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowError": self.allow_error,
            "proxyAddr": self.proxy_addr,
            "data": to_hex(self.data),
        }

    def to_tuple(self) -> tuple[bool, str, bytes]:
        """``Exec.EulerBatchItem`` ABI tuple ``(allowError, proxyAddr, data)``."""
        return (self.allow_error, self.proxy_addr, self.data)


@dataclass(frozen=True)
class RawResult:
    result: bytes
    success: bool = True

    @classmethod
    def coerce(cls, value: Any) -> "RawResult":
        """
        Accept the shapes transports hand back.

        ``RawResult``; a mapping with ``result``/``returnData`` and optional
        ``success``; a ``(success, returnData)`` pair; or bare bytes / hex.
        """
        if isinstance(value, RawResult):
            return value
        if isinstance(value, Mapping):
            data = value.get("result", value.get("returnData"))
            return cls(to_bytes(data), bool(value.get("success", True)))
        if isinstance(value, (tuple, list)) and len(value) == 2:
            success, data = value
            return cls(to_bytes(data), bool(success))
        if isinstance(value, (bytes, bytearray, str)):
            return cls(to_bytes(value))
        raise TypeError(f"Cannot interpret {type(value).__name__} as a batch result")


@dataclass(frozen=True)
class DecodedResult:
    index: int
    method: str
    success: bool
    value: Any = None
    error: Optional[DecodingError] = None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


class BatchCodec:
    def __init__(self, resolver: ModuleResolver) -> None:
        self.resolver = resolver

    def _resolve(self, descriptor: CallDescriptor, index: int):
        try:
            ref = descriptor.ref
        except UnknownContractError as exc:
            raise UnknownContractError(
                descriptor.contract, index=index, method=descriptor.method
            ) from exc
        return self.resolver.resolve(ref, index=index, method=descriptor.method)

    def encode(
        self,
        descriptors: Sequence[CallDescriptor],
        allow_error: bool = False,
    ) -> list[BatchItem]:
        """
        Encode ``descriptors`` into batch items, in order.

        Args:
            descriptors: Calls to batch
            allow_error: Default for items that do not set ``allow_error``

        Returns:
            One BatchItem per descriptor

        Raises:
            UnknownContractError, MissingAddressError: Item cannot be resolved
            EncodingError: Arguments do not match the method
        """
        items = []
        for index, descriptor in enumerate(descriptors):
            handle = self._resolve(descriptor, index)
            try:
                data = handle.encode(descriptor.method, descriptor.args)
            except EncodingError as exc:
                raise EncodingError(
                    exc.reason, index=index, method=descriptor.method
                ) from (exc.__cause__ or exc)

            items.append(
                BatchItem(
                    proxy_addr=handle.address,
                    data=data,
                    allow_error=descriptor.allow_error or allow_error,
                )
            )

        logger.debug("Encoded batch of %d items", len(items))
        return items

    def decode(
        self,
        descriptors: Sequence[CallDescriptor],
        raw_results: Sequence[Any],
        allow_error: bool = False,
        raise_on_error: bool = True,
    ) -> list[DecodedResult]:
        """
        Decode ``raw_results`` positionally against ``descriptors``.

        Every item is decoded. With ``raise_on_error``, the first failure
        of an item not tolerating errors (neither its own ``allow_error``
        nor the batch-wide ``allow_error``) is raised once all items are
        done, with the full list attached as ``error.results``.

        Raises:
            LengthMismatchError: Result count differs from descriptor count
            DecodingError: See above
        """
        if len(raw_results) != len(descriptors):
            raise LengthMismatchError(len(descriptors), len(raw_results))

        results = []
        first_fatal: Optional[DecodingError] = None

        for index, (descriptor, raw) in enumerate(zip(descriptors, raw_results)):
            decoded = self._decode_one(index, descriptor, raw)
            results.append(decoded)
            tolerated = descriptor.allow_error or allow_error
            if decoded.error is not None and not tolerated and first_fatal is None:
                first_fatal = decoded.error

        failed = sum(1 for r in results if not r.success)
        logger.debug("Decoded batch of %d items (%d failed)", len(results), failed)

        if raise_on_error and first_fatal is not None:
            first_fatal.results = results
            raise first_fatal
        return results

    def _decode_one(
        self, index: int, descriptor: CallDescriptor, raw: Any
    ) -> DecodedResult:
        handle = self._resolve(descriptor, index)

        try:
            raw = RawResult.coerce(raw)
        except (TypeError, ValueError) as exc:
            error = DecodingError(
                f"Malformed raw result: {exc}", index=index, method=descriptor.method
            )
            error.__cause__ = exc
            return DecodedResult(index, descriptor.method, False, error=error)

        if not raw.success:
            error = RevertedCallError(
                decode_revert_reason(raw.result), index=index, method=descriptor.method
            )
            return DecodedResult(index, descriptor.method, False, error=error)

        try:
            value = handle.decode(descriptor.method, raw.result)
        except DecodingError as exc:
            error = DecodingError(exc.reason, index=index, method=descriptor.method)
            error.__cause__ = exc.__cause__ or exc
            return DecodedResult(index, descriptor.method, False, error=error)

        return DecodedResult(index, descriptor.method, True, value=value)
