"""
Contract handles.

A ``ContractHandle`` binds an address and an ABI to the client's shared
``Binding`` (current provider + optional signing account). Handles never
hold a provider of their own: reconnecting the client updates the binding
and every outstanding handle sees the new one.
"""

from __future__ import annotations

import threading
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_account.signers.local import LocalAccount

from ..errors import DecodingError, EncodingError
from ..interfaces.abi import find_function, input_types, output_types, signature
from ..utils import keccak256, to_bytes, to_checksum_address, to_hex


class Binding:
    """Shared, swappable (provider, account) cell."""

    def __init__(self, provider: Any = None, account: Optional[LocalAccount] = None) -> None:
        self._lock = threading.Lock()
        self._state = (provider, account)

    @property
    def provider(self) -> Any:
        return self._state[0]

    @property
    def account(self) -> Optional[LocalAccount]:
        return self._state[1]

    @property
    def signer_or_provider(self) -> Any:
        provider, account = self._state
        return account if account is not None else provider

    def snapshot(self) -> tuple[Any, Optional[LocalAccount]]:
        return self._state

    def update(self, provider: Any, account: Optional[LocalAccount] = None) -> None:
        with self._lock:
            self._state = (provider, account)


class ContractHandle:
    def __init__(
        self,
        address: str,
        abi: Sequence[dict[str, Any]],
        binding: Binding,
        role: Optional[str] = None,
    ) -> None:
        self.address = to_checksum_address(address)
        self.abi = tuple(abi)
        self.role = role
        self._binding = binding

    def __repr__(self) -> str:
        return f"ContractHandle({self.role or 'contract'} @ {self.address})"

    @property
    def binding(self) -> Binding:
        return self._binding

    @property
    def signer_or_provider(self) -> Any:
        return self._binding.signer_or_provider

    def function(self, method: str) -> dict[str, Any]:
        return find_function(self.abi, method)

    def encode(self, method: str, args: Sequence[Any] = ()) -> bytes:
        """
        ABI-encode a call to ``method``.

        Args:
            method: Function name or full signature
            args: Positional arguments

        Returns:
            4-byte selector followed by the encoded arguments

        Raises:
            EncodingError: Unknown function, wrong arity or bad argument types
        """
        try:
            func = self.function(method)
        except ValueError as exc:
            raise EncodingError(str(exc), method=method) from exc

        types = input_types(func)
        args = list(args)
        if len(args) != len(types):
            raise EncodingError(
                f"{signature(func)} takes {len(types)} arguments, got {len(args)}",
                method=method,
            )

        selector = keccak256(signature(func).encode("utf-8"))[:4]
        try:
            encoded_args = encode(types, args) if types else b""
        except (AbiEncodingError, TypeError, ValueError, OverflowError) as exc:
            raise EncodingError(
                f"Cannot encode arguments for {signature(func)}: {exc}", method=method
            ) from exc

        return selector + encoded_args

    def decode(self, method: str, data: bytes | str) -> Any:
        """
        ABI-decode the return data of ``method``.

        Returns:
            Single value for one output, tuple for several, None for none

        Raises:
            DecodingError: Unknown function or data not matching the outputs
        """
        try:
            func = self.function(method)
            types = output_types(func)
            raw = to_bytes(data)
        except ValueError as exc:
            raise DecodingError(str(exc), method=method) from exc

        if not types:
            return None

        try:
            decoded = decode(types, raw)
        except (AbiDecodingError, ValueError, OverflowError) as exc:
            raise DecodingError(
                f"Cannot decode {len(raw)} bytes as ({','.join(types)}): {exc}",
                method=method,
            ) from exc

        if len(decoded) == 1:
            return decoded[0]
        return decoded

    def call(self, method: str, args: Sequence[Any] = (), block: str = "latest") -> Any:
        """Read-only call (eth_call) through the bound provider."""
        provider = self._binding.provider
        if provider is None:
            raise RuntimeError(f"{self!r} is not connected to a provider")

        result = provider.call(self.address, to_hex(self.encode(method, args)), block)
        if result is None or result == "0x":
            return None
        return self.decode(method, result)

    def transact(self, method: str, args: Sequence[Any] = (), **opts: Any) -> dict:
        """Sign and send a transaction calling ``method``; needs a bound account."""
        from ..chain.tx import send_transaction

        provider, account = self._binding.snapshot()
        if account is None:
            raise RuntimeError(f"{self!r} has no signing account; connect one first")

        return send_transaction(
            provider,
            account,
            to=self.address,
            data=to_hex(self.encode(method, args)),
            **opts,
        )
