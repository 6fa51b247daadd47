"""
Module resolver.

Turns the ``contract`` field of a batch item into a contract handle. The
field is classified once into a ``ContractRef``:

- ``HandleRef``: an existing ``ContractHandle``
- ``SingletonName``: a module deployed once per chain (``"markets"``)
- ``ProxyModuleName``: a module deployed per token (``"eToken"``) plus the
  instance address

Names are case-normalized the same way registry keys are, so
``"Markets"``, ``"markets"`` and ``"modules/Markets"`` are one module.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from ..errors import MissingAddressError, UnknownContractError
from ..interfaces.abi import ERC20_ABI
from ..interfaces.registry import ERC20, PROXY_MODULE_KEYS, ChainRegistry
from ..utils import module_key
from .cache import HandleCache
from .handle import ContractHandle


@dataclass(frozen=True)
class HandleRef:
    handle: ContractHandle


@dataclass(frozen=True)
class SingletonName:
    name: str


@dataclass(frozen=True)
class ProxyModuleName:
    name: str
    address: Optional[str] = None


ContractRef = Union[HandleRef, SingletonName, ProxyModuleName]


def contract_ref(contract: Any, address: Optional[str] = None) -> ContractRef:
    """Classify a batch item's ``contract`` value."""
    if isinstance(contract, ContractHandle):
        return HandleRef(contract)
    if isinstance(contract, str) and contract:
        key = module_key(contract)
        if key in PROXY_MODULE_KEYS:
            return ProxyModuleName(key, address)
        return SingletonName(key)
    raise UnknownContractError(contract)


class ModuleResolver:
    def __init__(self, registry: ChainRegistry, cache: HandleCache) -> None:
        self.registry = registry
        self.cache = cache
        self._singletons: dict[str, ContractHandle] = {}

    @property
    def singletons(self) -> Mapping[str, ContractHandle]:
        return MappingProxyType(self._singletons)

    def register_singleton(self, name: str, handle: ContractHandle) -> None:
        self._singletons[module_key(name)] = handle

    def token(self, role: str, address: str) -> ContractHandle:
        """Handle for a per-token module (or plain ERC-20) at ``address``."""
        abi = ERC20_ABI if role == ERC20 else self.registry.abi(role)
        if abi is None:
            raise UnknownContractError(
                role,
                message=f"No ABI for {role!r} on chain {self.registry.chain_id}",
            )
        return self.cache.get_or_create(address, role, abi)

    def resolve(
        self,
        ref: ContractRef,
        index: Optional[int] = None,
        method: Optional[str] = None,
    ) -> ContractHandle:
        """
        Resolve ``ref`` to a handle.

        Resolving the same ref twice returns the same instance.

        Raises:
            UnknownContractError: Nothing matches the reference
            MissingAddressError: Per-token module without an address
        """
        match ref:
            case HandleRef(handle=handle):
                return handle

            case SingletonName(name=name):
                handle = self._singletons.get(name)
                if handle is None:
                    raise UnknownContractError(name, index=index, method=method)
                return handle

            case ProxyModuleName(name=name, address=address):
                if name in self._singletons:
                    return self._singletons[name]
                if not address:
                    raise MissingAddressError(name, index=index, method=method)
                try:
                    return self.token(name, address)
                except UnknownContractError as exc:
                    raise UnknownContractError(
                        name, index=index, method=method, message=exc.reason
                    ) from exc
                except ValueError as exc:
                    raise UnknownContractError(
                        name, index=index, method=method, message=str(exc)
                    ) from exc

        raise UnknownContractError(ref, index=index, method=method)
