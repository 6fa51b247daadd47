"""
Euler client.

Entry point of the library: owns the chain registry, the shared provider
binding, the handle cache and the batch codec.

    euler = Euler(RpcProvider(url), chain_id=1)
    items = [
        CallDescriptor("markets", "underlyingToEToken", (weth,)),
        CallDescriptor("eToken", "balanceOf", (user,), address=e_weth),
    ]
    results = euler.call_batch(items)
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from eth_account.signers.local import LocalAccount

from .chain.transport import BatchTransport, RpcBatchTransport
from .chain.tx import tx_opts
from .config import EulerConfig
from .contracts.batch import BatchCodec, BatchItem, CallDescriptor, DecodedResult
from .contracts.cache import HandleCache
from .contracts.handle import Binding, ContractHandle
from .contracts.resolver import ModuleResolver
from .errors import UnknownContractError
from .interfaces.registry import ERC20, ChainRegistry, load_registry
from .log import get_logger
from .utils import module_key

logger = get_logger(__name__)

DEFAULT_SINGLETONS = ("Euler", "Exec", "Liquidation", "Markets", "Swap")


class Euler:
    def __init__(
        self,
        provider: Any = None,
        chain_id: Optional[int] = None,
        account: Optional[LocalAccount] = None,
        config: Optional[EulerConfig] = None,
        registry: Optional[ChainRegistry] = None,
    ) -> None:
        self.config = config or EulerConfig()
        self.chain_id = chain_id if chain_id is not None else self.config.chain_id
        self.registry = registry or load_registry(self.chain_id, self.config.interfaces_root)

        self._binding = Binding()
        self._cache = HandleCache(self._binding)
        self._resolver = ModuleResolver(self.registry, self._cache)
        self._codec = BatchCodec(self._resolver)

        self.connect(provider, account)

        for name in DEFAULT_SINGLETONS:
            if self.registry.abi(name) and self.registry.address(name):
                self.add_singleton(name)

    # ------------------------------------------------------------------
    # Registry data
    # ------------------------------------------------------------------

    @property
    def abis(self) -> Mapping[str, tuple]:
        return self.registry.abis

    @property
    def addresses(self) -> Mapping[str, str]:
        return self.registry.addresses

    @property
    def reference_asset(self) -> Optional[str]:
        return self.registry.reference_asset

    @property
    def contracts(self) -> Mapping[str, ContractHandle]:
        return self._resolver.singletons

    @property
    def cache(self) -> HandleCache:
        return self._cache

    @property
    def codec(self) -> BatchCodec:
        return self._codec

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @property
    def provider(self) -> Any:
        return self._binding.provider

    @property
    def account(self) -> Optional[LocalAccount]:
        return self._binding.account

    @property
    def signer_or_provider(self) -> Any:
        return self._binding.signer_or_provider

    def connect(self, provider: Any, account: Optional[LocalAccount] = None) -> "Euler":
        """Rebind every handle, existing and future, to ``provider``/``account``."""
        self._binding.update(provider, account)
        logger.debug(
            "Connected %d handles to %r%s",
            len(self._cache),
            provider,
            f" as {account.address}" if account is not None else "",
        )
        return self

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def add_singleton(
        self,
        name: str,
        abi: Optional[Sequence[dict[str, Any]]] = None,
        address: Optional[str] = None,
    ) -> ContractHandle:
        """
        Register a module deployed once per chain.

        Args:
            name: Module name ("Markets", "modules/Markets" or "markets")
            abi: ABI (default: from the registry)
            address: Deployed address (default: from the registry)

        Returns:
            The new handle, also reachable as ``contracts[key]``

        Raises:
            UnknownContractError: ABI or address not known for this chain
            ValueError: A singleton with this key is already registered
        """
        key = module_key(name)
        if key in self._resolver.singletons:
            raise ValueError(f"add_singleton: {name} is already registered")

        abi = abi or self.registry.abi(key)
        if not abi:
            raise UnknownContractError(name, message=f"add_singleton: Unknown abi for {name}")

        address = address or self.registry.address(key)
        if not address:
            raise UnknownContractError(
                name, message=f"add_singleton: Unknown address for {name}"
            )

        handle = ContractHandle(address, abi, self._binding, role=key)
        self._resolver.register_singleton(key, handle)
        logger.debug("Registered singleton %s at %s", key, handle.address)
        return handle

    def erc20(self, address: str) -> ContractHandle:
        return self._resolver.token(ERC20, address)

    def e_token(self, address: str) -> ContractHandle:
        return self._resolver.token("eToken", address)

    def d_token(self, address: str) -> ContractHandle:
        return self._resolver.token("dToken", address)

    def p_token(self, address: str) -> ContractHandle:
        return self._resolver.token("pToken", address)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def build_batch(
        self, items: Sequence[CallDescriptor], allow_error: bool = False
    ) -> list[BatchItem]:
        return self._codec.encode(items, allow_error=allow_error)

    def decode_batch(
        self,
        items: Sequence[CallDescriptor],
        results: Sequence[Any],
        allow_error: bool = False,
        raise_on_error: bool = True,
    ) -> list[DecodedResult]:
        return self._codec.decode(
            items, results, allow_error=allow_error, raise_on_error=raise_on_error
        )

    def call_batch(
        self,
        items: Sequence[CallDescriptor],
        transport: Optional[BatchTransport] = None,
        allow_error: bool = False,
        raise_on_error: bool = True,
    ) -> list[DecodedResult]:
        """
        Encode ``items``, execute them and decode the results.

        Args:
            items: Calls to batch
            transport: Executes the encoded batch (default: JSON-RPC batch
                of eth_call on the bound provider)
            allow_error: Tolerate failure of every item
            raise_on_error: See ``BatchCodec.decode``

        Returns:
            One DecodedResult per item
        """
        batch = self.build_batch(items, allow_error=allow_error)
        if transport is None:
            if self.provider is None:
                raise RuntimeError("Euler client is not connected to a provider")
            transport = RpcBatchTransport(self.provider)
        raw = transport.execute(batch)
        return self.decode_batch(
            items, raw, allow_error=allow_error, raise_on_error=raise_on_error
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def tx_opts(self) -> dict[str, int]:
        """Transaction overrides from the configured ``TxConfig``."""
        return tx_opts(self.provider, self.config.tx)
