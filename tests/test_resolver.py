"""Unit tests for contract reference classification and module resolution."""

from __future__ import annotations

import pytest

from eulerkit.contracts.cache import HandleCache
from eulerkit.contracts.handle import Binding, ContractHandle
from eulerkit.contracts.resolver import (
    HandleRef,
    ModuleResolver,
    ProxyModuleName,
    SingletonName,
    contract_ref,
)
from eulerkit.errors import MissingAddressError, UnknownContractError
from eulerkit.interfaces.abi import ERC20_ABI
from eulerkit.interfaces.registry import ChainRegistry

from conftest import D_WETH, E_WETH, MARKETS, MARKETS_ABI, USDC


@pytest.fixture()
def resolver(registry: ChainRegistry) -> ModuleResolver:
    binding = Binding()
    resolver = ModuleResolver(registry, HandleCache(binding))
    resolver.register_singleton(
        "markets", ContractHandle(MARKETS, MARKETS_ABI, binding, role="markets")
    )
    return resolver


class TestContractRef:
    def test_handle(self) -> None:
        handle = ContractHandle(USDC, ERC20_ABI, Binding())
        assert contract_ref(handle) == HandleRef(handle)

    def test_singleton_name_is_normalized(self) -> None:
        assert contract_ref("Markets") == SingletonName("markets")
        assert contract_ref("modules/Markets") == SingletonName("markets")

    def test_proxy_module_name(self) -> None:
        assert contract_ref("eToken", E_WETH) == ProxyModuleName("eToken", E_WETH)
        assert contract_ref("modules/EToken") == ProxyModuleName("eToken", None)
        assert contract_ref("erc20", USDC) == ProxyModuleName("erc20", USDC)

    @pytest.mark.parametrize("value", [None, 42, ""])
    def test_unclassifiable(self, value) -> None:
        with pytest.raises(UnknownContractError):
            contract_ref(value)


class TestResolve:
    def test_handle_returned_unchanged(self, resolver: ModuleResolver) -> None:
        handle = ContractHandle(USDC, ERC20_ABI, Binding())
        assert resolver.resolve(HandleRef(handle)) is handle

    def test_singleton(self, resolver: ModuleResolver) -> None:
        handle = resolver.resolve(contract_ref("Markets"))
        assert handle is resolver.singletons["markets"]

    def test_proxy_module_is_deterministic(self, resolver: ModuleResolver) -> None:
        first = resolver.resolve(contract_ref("eToken", E_WETH))
        second = resolver.resolve(contract_ref("modules/EToken", E_WETH.upper().replace("0X", "0x")))
        assert first is second
        assert first.role == "eToken"

    def test_proxy_module_distinct_addresses(self, resolver: ModuleResolver) -> None:
        a = resolver.resolve(contract_ref("dToken", E_WETH))
        b = resolver.resolve(contract_ref("dToken", D_WETH))
        assert a is not b

    def test_erc20_role_uses_builtin_abi(self, resolver: ModuleResolver) -> None:
        handle = resolver.resolve(contract_ref("erc20", USDC))
        assert handle.abi == tuple(ERC20_ABI)

    def test_singleton_wins_over_proxy_module(self, resolver: ModuleResolver) -> None:
        special = ContractHandle(USDC, ERC20_ABI, Binding())
        resolver.register_singleton("pToken", special)
        assert resolver.resolve(contract_ref("pToken")) is special

    def test_missing_address(self, resolver: ModuleResolver) -> None:
        with pytest.raises(MissingAddressError) as info:
            resolver.resolve(contract_ref("eToken"), index=3, method="balanceOf")
        assert info.value.index == 3
        assert info.value.method == "balanceOf"
        assert "item 3" in str(info.value)

    def test_unknown_singleton(self, resolver: ModuleResolver) -> None:
        with pytest.raises(UnknownContractError, match="liquidation") as info:
            resolver.resolve(contract_ref("liquidation"), index=0, method="checkLiquidation")
        assert info.value.contract == "liquidation"

    def test_unsupported_chain(self) -> None:
        resolver = ModuleResolver(ChainRegistry(chain_id=10), HandleCache(Binding()))
        with pytest.raises(UnknownContractError, match="No ABI for 'eToken' on chain 10"):
            resolver.resolve(contract_ref("eToken", E_WETH))

    def test_bad_instance_address(self, resolver: ModuleResolver) -> None:
        with pytest.raises(UnknownContractError, match="Not a 20-byte hex address"):
            resolver.resolve(contract_ref("eToken", "0x1234"))
