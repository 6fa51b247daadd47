"""
AddressBook / ABI registry.

Maps module keys (``"markets"``, ``"eToken"``, ...) to ABIs and deployed
addresses for one chain. Data is read once from an euler-interfaces
checkout laid out as::

    <root>/<network>/abis/<module path>.json
    <root>/<network>/addresses/addresses-<network>.json

and is immutable afterwards. Unsupported chains get an empty registry;
anything that needs a module then fails at resolution time.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..log import get_logger
from ..utils import module_key
from .abi import find_interfaces_root, load_abi

logger = get_logger(__name__)

WETH_MAINNET = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
WETH_ROPSTEN = "0xc778417e063141139fce010982780140aa0cd5ab"

# Modules deployed once per token (address-per-instance).
MULTI_PROXY_MODULES = ("modules/EToken", "modules/DToken", "PToken")
# Modules deployed once per chain.
SINGLE_PROXY_MODULES = (
    "Euler",
    "modules/Exec",
    "modules/Liquidation",
    "modules/Markets",
    "modules/Swap",
    "views/EulerGeneralView",
)

# Plain token role, resolvable like a proxy module but with a built-in ABI.
ERC20 = "erc20"

# Keys accepted as multi-instance proxy module names by the resolver.
PROXY_MODULE_KEYS = frozenset(
    [ERC20, *(module_key(m) for m in MULTI_PROXY_MODULES)]
)


@dataclass(frozen=True)
class Network:
    name: str
    reference_asset: str


NETWORKS: dict[int, Network] = {
    1: Network("mainnet", WETH_MAINNET),
    3: Network("ropsten", WETH_ROPSTEN),
}


@dataclass(frozen=True)
class ChainRegistry:
    chain_id: int
    abis: Mapping[str, tuple] = field(default_factory=dict)
    addresses: Mapping[str, str] = field(default_factory=dict)
    reference_asset: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "abis",
            MappingProxyType({k: tuple(v) for k, v in self.abis.items()}),
        )
        object.__setattr__(self, "addresses", MappingProxyType(dict(self.addresses)))

    @property
    def is_empty(self) -> bool:
        return not self.abis and not self.addresses

    def abi(self, name: str) -> Optional[tuple]:
        return self.abis.get(module_key(name))

    def address(self, name: str) -> Optional[str]:
        return self.addresses.get(module_key(name))


def load_registry(chain_id: int, interfaces_root: Optional[Path] = None) -> ChainRegistry:
    """
    Load the registry for ``chain_id``.

    Args:
        chain_id: Numeric chain ID
        interfaces_root: euler-interfaces checkout (default: discovered)

    Returns:
        ChainRegistry (empty for unsupported chains)

    Raises:
        FileNotFoundError: If a supported chain's data files are missing
    """
    network = NETWORKS.get(chain_id)
    if network is None:
        logger.debug("No Euler deployment for chain %s; registry is empty", chain_id)
        return ChainRegistry(chain_id)

    root = (interfaces_root or find_interfaces_root()) / network.name

    addresses_path = root / "addresses" / f"addresses-{network.name}.json"
    if not addresses_path.exists():
        raise FileNotFoundError(f"Address book not found: {addresses_path}")
    with addresses_path.open("r", encoding="utf-8") as f:
        raw_addresses: dict[str, Any] = json.load(f)

    abis = {}
    for module in (*MULTI_PROXY_MODULES, *SINGLE_PROXY_MODULES):
        abis[module_key(module)] = load_abi(root / "abis" / f"{module}.json")

    logger.debug(
        "Loaded %d ABIs and %d addresses for %s", len(abis), len(raw_addresses), network.name
    )
    return ChainRegistry(
        chain_id=chain_id,
        abis=abis,
        addresses={k: v for k, v in raw_addresses.items() if isinstance(v, str)},
        reference_asset=network.reference_asset,
    )
