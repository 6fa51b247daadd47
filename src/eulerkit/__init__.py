__all__ = [
    # Client
    "Euler",
    # Config
    "EulerConfig",
    "TxConfig",
    # Batch codec
    "BatchCodec",
    "BatchItem",
    "CallDescriptor",
    "DecodedResult",
    "RawResult",
    # Contracts
    "Binding",
    "ContractHandle",
    "HandleCache",
    "ModuleResolver",
    "HandleRef",
    "SingletonName",
    "ProxyModuleName",
    "contract_ref",
    # Registry
    "ChainRegistry",
    "MULTI_PROXY_MODULES",
    "SINGLE_PROXY_MODULES",
    "load_registry",
    # Chain
    "BatchTransport",
    "RpcBatchTransport",
    "RpcProvider",
    # Errors
    "EulerError",
    "UnknownContractError",
    "MissingAddressError",
    "EncodingError",
    "DecodingError",
    "RevertedCallError",
    "LengthMismatchError",
    "RpcError",
]

from .chain.rpc import RpcProvider
from .chain.transport import BatchTransport, RpcBatchTransport
from .client import Euler
from .config import EulerConfig, TxConfig
from .contracts.batch import BatchCodec, BatchItem, CallDescriptor, DecodedResult, RawResult
from .contracts.cache import HandleCache
from .contracts.handle import Binding, ContractHandle
from .contracts.resolver import (
    HandleRef,
    ModuleResolver,
    ProxyModuleName,
    SingletonName,
    contract_ref,
)
from .errors import (
    DecodingError,
    EncodingError,
    EulerError,
    LengthMismatchError,
    MissingAddressError,
    RevertedCallError,
    RpcError,
    UnknownContractError,
)
from .interfaces.registry import (
    MULTI_PROXY_MODULES,
    SINGLE_PROXY_MODULES,
    ChainRegistry,
    load_registry,
)
