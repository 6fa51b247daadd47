"""
Transaction Builder - Build, sign, and send Ethereum transactions.

Uses eth-account for signing and the httpx-based JSON-RPC provider for
sending. Fee, nonce and gas overrides come from ``TxConfig``.
"""

from __future__ import annotations

from typing import Any, Optional

from eth_account.signers.local import LocalAccount

from ..config import TxConfig
from ..log import get_logger
from ..utils import to_checksum_address

logger = get_logger(__name__)

DEFAULT_GAS_LIMIT = 500_000


def tx_opts(provider: Any, config: TxConfig) -> dict[str, int]:
    """
    Transaction overrides from ``config``.

    With a fee multiplier set, the node's current EIP-1559 fees are
    scaled by it (floored to whole wei).

    Args:
        provider: Provider with ``get_fee_data()``
        config: Transaction overrides

    Returns:
        Dict with any of ``maxFeePerGas``, ``maxPriorityFeePerGas``,
        ``nonce`` and ``gas``
    """
    opts: dict[str, int] = {}

    if config.fee_multiplier is not None:
        fee_data = provider.get_fee_data()
        if fee_data.max_fee_per_gas is None or fee_data.max_priority_fee_per_gas is None:
            raise ValueError("TX_FEE_MUL needs EIP-1559 fee data; the chain has no base fee")
        opts["maxFeePerGas"] = int(fee_data.max_fee_per_gas * config.fee_multiplier)
        opts["maxPriorityFeePerGas"] = int(
            fee_data.max_priority_fee_per_gas * config.fee_multiplier
        )

    if config.nonce is not None:
        opts["nonce"] = config.nonce

    if config.gas_limit is not None:
        opts["gas"] = config.gas_limit

    return opts


def build_tx(
    provider: Any,
    account: LocalAccount,
    to: str,
    data: str,
    value: int = 0,
    chain_id: Optional[int] = None,
    **opts: Any,
) -> dict:
    """
    Build an unsigned transaction.

    Fields missing from ``opts`` are filled in from the node: nonce, chain
    ID and legacy gas price (when no EIP-1559 fees are given).

    Returns:
        Unsigned transaction dict
    """
    tx: dict[str, Any] = {
        "to": to_checksum_address(to),
        "data": data,
        "value": value,
        "nonce": opts.pop("nonce", None),
        "gas": opts.pop("gas", None) or DEFAULT_GAS_LIMIT,
        "chainId": chain_id if chain_id is not None else provider.get_chain_id(),
    }
    if tx["nonce"] is None:
        tx["nonce"] = provider.get_nonce(account.address)

    if "maxFeePerGas" in opts:
        tx["maxFeePerGas"] = opts.pop("maxFeePerGas")
        tx["maxPriorityFeePerGas"] = opts.pop("maxPriorityFeePerGas", tx["maxFeePerGas"])
    else:
        tx["gasPrice"] = opts.pop("gasPrice", None) or provider.get_gas_price()

    if opts:
        raise TypeError(f"Unknown transaction options: {', '.join(sorted(opts))}")

    return tx


def send_transaction(
    provider: Any,
    account: LocalAccount,
    to: str,
    data: str,
    value: int = 0,
    chain_id: Optional[int] = None,
    wait: bool = True,
    timeout: int = 120,
    **opts: Any,
) -> dict:
    """
    Build, sign, and send a transaction.

    Args:
        provider: JSON-RPC provider
        account: Signing account
        to: Target contract address
        data: 0x-prefixed calldata
        value: ETH value in wei
        chain_id: Chain ID (default: asked from the node)
        wait: Whether to wait for receipt
        timeout: Receipt wait timeout
        **opts: Overrides (nonce, gas, gasPrice, maxFeePerGas, maxPriorityFeePerGas)

    Returns:
        Dict with tx_hash and optionally receipt and status
    """
    tx = build_tx(provider, account, to, data, value=value, chain_id=chain_id, **opts)
    signed = account.sign_transaction(tx)
    raw_tx = "0x" + bytes(signed.raw_transaction).hex()

    tx_hash = provider.send_raw_transaction(raw_tx)
    logger.debug("Sent transaction %s to %s", tx_hash, tx["to"])
    result: dict[str, Any] = {"tx_hash": tx_hash}

    if wait:
        receipt = provider.wait_for_receipt(tx_hash, timeout=timeout)
        result["receipt"] = receipt
        result["status"] = int(receipt.get("status", "0x0"), 16)

    return result
