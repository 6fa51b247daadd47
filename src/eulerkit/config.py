"""
Configuration for the Euler client.

Configuration is an explicit, immutable value handed to ``Euler``. The
only place the environment is consulted is ``EulerConfig.from_env``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_CHAIN_ID = 1


@dataclass(frozen=True)
class TxConfig:
    """Transaction overrides (``TX_FEE_MUL``, ``TX_NONCE``, ``TX_GAS_LIMIT``)."""
    fee_multiplier: Optional[float] = None
    nonce: Optional[int] = None
    gas_limit: Optional[int] = None

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> "TxConfig":
        return cls(
            fee_multiplier=_optional(env, "TX_FEE_MUL", float),
            nonce=_optional(env, "TX_NONCE", int),
            gas_limit=_optional(env, "TX_GAS_LIMIT", int),
        )


@dataclass(frozen=True)
class EulerConfig:
    chain_id: int = DEFAULT_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    interfaces_root: Optional[Path] = None
    tx: TxConfig = field(default_factory=TxConfig)

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> "EulerConfig":
        root = env.get("EULER_INTERFACES_DIR")
        return cls(
            chain_id=_optional(env, "CHAIN_ID", int) or DEFAULT_CHAIN_ID,
            rpc_url=env.get("EULER_RPC_URL") or DEFAULT_RPC_URL,
            interfaces_root=Path(root).expanduser() if root else None,
            tx=TxConfig.from_mapping(env),
        )

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "EulerConfig":
        """
        Build a config from the process environment.

        Values from ``env_path`` (a .env file) are used as defaults;
        variables already set in the environment win.

        Args:
            env_path: Optional .env file

        Returns:
            EulerConfig
        """
        merged: dict[str, str] = {}
        if env_path is not None and env_path.exists():
            merged.update(
                {k: v for k, v in dotenv_values(env_path).items() if v is not None}
            )
        merged.update(os.environ)
        return cls.from_mapping(merged)


def _optional(env: Mapping[str, str], key: str, convert):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        return convert(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {key}={raw!r}: {exc}") from exc
