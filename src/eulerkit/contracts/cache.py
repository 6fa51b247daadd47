"""
Contract handle cache.

Owns the canonical handle per ``(address, role)``. A role is the module
key the handle was created for (``"markets"``, ``"eToken"``, ``"erc20"``,
...), so the same address queried as an eToken and as a plain ERC-20 gets
two handles, each bound to its own ABI.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator, Sequence

from ..log import get_logger
from .handle import Binding, ContractHandle

logger = get_logger(__name__)


class HandleCache:
    def __init__(self, binding: Binding) -> None:
        self._binding = binding
        self._handles: dict[tuple[str, str], ContractHandle] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[ContractHandle]:
        return iter(list(self._handles.values()))

    def __contains__(self, key: tuple[str, str]) -> bool:
        address, role = key
        return (address.lower(), role) in self._handles

    def get_or_create(
        self, address: str, role: str, abi: Sequence[dict[str, Any]]
    ) -> ContractHandle:
        """
        Return the handle for ``(address, role)``, creating it on first use.

        ``abi`` is only used on creation; later calls return the stored
        handle unchanged.
        """
        key = (address.lower(), role)
        handle = self._handles.get(key)
        if handle is not None:
            return handle

        with self._lock:
            handle = self._handles.get(key)
            if handle is None:
                handle = ContractHandle(address, abi, self._binding, role=role)
                self._handles[key] = handle
                logger.debug("Created %r", handle)
        return handle

    def clear(self) -> None:
        with self._lock:
            self._handles.clear()
