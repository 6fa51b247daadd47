"""
Errors raised by eulerkit.

Per-item batch errors carry the offending item's ``index`` and ``method``
so a failed batch can be diagnosed without rebuilding it by hand. Both are
``None`` when the error is raised outside a batch (e.g. a direct
``ContractHandle.encode`` call).
"""

from __future__ import annotations

from typing import Any, Optional


class EulerError(RuntimeError):
    exit_code: int = 1


class BatchItemError(EulerError):
    """Base class for errors tied to one item of a batch."""

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        method: Optional[str] = None,
    ) -> None:
        self.reason = message
        self.index = index
        self.method = method
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        where = []
        if self.index is not None:
            where.append(f"item {self.index}")
        if self.method is not None:
            where.append(f"method {self.method!r}")
        if not where:
            return message
        return f"[{', '.join(where)}] {message}"


class UnknownContractError(BatchItemError):
    exit_code = 2

    def __init__(
        self,
        contract: Any,
        index: Optional[int] = None,
        method: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.contract = contract
        super().__init__(
            message or f"Unknown contract {contract!r}", index=index, method=method
        )


class MissingAddressError(BatchItemError):
    exit_code = 2

    def __init__(
        self,
        module: str,
        index: Optional[int] = None,
        method: Optional[str] = None,
    ) -> None:
        self.module = module
        super().__init__(
            f"Module {module!r} needs an instance address", index=index, method=method
        )


class EncodingError(BatchItemError):
    exit_code = 3


class DecodingError(BatchItemError):
    exit_code = 4

    # Full decode output, attached when a whole batch decode is aborted.
    results: Optional[list] = None


class RevertedCallError(DecodingError):
    """The call itself failed on-chain."""

    def __init__(
        self,
        revert_reason: Optional[Any] = None,
        index: Optional[int] = None,
        method: Optional[str] = None,
    ) -> None:
        self.revert_reason = revert_reason
        message = "Call reverted"
        if revert_reason is not None:
            message = f"Call reverted: {revert_reason}"
        super().__init__(message, index=index, method=method)


class LengthMismatchError(EulerError):
    exit_code = 5

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Got {actual} raw results for {expected} batch items"
        )


class RpcError(EulerError):
    exit_code = 6

    def __init__(self, message: str, error: Optional[dict] = None) -> None:
        self.error = error or {}
        super().__init__(message)
