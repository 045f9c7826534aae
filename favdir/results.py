"""Success/failure result type returned by every tree mutation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a store operation.

    Validation problems are reported through ``error`` rather than raised,
    so front ends can show the message and keep the session alive.
    """

    ok: bool
    error: str | None = None
    value: object = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: object = None) -> OperationResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message: str) -> OperationResult:
        return cls(ok=False, error=message)


__all__ = ["OperationResult"]
