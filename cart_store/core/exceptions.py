"""Custom exceptions for the cart store."""
from __future__ import annotations


class CartStoreException(Exception):
    """Base exception for all cart store errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class CartTierError(CartStoreException):
    """Primary cache tier answered with an error (network or service fault)."""

    def __init__(self, operation: str, key: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Primary tier {operation} failed for {key}: {cause}")
        self.operation = operation
        self.key = key
        self.cause = cause


class CartProbeTimeout(CartStoreException):
    """Primary cache tier did not answer the availability probe in time."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Primary tier did not respond within {timeout:g}s")
        self.timeout = timeout


class CartDecodeError(CartStoreException):
    """Stored cart payload is structurally broken."""

    pass


class CartValidationError(CartStoreException):
    """Caller passed a structurally invalid cart aggregate."""

    pass
