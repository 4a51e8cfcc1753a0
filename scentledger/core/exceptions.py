"""
Domain exceptions for ScentLedger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class ScentLedgerError(Exception):
    """Base exception for all ScentLedger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Inventory Exceptions
class InventoryError(ScentLedgerError):
    """Base exception for inventory ledger operations."""

    pass


class InsufficientInventoryError(InventoryError):
    """Requested quantity exceeds what all lots of a product hold."""

    def __init__(self, identity: str, needed: int, available: int):
        super().__init__(
            f"Insufficient inventory for {identity}. "
            f"Need {needed}, only {available} available.",
            code="INSUFFICIENT_INVENTORY",
            details={"product": identity, "needed": needed, "available": available},
        )
        self.needed = needed
        self.available = available


class LotNotFoundError(InventoryError):
    """Shipment lot not found."""

    def __init__(self, lot_id: int):
        super().__init__(
            f"Shipment lot not found: {lot_id}",
            code="LOT_NOT_FOUND",
            details={"lot_id": lot_id},
        )


class InvalidAdjustmentError(InventoryError):
    """Inventory adjustment would corrupt the lot's remaining quantity."""

    def __init__(self, lot_id: int, reason: str, requires_confirmation: bool = False):
        super().__init__(
            f"Invalid adjustment for lot {lot_id}: {reason}",
            code="ADJUSTMENT_NEEDS_CONFIRMATION" if requires_confirmation else "INVALID_ADJUSTMENT",
            details={
                "lot_id": lot_id,
                "reason": reason,
                "requires_confirmation": requires_confirmation,
            },
        )
        self.requires_confirmation = requires_confirmation


# Catalog Exceptions
class CatalogError(ScentLedgerError):
    """Base exception for product catalog lookups."""

    pass


class ProductNotFoundError(CatalogError):
    """No catalog entry for a (brand, name, size) identity."""

    def __init__(self, identity: str):
        super().__init__(
            f"Product not found: {identity}",
            code="PRODUCT_NOT_FOUND",
            details={"product": identity},
        )


# Allocation Exceptions
class AllocationError(ScentLedgerError):
    """Base exception for applying allocation plans."""

    pass


class AllocationWriteError(AllocationError):
    """Persisting an allocation record or lot decrement failed."""

    def __init__(self, lot_id: int, reason: str):
        super().__init__(
            f"Failed to apply allocation against lot {lot_id}: {reason}",
            code="ALLOCATION_WRITE_FAILED",
            details={"lot_id": lot_id, "reason": reason},
        )


class AllocationConflictError(AllocationError):
    """A lot no longer holds the units a plan expected to take."""

    def __init__(self, lot_id: int, requested: int):
        super().__init__(
            f"Lot {lot_id} no longer holds {requested} units",
            code="ALLOCATION_CONFLICT",
            details={"lot_id": lot_id, "requested": requested},
        )


# Payment Exceptions
class PaymentError(ScentLedgerError):
    """Base exception for payment updates."""

    pass


class PaymentExceedsTotalError(PaymentError):
    """Payment would push a sale line past its total."""

    def __init__(self, line_id: int, line_total: float, attempted: float):
        super().__init__(
            f"Payment for sale line {line_id} exceeds total amount "
            f"({attempted:.2f} > {line_total:.2f})",
            code="PAYMENT_EXCEEDS_TOTAL",
            details={"line_id": line_id, "line_total": line_total, "attempted": attempted},
        )


class SaleLineNotFoundError(PaymentError):
    """Sale line does not belong to the sale."""

    def __init__(self, sale_id: int, line_id: int):
        super().__init__(
            f"Sale line {line_id} not found on sale {sale_id}",
            code="SALE_LINE_NOT_FOUND",
            details={"sale_id": sale_id, "line_id": line_id},
        )


# Storage Exceptions
class StorageError(ScentLedgerError):
    """Base exception for storage operations."""

    pass


class SaleNotFoundError(StorageError):
    """Sale not found in storage."""

    def __init__(self, sale_id: int):
        super().__init__(
            f"Sale not found: {sale_id}",
            code="SALE_NOT_FOUND",
            details={"sale_id": sale_id},
        )


class ShipmentNotFoundError(StorageError):
    """Shipment not found in storage."""

    def __init__(self, shipment_id: int):
        super().__init__(
            f"Shipment not found: {shipment_id}",
            code="SHIPMENT_NOT_FOUND",
            details={"shipment_id": shipment_id},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ShipmentStatusError(ScentLedgerError):
    """Illegal shipment status transition."""

    def __init__(self, shipment_id: int, current: str, requested: str):
        super().__init__(
            f"Shipment {shipment_id} cannot move from '{current}' to '{requested}'",
            code="INVALID_STATUS_TRANSITION",
            details={"shipment_id": shipment_id, "current": current, "requested": requested},
        )


class ExchangeRateError(ScentLedgerError):
    """Exchange rate supplier failed."""

    def __init__(self, reason: str):
        super().__init__(
            f"Exchange rate unavailable: {reason}",
            code="EXCHANGE_RATE_UNAVAILABLE",
            details={"reason": reason},
        )


# Validation Exceptions
class ValidationError(ScentLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


class ConfigurationError(ScentLedgerError):
    """Configuration error."""

    pass
