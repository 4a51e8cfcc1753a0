"""Unit tests for domain exceptions."""

import pytest

from scentledger.core.exceptions import (
    AllocationConflictError,
    AllocationError,
    AllocationWriteError,
    DatabaseError,
    ExchangeRateError,
    InsufficientInventoryError,
    InvalidAdjustmentError,
    InventoryError,
    LotNotFoundError,
    PaymentExceedsTotalError,
    ProductNotFoundError,
    SaleLineNotFoundError,
    SaleNotFoundError,
    ScentLedgerError,
    ShipmentNotFoundError,
    ShipmentStatusError,
    StorageError,
    ValidationError,
)


class TestScentLedgerError:
    """Tests for base ScentLedgerError exception."""

    def test_basic_initialization(self):
        error = ScentLedgerError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "ScentLedgerError"
        assert error.details == {}

    def test_with_custom_code(self):
        error = ScentLedgerError("Error message", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_to_dict(self):
        error = ScentLedgerError("Test error", code="TEST_CODE", details={"extra": "info"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"extra": "info"},
        }


class TestInventoryErrors:
    def test_insufficient_inventory_carries_quantities(self):
        error = InsufficientInventoryError("Chanel No. 5 100ml", needed=12, available=7)
        assert isinstance(error, InventoryError)
        assert error.code == "INSUFFICIENT_INVENTORY"
        assert error.needed == 12
        assert error.available == 7
        assert error.details["product"] == "Chanel No. 5 100ml"
        assert "Need 12, only 7 available" in error.message

    def test_lot_not_found(self):
        error = LotNotFoundError(42)
        assert error.code == "LOT_NOT_FOUND"
        assert error.details["lot_id"] == 42

    def test_adjustment_needing_confirmation_has_its_own_code(self):
        plain = InvalidAdjustmentError(3, "below zero")
        confirm = InvalidAdjustmentError(3, "above original", requires_confirmation=True)
        assert plain.code == "INVALID_ADJUSTMENT"
        assert confirm.code == "ADJUSTMENT_NEEDS_CONFIRMATION"
        assert confirm.requires_confirmation is True
        assert plain.details["requires_confirmation"] is False


class TestAllocationErrors:
    @pytest.mark.parametrize(
        "error",
        [AllocationWriteError(1, "disk I/O error"), AllocationConflictError(1, 5)],
    )
    def test_share_base(self, error):
        assert isinstance(error, AllocationError)
        assert isinstance(error, ScentLedgerError)
        assert error.details["lot_id"] == 1

    def test_conflict_code(self):
        assert AllocationConflictError(9, 3).code == "ALLOCATION_CONFLICT"

    def test_write_failed_code(self):
        assert AllocationWriteError(9, "boom").code == "ALLOCATION_WRITE_FAILED"


class TestPaymentErrors:
    def test_payment_exceeds_total_formats_amounts(self):
        error = PaymentExceedsTotalError(line_id=5, line_total=100.0, attempted=120.5)
        assert error.code == "PAYMENT_EXCEEDS_TOTAL"
        assert "120.50 > 100.00" in error.message

    def test_sale_line_not_found(self):
        error = SaleLineNotFoundError(sale_id=1, line_id=99)
        assert error.details == {"sale_id": 1, "line_id": 99}


class TestStorageErrors:
    def test_not_found_errors_are_storage_errors(self):
        assert isinstance(SaleNotFoundError(1), StorageError)
        assert isinstance(ShipmentNotFoundError(1), StorageError)

    def test_database_error_keeps_cause(self):
        error = DatabaseError("decrement_lot", "database is locked")
        assert error.code == "DATABASE_ERROR"
        assert error.details["error"] == "database is locked"


class TestOtherErrors:
    def test_product_not_found(self):
        assert ProductNotFoundError("Dior Sauvage").code == "PRODUCT_NOT_FOUND"

    def test_status_transition(self):
        error = ShipmentStatusError(4, "delivered", "shipped")
        assert error.code == "INVALID_STATUS_TRANSITION"
        assert "'delivered' to 'shipped'" in error.message

    def test_exchange_rate(self):
        assert ExchangeRateError("timeout").code == "EXCHANGE_RATE_UNAVAILABLE"

    def test_validation_truncates_value(self):
        error = ValidationError("reason", "too long", "x" * 300)
        assert len(error.details["value"]) == 100

    def test_validation_none_value(self):
        assert ValidationError("qty", "required").details["value"] is None
