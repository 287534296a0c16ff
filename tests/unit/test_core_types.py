"""
test_core_types.py - Unit tests for core data structures and checked arithmetic

Tests:
- IssuanceRecord construction and validation
- OperationReceipt immutability
- checked_add / checked_sub / checked_mul / checked_div, require_u64
- Exception hierarchy
"""

import pytest
from dataclasses import FrozenInstanceError, replace

from launcher import (
    IssuanceRecord, OperationReceipt, OperationType,
    LauncherError, MathOverflow, MaxSupplyExceeded, InsufficientReserve,
    Unauthorized, AlreadyInitialized, ZeroQuantity, RecordNotFound,
    CollaboratorError, TransferError, MintError, BurnError,
    CompensationFailed,
    U64_MAX, MAX_DECIMALS, MAX_NAME_LENGTH, MAX_SYMBOL_LENGTH, DEFAULT_BASE_PRICE,
    checked_add, checked_sub, checked_mul, checked_div,
)
from launcher.core import require_u64, pow10


class TestIssuanceRecord:
    """Tests for IssuanceRecord."""

    def test_defaults(self, record):
        assert record.total_issued == 0
        assert record.reserve_collected == 0
        assert record.base_price == DEFAULT_BASE_PRICE
        assert (record.slippage_numerator, record.slippage_denominator) == (90, 100)
        assert record.remaining_supply == record.max_supply

    def test_unit_scale(self, record):
        assert record.unit_scale == 1
        assert replace(record, decimals=9).unit_scale == 10 ** 9

    def test_is_frozen(self, record):
        with pytest.raises(FrozenInstanceError):
            record.total_issued = 5

    def test_replace_keeps_other_fields(self, record):
        updated = replace(record, total_issued=10, reserve_collected=10_000_000)
        assert updated.controller == record.controller
        assert updated.max_supply == record.max_supply
        assert record.total_issued == 0

    def test_zero_max_supply_rejected(self):
        with pytest.raises(ValueError, match="max_supply must be positive"):
            IssuanceRecord("issuer", "TOK", 0, 1_000_000, 0)

    def test_zero_price_rejected(self):
        with pytest.raises(ValueError, match="current_price must be positive"):
            IssuanceRecord("issuer", "TOK", 0, 0, 100)

    def test_issued_above_cap_rejected(self):
        with pytest.raises(ValueError, match="exceeds max_supply"):
            IssuanceRecord("issuer", "TOK", 0, 1, 100, total_issued=101)

    @pytest.mark.parametrize("decimals", [-1, MAX_DECIMALS + 1])
    def test_decimals_range(self, decimals):
        with pytest.raises(ValueError, match="decimals"):
            IssuanceRecord("issuer", "TOK", decimals, 1, 100)

    def test_empty_controller_rejected(self):
        with pytest.raises(ValueError, match="controller"):
            IssuanceRecord(" ", "TOK", 0, 1, 100)

    @pytest.mark.parametrize("field", ["controller", "asset_id", "name", "symbol"])
    def test_non_string_identity_rejected(self, field):
        kwargs = dict(controller="issuer", asset_id="TOK", decimals=0,
                      current_price=1, max_supply=100)
        kwargs[field] = 42
        with pytest.raises(TypeError, match=f"{field} must be str"):
            IssuanceRecord(**kwargs)

    def test_name_and_symbol_limits(self, record):
        assert replace(record, name="N" * MAX_NAME_LENGTH, symbol="S" * MAX_SYMBOL_LENGTH)
        with pytest.raises(ValueError, match="name longer than 50"):
            replace(record, name="N" * (MAX_NAME_LENGTH + 1))
        with pytest.raises(ValueError, match="symbol longer than 10"):
            replace(record, symbol="S" * (MAX_SYMBOL_LENGTH + 1))

    def test_priced_by_curve_defaults_off(self, record):
        assert record.priced_by_curve is False
        with pytest.raises(TypeError):
            replace(record, priced_by_curve=1)

    def test_field_above_u64_rejected(self):
        with pytest.raises(MathOverflow):
            IssuanceRecord("issuer", "TOK", 0, 1, U64_MAX + 1)

    def test_float_amount_rejected(self):
        with pytest.raises(TypeError):
            IssuanceRecord("issuer", "TOK", 0, 1.5, 100)

    def test_invalid_slippage_rejected(self):
        with pytest.raises(ValueError, match="slippage"):
            IssuanceRecord("issuer", "TOK", 0, 1, 100, slippage_numerator=100)

    def test_repr(self, record):
        text = repr(replace(record, symbol="TOK"))
        assert "TOK" in text
        assert "issued=0/1000000" in text


class TestOperationReceipt:
    """Tests for OperationReceipt."""

    def test_fields_and_repr(self):
        receipt = OperationReceipt(3, OperationType.BUY, "TOK", "alice", 3_000_000, 3, 1_000_000, 1_000_000)
        assert receipt.kind is OperationType.BUY
        assert "#3 buy TOK by alice" in repr(receipt)

    def test_is_frozen(self):
        receipt = OperationReceipt(0, OperationType.SELL, "TOK", "bob", 1, 1, 1, 1)
        with pytest.raises(FrozenInstanceError):
            receipt.currency_amount = 2


class TestCheckedArithmetic:
    """Tests for u64-checked arithmetic."""

    def test_add(self):
        assert checked_add(U64_MAX - 1, 1) == U64_MAX
        with pytest.raises(MathOverflow):
            checked_add(U64_MAX, 1)

    def test_sub(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(MathOverflow, match="underflows"):
            checked_sub(4, 5)

    def test_mul(self):
        assert checked_mul(2 ** 32, 2 ** 31) == 2 ** 63
        with pytest.raises(MathOverflow):
            checked_mul(2 ** 32, 2 ** 32)

    def test_div_floors(self):
        assert checked_div(7, 2) == 3

    def test_div_by_zero(self):
        with pytest.raises(MathOverflow):
            checked_div(1, 0)

    def test_pow10_bounds(self):
        assert pow10(MAX_DECIMALS) <= U64_MAX
        with pytest.raises(MathOverflow):
            pow10(MAX_DECIMALS + 1)

    def test_require_u64_rejects_bool(self):
        with pytest.raises(TypeError):
            require_u64(True)

    def test_require_u64_rejects_negative(self):
        with pytest.raises(ValueError):
            require_u64(-1)


class TestExceptionHierarchy:
    """All launcher errors share one base so callers can catch broadly."""

    @pytest.mark.parametrize("exc", [
        MathOverflow, MaxSupplyExceeded, InsufficientReserve, Unauthorized,
        AlreadyInitialized, ZeroQuantity, RecordNotFound, CollaboratorError,
        CompensationFailed,
    ])
    def test_subclasses_launcher_error(self, exc):
        assert issubclass(exc, LauncherError)

    @pytest.mark.parametrize("exc", [TransferError, MintError, BurnError])
    def test_collaborator_errors(self, exc):
        assert issubclass(exc, CollaboratorError)
