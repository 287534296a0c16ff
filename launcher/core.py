"""
Core types and pure functions for the token launcher.

This module provides the foundational data structures and protocols:
1. Protocols: AssetLedger, the external account substrate
2. Immutable data structures: IssuanceRecord, OperationReceipt
3. Exceptions: LauncherError and domain-specific error types
4. Checked unsigned 64-bit arithmetic

All functions in this module are pure. Nothing here touches balances or
mutates an issuance record in place.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Reserved wallet for issuance and redemption.
# Minted units come from here and burned units return here.
SYSTEM_WALLET = "system"

# Unsigned 64-bit integer domain for every persisted amount.
U64_MAX = 2 ** 64 - 1

# 10**19 is the largest power of ten inside the u64 domain.
MAX_DECIMALS = 19

# Token metadata limits.
MAX_NAME_LENGTH = 50
MAX_SYMBOL_LENGTH = 10

# Curve price at zero issuance, in currency units per whole token.
DEFAULT_BASE_PRICE = 1_000_000

# Sell-side slippage as numerator/denominator (sellers receive 90%).
DEFAULT_SLIPPAGE_NUMERATOR = 90
DEFAULT_SLIPPAGE_DENOMINATOR = 100


# ============================================================================
# ENUMS
# ============================================================================

class OperationType(Enum):
    """Kind of state-changing operation recorded in the audit log."""
    INITIALIZE = "initialize"
    BUY = "buy"
    SELL = "sell"
    WITHDRAW = "withdraw"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LauncherError(Exception):
    """Base exception for all launcher errors."""
    pass


class MathOverflow(LauncherError):
    """Raised when an arithmetic step would leave the unsigned 64-bit domain."""
    pass


class MaxSupplyExceeded(LauncherError):
    """Raised when a buy would push total issuance past max supply."""
    pass


class InsufficientReserve(LauncherError):
    """Raised when a sell or withdrawal would exceed the external reserve balance."""
    pass


class Unauthorized(LauncherError):
    """Raised when a privileged action is requested by someone other than the controller."""
    pass


class AlreadyInitialized(LauncherError):
    """Raised when an issuance record already exists for the asset."""
    pass


class ZeroQuantity(LauncherError):
    """Raised when an amount or a converted quantity is zero, making the trade a no-op."""
    pass


class RecordNotFound(LauncherError):
    """Raised when operating on an asset that has no issuance record."""
    pass


class CompensationFailed(LauncherError):
    """
    Raised when undoing an already-applied effect fails after a later effect failed.

    The substrate and the issuance record may disagree afterwards. __cause__ is
    the original failure; __context__ is the failed undo.
    """
    pass


class CollaboratorError(LauncherError):
    """Base for failures reported by the external asset substrate."""
    pass


class TransferError(CollaboratorError):
    """Raised when the substrate cannot move currency."""
    pass


class MintError(CollaboratorError):
    """Raised when the substrate cannot issue tokens."""
    pass


class BurnError(CollaboratorError):
    """Raised when the substrate cannot destroy tokens (e.g. holder has too few)."""
    pass


class WalletNotRegistered(CollaboratorError):
    """Raised when the substrate is asked about an unknown wallet."""
    pass


class AssetNotRegistered(CollaboratorError):
    """Raised when the substrate is asked about an unknown asset."""
    pass


# ============================================================================
# CHECKED ARITHMETIC
# ============================================================================

def require_u64(value: int, what: str = "value") -> int:
    """
    Validate that value is an int inside [0, U64_MAX].

    Raises:
        TypeError: If value is not an int (bools are rejected too)
        ValueError: If value is negative
        MathOverflow: If value exceeds U64_MAX
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{what} must be non-negative, got {value}")
    if value > U64_MAX:
        raise MathOverflow(f"{what} {value} exceeds u64 range")
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U64_MAX:
        raise MathOverflow(f"{a} + {b} overflows u64")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise MathOverflow(f"{a} - {b} underflows u64")
    return a - b


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > U64_MAX:
        raise MathOverflow(f"{a} * {b} overflows u64")
    return result


def checked_div(a: int, b: int) -> int:
    """Floor division; division by zero is reported as MathOverflow."""
    if b == 0:
        raise MathOverflow(f"{a} / 0")
    return a // b


def pow10(decimals: int) -> int:
    """Return 10**decimals, checked against the u64 domain."""
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise MathOverflow(f"10**{decimals} outside u64 range")
    return 10 ** decimals


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class AssetLedger(Protocol):
    """
    External account substrate consumed by the launcher.

    The launcher never stores balances. It asks the substrate to move currency,
    mint and burn tokens, and report how much currency backs an asset. Every
    call is all-or-nothing from the launcher's perspective: it either applies
    completely or raises a CollaboratorError and changes nothing.
    """

    def transfer(self, source: str, dest: str, amount: int) -> None:
        """Move currency between accounts. Raises TransferError."""
        ...

    def mint(self, asset_id: str, to: str, amount: int) -> None:
        """Increase an account's token balance. Raises MintError."""
        ...

    def burn(self, asset_id: str, source: str, amount: int) -> None:
        """Decrease an account's token balance. Raises BurnError if it holds fewer."""
        ...

    def reserve_balance(self, asset_id: str) -> int:
        """Return the currency currently held in the asset's reserve."""
        ...

    def reserve_account(self, asset_id: str) -> str:
        """Return the account id of the asset's reserve."""
        ...


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class IssuanceRecord:
    """
    Issuance state of one launched asset.

    Created once by Launcher.initialize() and replaced (never mutated) by
    every buy and sell. max_supply, controller, decimals, asset_id and the
    curve parameters never change after creation.

    Attributes:
        controller: Identity permitted to withdraw reserve funds.
        asset_id: Identifier of the governed fungible asset.
        decimals: Fixed-point scale; one whole token is 10**decimals base units.
        current_price: Currency units per whole token, always > 0.
        max_supply: Cap on total issuable base units, > 0.
        total_issued: Base units currently in circulation.
        reserve_collected: Currency units logically owed against issued supply.
        base_price: Curve price at zero issuance.
        slippage_numerator: Sell-side payout numerator.
        slippage_denominator: Sell-side payout denominator.
        name: Human-readable token name, at most MAX_NAME_LENGTH characters.
        symbol: Token ticker, at most MAX_SYMBOL_LENGTH characters.
        priced_by_curve: True once a buy or sell has re-priced the record;
            from then on current_price must equal the curve price.
    """
    controller: str
    asset_id: str
    decimals: int
    current_price: int
    max_supply: int
    total_issued: int = 0
    reserve_collected: int = 0
    base_price: int = DEFAULT_BASE_PRICE
    slippage_numerator: int = DEFAULT_SLIPPAGE_NUMERATOR
    slippage_denominator: int = DEFAULT_SLIPPAGE_DENOMINATOR
    name: str = ""
    symbol: str = ""
    priced_by_curve: bool = False

    def __post_init__(self):
        for field_name in ("controller", "asset_id", "name", "symbol"):
            value = getattr(self, field_name)
            if not isinstance(value, str):
                raise TypeError(f"{field_name} must be str, got {type(value).__name__}")
        if not self.controller.strip():
            raise ValueError("controller cannot be empty")
        if not self.asset_id.strip():
            raise ValueError("asset_id cannot be empty")
        if len(self.name) > MAX_NAME_LENGTH:
            raise ValueError(f"name longer than {MAX_NAME_LENGTH} characters: {self.name!r}")
        if len(self.symbol) > MAX_SYMBOL_LENGTH:
            raise ValueError(f"symbol longer than {MAX_SYMBOL_LENGTH} characters: {self.symbol!r}")
        if not isinstance(self.priced_by_curve, bool):
            raise TypeError(f"priced_by_curve must be bool, got {type(self.priced_by_curve).__name__}")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise TypeError(f"decimals must be int, got {type(self.decimals).__name__}")
        if self.decimals < 0 or self.decimals > MAX_DECIMALS:
            raise ValueError(f"decimals must be in [0, {MAX_DECIMALS}], got {self.decimals}")
        require_u64(self.current_price, "current_price")
        require_u64(self.max_supply, "max_supply")
        require_u64(self.total_issued, "total_issued")
        require_u64(self.reserve_collected, "reserve_collected")
        require_u64(self.base_price, "base_price")
        require_u64(self.slippage_numerator, "slippage_numerator")
        require_u64(self.slippage_denominator, "slippage_denominator")
        if self.current_price == 0:
            raise ValueError("current_price must be positive")
        if self.max_supply == 0:
            raise ValueError("max_supply must be positive")
        if self.base_price == 0:
            raise ValueError("base_price must be positive")
        if self.total_issued > self.max_supply:
            raise ValueError(
                f"total_issued {self.total_issued} exceeds max_supply {self.max_supply}"
            )
        if not 0 < self.slippage_numerator < self.slippage_denominator:
            raise ValueError(
                "slippage must satisfy 0 < numerator < denominator, got "
                f"{self.slippage_numerator}/{self.slippage_denominator}"
            )

    @property
    def unit_scale(self) -> int:
        """Base units per whole token."""
        return 10 ** self.decimals

    @property
    def remaining_supply(self) -> int:
        return self.max_supply - self.total_issued

    def __repr__(self) -> str:
        label = f" {self.symbol}" if self.symbol else ""
        return (
            f"IssuanceRecord({self.asset_id}{label}: issued={self.total_issued}/"
            f"{self.max_supply}, price={self.current_price}, "
            f"reserve_collected={self.reserve_collected})"
        )


@dataclass(frozen=True, slots=True)
class OperationReceipt:
    """
    Immutable record of a committed operation, kept in the launcher's audit log.

    Attributes:
        sequence: Monotonic position within the launcher's log
        kind: Operation type
        asset_id: Asset the operation applied to
        actor: Buyer, seller, controller or initializer
        currency_amount: Currency paid in (buy) or out (sell, withdraw)
        token_units: Base units minted (buy) or burned (sell)
        price_before: Unit price used for the conversion
        price_after: Unit price after re-pricing
    """
    sequence: int
    kind: OperationType
    asset_id: str
    actor: str
    currency_amount: int
    token_units: int
    price_before: int
    price_after: int

    def __repr__(self) -> str:
        return (
            f"Receipt(#{self.sequence} {self.kind.value} {self.asset_id} by {self.actor}: "
            f"currency={self.currency_amount}, tokens={self.token_units}, "
            f"price {self.price_before}→{self.price_after})"
        )
