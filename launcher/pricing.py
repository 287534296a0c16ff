"""
pricing.py - Bonding Curve Price Engine

Pure functions that derive the unit price from issuance state and convert
between currency amounts and token base units at that price.

Curve:
    supply_ratio_pct = floor(total_issued * 100 / max_supply)      0..100
    price            = floor(base_price * (100 + supply_ratio_pct) / 100)

The price therefore runs piecewise-linearly from base_price at zero issuance
to 2 * base_price at full issuance, in 1% steps.

Conversions always use the price *before* the trade:
    buy:  token_units = floor(currency / price) * 10**decimals
    sell: currency    = floor(floor(token_units / 10**decimals) * price * num / den)

No function here has side effects. The Launcher decides what to do with a Quote.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .core import (
    IssuanceRecord,
    DEFAULT_BASE_PRICE, DEFAULT_SLIPPAGE_NUMERATOR, DEFAULT_SLIPPAGE_DENOMINATOR,
    MathOverflow, MaxSupplyExceeded, ZeroQuantity,
    require_u64, checked_add, checked_sub, checked_mul, checked_div, pow10,
)


@dataclass(frozen=True, slots=True)
class Slippage:
    """
    Sell-side payout fraction numerator/denominator.

    Friction must be strictly positive so that an immediate buy-then-sell
    round trip always returns less than was paid.
    """
    numerator: int = DEFAULT_SLIPPAGE_NUMERATOR
    denominator: int = DEFAULT_SLIPPAGE_DENOMINATOR

    def __post_init__(self):
        require_u64(self.numerator, "slippage numerator")
        require_u64(self.denominator, "slippage denominator")
        if not 0 < self.numerator < self.denominator:
            raise ValueError(
                f"slippage must satisfy 0 < numerator < denominator, "
                f"got {self.numerator}/{self.denominator}"
            )


DEFAULT_SLIPPAGE = Slippage()


@dataclass(frozen=True, slots=True)
class Quote:
    """
    Result of converting a trade intent at the current curve price.

    Attributes:
        currency_amount: Currency paid (buy) or paid out (sell)
        token_units: Base units minted (buy) or burned (sell)
        price_before: Price the conversion used
        price_after: Price once the trade is applied
        total_issued_after: Issued supply once the trade is applied
    """
    currency_amount: int
    token_units: int
    price_before: int
    price_after: int
    total_issued_after: int


def supply_ratio_pct(total_issued: int, max_supply: int) -> int:
    """Integer percentage of max_supply already issued (0..100)."""
    if max_supply <= 0:
        raise MathOverflow("max_supply must be positive")
    if total_issued > max_supply:
        raise MaxSupplyExceeded(f"total_issued {total_issued} exceeds max_supply {max_supply}")
    # Exact product: the ratio is bounded by 100 even where total_issued * 100 is not.
    return (total_issued * 100) // max_supply


def compute_price(total_issued: int, max_supply: int, base_price: int = DEFAULT_BASE_PRICE) -> int:
    """
    Return the curve price for a given issuance.

    Example:
        >>> compute_price(0, 1_000_000)
        1000000
        >>> compute_price(500_000, 1_000_000)
        1500000
    """
    multiplier = 100 + supply_ratio_pct(total_issued, max_supply)
    return checked_mul(base_price, multiplier) // 100


def record_price(record: IssuanceRecord, total_issued: Optional[int] = None) -> int:
    """Curve price for a record, optionally at a hypothetical issuance."""
    issued = record.total_issued if total_issued is None else total_issued
    return compute_price(issued, record.max_supply, record.base_price)


def tokens_for_payment(currency_amount: int, price: int, decimals: int) -> int:
    """
    Base units bought by currency_amount at price.

    Raises:
        ZeroQuantity: If the amount does not buy a single whole token
        MathOverflow: If the scaled quantity leaves the u64 domain
    """
    whole_tokens = checked_div(currency_amount, price)
    if whole_tokens == 0:
        raise ZeroQuantity(
            f"{currency_amount} buys no whole token at price {price}"
        )
    return checked_mul(whole_tokens, pow10(decimals))


def payment_for_tokens(
    token_units: int,
    price: int,
    decimals: int,
    slippage: Slippage = DEFAULT_SLIPPAGE,
) -> int:
    """
    Currency paid out for token_units at price, after slippage.

    Only whole tokens are valued. A fractional remainder alongside at least one
    whole token burns without extra payout; quote_sell rejects a zero payout.

    Raises:
        MathOverflow: If any intermediate product leaves the u64 domain
    """
    whole_tokens = checked_div(token_units, pow10(decimals))
    gross = checked_mul(whole_tokens, price)
    return checked_mul(gross, slippage.numerator) // slippage.denominator


def record_slippage(record: IssuanceRecord) -> Slippage:
    return Slippage(record.slippage_numerator, record.slippage_denominator)


def quote_buy(record: IssuanceRecord, currency_amount: int) -> Quote:
    """
    Convert a buy intent against a record without applying it.

    Raises:
        ZeroQuantity: If currency_amount is zero or buys no whole token
        MaxSupplyExceeded: If the minted units would exceed max_supply
        MathOverflow: On any overflow
    """
    require_u64(currency_amount, "currency_amount")
    if currency_amount == 0:
        raise ZeroQuantity("buy amount must be positive")

    price_before = record.current_price
    token_units = tokens_for_payment(currency_amount, price_before, record.decimals)
    new_total = checked_add(record.total_issued, token_units)
    if new_total > record.max_supply:
        raise MaxSupplyExceeded(
            f"{record.asset_id}: minting {token_units} would bring supply to "
            f"{new_total} > max {record.max_supply}"
        )
    return Quote(
        currency_amount=currency_amount,
        token_units=token_units,
        price_before=price_before,
        price_after=record_price(record, new_total),
        total_issued_after=new_total,
    )


def quote_sell(record: IssuanceRecord, token_units: int) -> Quote:
    """
    Convert a sell intent against a record without applying it.

    The reserve liquidity check is not done here; it needs the external
    reserve balance and belongs to the Launcher.

    Raises:
        ZeroQuantity: If token_units is zero or is worth no currency
        MathOverflow: If token_units exceeds issued supply, or on any overflow
    """
    require_u64(token_units, "token_units")
    if token_units == 0:
        raise ZeroQuantity("sell quantity must be positive")

    new_total = checked_sub(record.total_issued, token_units)
    price_before = record.current_price
    currency_amount = payment_for_tokens(
        token_units, price_before, record.decimals, record_slippage(record)
    )
    if currency_amount == 0:
        raise ZeroQuantity(
            f"{token_units} base units are worth nothing at price {price_before}"
        )
    return Quote(
        currency_amount=currency_amount,
        token_units=token_units,
        price_before=price_before,
        price_after=record_price(record, new_total),
        total_issued_after=new_total,
    )


# ============================================================================
# CURVE SAMPLING
# ============================================================================

def price_curve(
    max_supply: int,
    base_price: int = DEFAULT_BASE_PRICE,
    points: int = 101,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample the price curve at evenly spaced issuance levels.

    Arrays use dtype=object so every element stays an exact Python int;
    the arithmetic is still elementwise.

    Args:
        max_supply: Supply cap in base units
        base_price: Price at zero issuance
        points: Number of samples including both ends (>= 2)

    Returns:
        (issued, prices) arrays of equal length
    """
    if points < 2:
        raise ValueError(f"points must be >= 2, got {points}")
    require_u64(max_supply, "max_supply")
    if max_supply == 0:
        raise ValueError("max_supply must be positive")
    issued = np.array(
        [max_supply * i // (points - 1) for i in range(points)], dtype=object
    )
    ratio = issued * 100 // max_supply
    prices = base_price * (100 + ratio) // 100
    return issued, prices


def is_non_decreasing(prices: np.ndarray) -> bool:
    """True if no sampled price is lower than the one before it."""
    if len(prices) < 2:
        return True
    return bool(np.all(np.diff(prices) >= 0))
