"""
launcher - Bonding-Curve Token Launcher

Issues and redeems a capped fungible token against a currency reserve, with
the unit price derived from how much of the supply has been issued.

Usage:
    from launcher import Launcher, InMemoryAssetLedger

    accounts = InMemoryAssetLedger("devnet")
    accounts.register_asset("TOK")
    accounts.register_wallet("issuer")
    accounts.register_wallet("alice")
    accounts.fund("alice", 10_000_000)

    launcher = Launcher(accounts)
    launcher.initialize("issuer", "TOK", decimals=0,
                        initial_price=1_000_000, max_supply=1_000)

    # Buy with currency, sell back with slippage
    launcher.buy("TOK", "alice", 3_000_000)
    launcher.sell("TOK", "alice", 1)

    # Only the controller may withdraw from the reserve
    launcher.withdraw("TOK", "issuer", 500_000)
"""

# Core types
from .core import (
    AssetLedger,
    IssuanceRecord,
    OperationReceipt,
    OperationType,
    LauncherError,
    MathOverflow,
    MaxSupplyExceeded,
    InsufficientReserve,
    Unauthorized,
    AlreadyInitialized,
    ZeroQuantity,
    RecordNotFound,
    CompensationFailed,
    CollaboratorError,
    TransferError,
    MintError,
    BurnError,
    WalletNotRegistered,
    AssetNotRegistered,
    SYSTEM_WALLET,
    U64_MAX,
    MAX_DECIMALS,
    MAX_NAME_LENGTH,
    MAX_SYMBOL_LENGTH,
    DEFAULT_BASE_PRICE,
    checked_add,
    checked_sub,
    checked_mul,
    checked_div,
)

# Price engine
from .pricing import (
    Slippage,
    Quote,
    DEFAULT_SLIPPAGE,
    supply_ratio_pct,
    compute_price,
    tokens_for_payment,
    payment_for_tokens,
    quote_buy,
    quote_sell,
    price_curve,
    is_non_decreasing,
)

# Authorization
from .auth import AuthorizationGuard

# Record store
from .store import IssuanceStore

# Accounting core
from .launcher import Launcher

# Reference substrate
from .substrate import InMemoryAssetLedger, Move, DEFAULT_CURRENCY

__all__ = [
    # Core
    'AssetLedger', 'IssuanceRecord', 'OperationReceipt', 'OperationType',
    'LauncherError', 'MathOverflow', 'MaxSupplyExceeded', 'InsufficientReserve',
    'Unauthorized', 'AlreadyInitialized', 'ZeroQuantity', 'RecordNotFound',
    'CompensationFailed',
    'CollaboratorError', 'TransferError', 'MintError', 'BurnError',
    'WalletNotRegistered', 'AssetNotRegistered',
    'SYSTEM_WALLET', 'U64_MAX', 'MAX_DECIMALS', 'MAX_NAME_LENGTH', 'MAX_SYMBOL_LENGTH',
    'DEFAULT_BASE_PRICE',
    'checked_add', 'checked_sub', 'checked_mul', 'checked_div',
    # Pricing
    'Slippage', 'Quote', 'DEFAULT_SLIPPAGE',
    'supply_ratio_pct', 'compute_price', 'tokens_for_payment', 'payment_for_tokens',
    'quote_buy', 'quote_sell', 'price_curve', 'is_non_decreasing',
    # Authorization and storage
    'AuthorizationGuard', 'IssuanceStore',
    # Launcher
    'Launcher',
    # Substrate
    'InMemoryAssetLedger', 'Move', 'DEFAULT_CURRENCY',
]

__version__ = '1.0.0'
