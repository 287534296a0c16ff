"""
substrate.py - In-Memory Account Substrate

InMemoryAssetLedger implements the AssetLedger protocol the Launcher
consumes. It stands in for the external ledger that really holds balances:
wallets, a settlement currency, launched token assets, and one reserve
wallet per asset.

Double-entry throughout:
    - transfer:  Move(currency, source -> dest)
    - mint:      Move(asset, SYSTEM_WALLET -> holder)
    - burn:      Move(asset, holder -> SYSTEM_WALLET)

SYSTEM_WALLET is exempt from balance checks, so for every symbol the sum of
balances across all wallets (system included) is constant. Every applied
move is appended to move_log.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Set

from .core import (
    SYSTEM_WALLET,
    LauncherError, TransferError, MintError, BurnError,
    WalletNotRegistered, AssetNotRegistered,
)


DEFAULT_CURRENCY = "LAMPORTS"
RESERVE_PREFIX = "reserve:"


@dataclass(frozen=True, slots=True)
class Move:
    """
    A single applied transfer of value between two wallets.

    Attributes:
        quantity: Amount moved, a positive int
        symbol: Currency or asset symbol
        source: Debited wallet
        dest: Credited wallet
        reason: Short label of the operation that produced it
        sequence: Position in the substrate's move log
    """
    quantity: int
    symbol: str
    source: str
    dest: str
    reason: str
    sequence: int

    def __repr__(self) -> str:
        return f"Move(#{self.sequence} {self.quantity} {self.symbol}: {self.source}→{self.dest} [{self.reason}])"


class InMemoryAssetLedger:
    """
    Reference account substrate holding integer balances in memory.

    Thread Safety:
        Not thread-safe. Each thread should maintain its own instance.

    Example:
        accounts = InMemoryAssetLedger("devnet")
        accounts.register_asset("TOK")
        accounts.register_wallet("alice")
        accounts.fund("alice", 5_000_000)
        accounts.transfer("alice", accounts.reserve_account("TOK"), 1_000_000)
    """

    def __init__(
        self,
        name: str = "substrate",
        currency: str = DEFAULT_CURRENCY,
        verbose: bool = True,
        test_mode: bool = False,
    ):
        """
        Args:
            name: Substrate identifier
            currency: Symbol of the settlement currency
            verbose: Print every applied move (default: True)
            test_mode: Allow set_balance() calls (default: False)
        """
        self.name = name
        self.currency = currency
        self.verbose = verbose
        self._test_mode = test_mode
        self.balances: Dict[str, Dict[str, int]] = {}
        self.registered_wallets: Set[str] = set()
        self.assets: Set[str] = set()
        self.move_log: List[Move] = []
        self._next_sequence: int = 0

        self.registered_wallets.add(SYSTEM_WALLET)
        self.balances[SYSTEM_WALLET] = defaultdict(int)

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def register_wallet(self, wallet_id: str) -> str:
        """
        Raises:
            ValueError: If wallet is already registered
        """
        if wallet_id in self.registered_wallets:
            raise ValueError(f"Wallet {wallet_id} already registered")
        self.registered_wallets.add(wallet_id)
        self.balances[wallet_id] = defaultdict(int)
        return wallet_id

    def register_asset(self, asset_id: str) -> str:
        """
        Register a token asset together with its reserve wallet.

        Returns:
            The reserve wallet id

        Raises:
            ValueError: If the asset is already registered or clashes with the currency
        """
        if asset_id in self.assets:
            raise ValueError(f"Asset {asset_id} already registered")
        if asset_id == self.currency:
            raise ValueError(f"Asset {asset_id} clashes with settlement currency")
        self.assets.add(asset_id)
        reserve = self.reserve_account(asset_id)
        if reserve not in self.registered_wallets:
            self.register_wallet(reserve)
        if self.verbose:
            print(f"📝 Registered: {asset_id} [reserve={reserve}]")
        return reserve

    def is_registered(self, wallet_id: str) -> bool:
        return wallet_id in self.registered_wallets

    def list_wallets(self) -> Set[str]:
        return self.registered_wallets.copy()

    # ========================================================================
    # READS
    # ========================================================================

    def reserve_account(self, asset_id: str) -> str:
        if asset_id not in self.assets:
            raise AssetNotRegistered(f"Asset {asset_id} not registered")
        return f"{RESERVE_PREFIX}{asset_id}"

    def reserve_balance(self, asset_id: str) -> int:
        return self.balances[self.reserve_account(asset_id)][self.currency]

    def get_balance(self, wallet_id: str, symbol: str) -> int:
        """
        Raises:
            WalletNotRegistered: If wallet is not registered
            AssetNotRegistered: If symbol is neither the currency nor a registered asset
        """
        self._check_wallet(wallet_id)
        self._check_symbol(symbol)
        return self.balances[wallet_id].get(symbol, 0)

    def get_wallet_balances(self, wallet_id: str) -> Dict[str, int]:
        self._check_wallet(wallet_id)
        return {s: q for s, q in self.balances[wallet_id].items() if q != 0}

    def total_supply(self, symbol: str) -> int:
        """Sum over all wallets including SYSTEM_WALLET; constant for every symbol."""
        self._check_symbol(symbol)
        return sum(self.balances[w].get(symbol, 0) for w in sorted(self.registered_wallets))

    def circulating_supply(self, asset_id: str) -> int:
        """Units of an asset held outside SYSTEM_WALLET, i.e. minted minus burned."""
        self._check_symbol(asset_id)
        return -self.balances[SYSTEM_WALLET].get(asset_id, 0)

    # ========================================================================
    # ASSET LEDGER PROTOCOL (mutating)
    # ========================================================================

    def transfer(self, source: str, dest: str, amount: int) -> None:
        """
        Move currency between two wallets.

        Raises:
            TransferError: If the amount is invalid or the source lacks funds
            WalletNotRegistered: If either wallet is unknown
        """
        self._check_amount(amount, TransferError)
        self._check_wallet(source)
        self._check_wallet(dest)
        if source == dest:
            raise TransferError("source and dest must be different")
        if source != SYSTEM_WALLET and self.balances[source][self.currency] < amount:
            raise TransferError(
                f"{source} holds {self.balances[source][self.currency]} {self.currency}, "
                f"needs {amount}"
            )
        self._apply(amount, self.currency, source, dest, "transfer")

    def mint(self, asset_id: str, to: str, amount: int) -> None:
        """
        Raises:
            MintError: If the amount is invalid or the recipient is the system wallet
            AssetNotRegistered, WalletNotRegistered: On unknown identifiers
        """
        self._check_amount(amount, MintError)
        self._check_asset(asset_id)
        self._check_wallet(to)
        if to == SYSTEM_WALLET:
            raise MintError("cannot mint to the system wallet")
        self._apply(amount, asset_id, SYSTEM_WALLET, to, "mint")

    def burn(self, asset_id: str, source: str, amount: int) -> None:
        """
        Raises:
            BurnError: If the amount is invalid or the holder has fewer units
            AssetNotRegistered, WalletNotRegistered: On unknown identifiers
        """
        self._check_amount(amount, BurnError)
        self._check_asset(asset_id)
        self._check_wallet(source)
        if source == SYSTEM_WALLET:
            raise BurnError("cannot burn from the system wallet")
        held = self.balances[source][asset_id]
        if held < amount:
            raise BurnError(f"{source} holds {held} {asset_id}, cannot burn {amount}")
        self._apply(amount, asset_id, source, SYSTEM_WALLET, "burn")

    # ========================================================================
    # FUNDING / TEST HELPERS
    # ========================================================================

    def fund(self, wallet_id: str, amount: int) -> None:
        """Issue settlement currency to a wallet from SYSTEM_WALLET."""
        self.transfer(SYSTEM_WALLET, wallet_id, amount)

    def set_balance(self, wallet_id: str, symbol: str, quantity: int) -> None:
        """
        Set a balance directly, bypassing double-entry.

        WARNING: Only available in test mode.

        Raises:
            LauncherError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LauncherError(
                "set_balance() is disabled in production mode. "
                "Use transfer(), mint() or burn() to modify balances. "
                "Set test_mode=True when creating the substrate for testing."
            )
        self._check_wallet(wallet_id)
        self._check_symbol(symbol)
        self.balances[wallet_id][symbol] = int(quantity)

    def clone(self) -> InMemoryAssetLedger:
        """Deep, independent copy of balances, registrations and move log."""
        cloned = InMemoryAssetLedger.__new__(InMemoryAssetLedger)
        cloned.name = self.name
        cloned.currency = self.currency
        cloned.verbose = self.verbose
        cloned._test_mode = self._test_mode
        cloned.registered_wallets = self.registered_wallets.copy()
        cloned.assets = self.assets.copy()
        cloned.move_log = list(self.move_log)
        cloned._next_sequence = self._next_sequence
        cloned.balances = {}
        for wallet, bals in self.balances.items():
            cloned.balances[wallet] = defaultdict(int, bals)
        return cloned

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _apply(self, quantity: int, symbol: str, source: str, dest: str, reason: str) -> None:
        self.balances[source][symbol] -= quantity
        self.balances[dest][symbol] += quantity
        move = Move(quantity, symbol, source, dest, reason, self._next_sequence)
        self._next_sequence += 1
        self.move_log.append(move)
        if self.verbose:
            print(f"  ✓ {move!r}")

    @staticmethod
    def _check_amount(amount: int, error: type) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise error(f"amount must be int, got {type(amount).__name__}")
        if amount <= 0:
            raise error(f"amount must be positive, got {amount}")

    def _check_wallet(self, wallet_id: str) -> None:
        if wallet_id not in self.registered_wallets:
            raise WalletNotRegistered(f"Wallet {wallet_id} not registered")

    def _check_asset(self, asset_id: str) -> None:
        if asset_id not in self.assets:
            raise AssetNotRegistered(f"Asset {asset_id} not registered")

    def _check_symbol(self, symbol: str) -> None:
        if symbol != self.currency and symbol not in self.assets:
            raise AssetNotRegistered(f"Unit {symbol} not registered")
