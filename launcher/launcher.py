"""
launcher.py - Bonding-Curve Issuance and Redemption Ledger

The Launcher is the accounting core. It owns the issuance records (through
an IssuanceStore) and is the only place that replaces them.

Key responsibilities:
    - Validates every precondition before any external effect
    - Converts intents to quantities with the price engine at the pre-trade price
    - Drives the external substrate (transfer, mint, burn) and compensates
      already-applied effects if a later one fails
    - Commits the updated record and re-prices it only after all effects succeeded
    - Always logs: every committed operation leaves an OperationReceipt
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import copy

from .auth import AuthorizationGuard
from .core import (
    # Types
    AssetLedger, IssuanceRecord, OperationReceipt, OperationType,
    # Constants
    DEFAULT_BASE_PRICE,
    # Exceptions
    LauncherError, AlreadyInitialized, InsufficientReserve, ZeroQuantity,
    CompensationFailed,
    # Arithmetic
    require_u64, checked_add, checked_sub,
)
from .pricing import (
    Quote, Slippage, DEFAULT_SLIPPAGE,
    quote_buy, quote_sell, record_price,
)
from .store import IssuanceStore


# A forward effect paired with the effect that undoes it (None if it is last).
Effect = Tuple[Callable[[], None], Optional[Callable[[], None]]]


class Launcher:
    """
    Issues and redeems bonding-curve tokens against a currency reserve.

    Design Principles:
        - Fail before acting: a rejected operation has no external effect and
          leaves the record untouched.
        - Record and reserve move together: the record is committed only after
          the substrate applied every effect of the operation.
        - Price is derived, never set: after each buy or sell the price is
          recomputed from issued supply.

    Thread Safety:
        Not thread-safe. The host must serialize operations per asset record;
        operations on different assets are independent.

    Example:
        accounts = InMemoryAssetLedger("devnet", verbose=False)
        accounts.register_asset("TOK")
        accounts.register_wallet("issuer")
        accounts.register_wallet("alice")
        accounts.fund("alice", 10_000_000)

        launcher = Launcher(accounts)
        launcher.initialize("issuer", "TOK", decimals=0,
                            initial_price=1_000_000, max_supply=1_000)
        launcher.buy("TOK", "alice", 3_000_000)    # mints 3 units
        launcher.sell("TOK", "alice", 1)           # pays 90% of the price
    """

    def __init__(
        self,
        accounts: AssetLedger,
        store: Optional[IssuanceStore] = None,
        name: str = "launcher",
        verbose: bool = True,
    ):
        """
        Args:
            accounts: External substrate implementing AssetLedger
            store: Record store (default: a fresh in-memory IssuanceStore)
            name: Launcher identifier used in log output
            verbose: Print committed and rejected operations (default: True)
        """
        if not isinstance(accounts, AssetLedger):
            raise TypeError(f"accounts must implement AssetLedger, got {type(accounts).__name__}")
        self.accounts = accounts
        self.store = store if store is not None else IssuanceStore()
        self.name = name
        self.verbose = verbose

    # ========================================================================
    # READS
    # ========================================================================

    def get_record(self, asset_id: str) -> IssuanceRecord:
        return self.store.get(asset_id)

    def current_price(self, asset_id: str) -> int:
        return self.store.get(asset_id).current_price

    @property
    def operation_log(self) -> List[OperationReceipt]:
        """Receipts of every committed operation in the store, in sequence order."""
        return self.store.receipts

    def receipts_for(self, asset_id: str) -> List[OperationReceipt]:
        return [r for r in self.store.receipts if r.asset_id == asset_id]

    def quote_buy(self, asset_id: str, currency_amount: int) -> Quote:
        """Preview a buy at the current price without applying it."""
        return quote_buy(self.store.get(asset_id), currency_amount)

    def quote_sell(self, asset_id: str, token_units: int) -> Quote:
        """
        Preview a sell at the current price without applying it.

        Includes the liquidity check against the external reserve.
        """
        quote = quote_sell(self.store.get(asset_id), token_units)
        self._require_reserve(asset_id, quote.currency_amount)
        return quote

    def collateral_shortfall(self, asset_id: str) -> int:
        """
        Currency by which reserve_collected exceeds the actual reserve balance.

        Zero while the bookkeeping is fully backed. Withdrawals can make it
        positive since they do not reduce reserve_collected.
        """
        record = self.store.get(asset_id)
        return max(0, record.reserve_collected - self.accounts.reserve_balance(asset_id))

    def verify_invariants(self, asset_id: str) -> Dict[str, Any]:
        """
        Check the issuance invariants of one asset.

        Returns:
            Dict with keys:
            - 'valid': bool - True if no invariant is violated
            - 'violations': List[str] - description of each violation
            - 'priced_by_curve': bool - whether the derived-price rule applies yet
            - 'reserve_balance': int - external reserve
            - 'reserve_collected': int - bookkeeping reserve
            - 'collateral_shortfall': int - see collateral_shortfall()

        Example:
            result = launcher.verify_invariants("TOK")
            assert result['valid'], result['violations']
        """
        record = self.store.get(asset_id)
        violations = []

        if record.total_issued > record.max_supply:
            violations.append(
                f"total_issued {record.total_issued} > max_supply {record.max_supply}"
            )

        # The initial price is taken as given until the first trade.
        priced_by_curve = record.priced_by_curve
        if priced_by_curve:
            expected = record_price(record)
            if record.current_price != expected:
                violations.append(
                    f"current_price {record.current_price} != curve price {expected}"
                )

        reserve_balance = self.accounts.reserve_balance(asset_id)
        if reserve_balance < 0:
            violations.append(f"reserve balance {reserve_balance} is negative")

        return {
            'valid': len(violations) == 0,
            'violations': violations,
            'priced_by_curve': priced_by_curve,
            'reserve_balance': reserve_balance,
            'reserve_collected': record.reserve_collected,
            'collateral_shortfall': max(0, record.reserve_collected - reserve_balance),
        }

    # ========================================================================
    # OPERATIONS (Mutating)
    # ========================================================================

    def initialize(
        self,
        controller: str,
        asset_id: str,
        decimals: int,
        initial_price: int,
        max_supply: int,
        *,
        base_price: int = DEFAULT_BASE_PRICE,
        slippage: Slippage = DEFAULT_SLIPPAGE,
        name: str = "",
        symbol: str = "",
    ) -> IssuanceRecord:
        """
        Create the issuance record for a new asset.

        The initial price is stored as given; curve pricing starts with the
        first buy or sell.

        Args:
            controller: Identity allowed to withdraw from the reserve
            asset_id: Asset identity (the record key)
            decimals: Base units per whole token are 10**decimals
            initial_price: Currency units per whole token until the first trade
            max_supply: Cap on issued base units, > 0
            base_price: Curve price at zero issuance
            slippage: Sell-side payout fraction
            name: Token name
            symbol: Token ticker

        Raises:
            AlreadyInitialized: If a record already exists for asset_id
            ValueError: If the configuration is invalid
        """
        if asset_id in self.store:
            exc = AlreadyInitialized(f"Asset {asset_id} already initialized")
            self._reject(OperationType.INITIALIZE, asset_id, exc)
            raise exc
        record = IssuanceRecord(
            controller=controller,
            asset_id=asset_id,
            decimals=decimals,
            current_price=initial_price,
            max_supply=max_supply,
            base_price=base_price,
            slippage_numerator=slippage.numerator,
            slippage_denominator=slippage.denominator,
            name=name,
            symbol=symbol,
        )
        self.store.create(record)
        self._record_receipt(
            OperationType.INITIALIZE, asset_id, controller,
            currency_amount=0, token_units=0,
            price_before=initial_price, price_after=initial_price,
        )
        if self.verbose:
            label = f"{name} ({symbol})" if name or symbol else asset_id
            print(
                f"✓ INITIALIZE {asset_id}: {label}, price {initial_price} per token, "
                f"max supply {max_supply}, controller {controller}"
            )
        return record

    def buy(self, asset_id: str, buyer: str, currency_amount: int) -> OperationReceipt:
        """
        Mint tokens to buyer in exchange for currency paid into the reserve.

        Effects, applied as one unit:
            1. transfer currency_amount buyer -> reserve
            2. mint token_units to buyer
            3. total_issued += token_units, reserve_collected += currency_amount
            4. re-price from the new total_issued

        If the mint fails, the transfer is reversed and the mint error propagates.

        Raises:
            ZeroQuantity: If currency_amount is zero or buys no whole token
            MaxSupplyExceeded: If the mint would exceed max_supply
            MathOverflow: On any overflow
            RecordNotFound: If asset_id was never initialized
            CollaboratorError: If the substrate refuses an effect
        """
        record = self.store.get(asset_id)
        try:
            quote = quote_buy(record, currency_amount)
            new_reserve = checked_add(record.reserve_collected, quote.currency_amount)
        except LauncherError as exc:
            self._reject(OperationType.BUY, asset_id, exc)
            raise

        reserve = self.accounts.reserve_account(asset_id)
        self._apply_effects(OperationType.BUY, asset_id, [
            (lambda: self.accounts.transfer(buyer, reserve, currency_amount),
             lambda: self.accounts.transfer(reserve, buyer, currency_amount)),
            (lambda: self.accounts.mint(asset_id, buyer, quote.token_units), None),
        ])

        self.store.commit(replace(
            record,
            total_issued=quote.total_issued_after,
            reserve_collected=new_reserve,
            current_price=quote.price_after,
            priced_by_curve=True,
        ))
        receipt = self._record_receipt(
            OperationType.BUY, asset_id, buyer,
            currency_amount=currency_amount, token_units=quote.token_units,
            price_before=quote.price_before, price_after=quote.price_after,
        )
        if self.verbose:
            print(
                f"✓ BUY {asset_id}: {buyer} paid {currency_amount} for "
                f"{quote.token_units} units, new price {quote.price_after}"
            )
        return receipt

    def sell(self, asset_id: str, seller: str, token_units: int) -> OperationReceipt:
        """
        Burn seller's tokens and pay out currency from the reserve.

        Effects, applied as one unit:
            1. burn token_units from seller
            2. transfer the slipped payout reserve -> seller
            3. total_issued -= token_units, reserve_collected -= payout
            4. re-price from the new total_issued

        If the payout transfer fails, the burned units are minted back.

        Raises:
            ZeroQuantity: If token_units is zero or is worth no currency
            MathOverflow: If token_units exceeds total_issued, or on any overflow
            InsufficientReserve: If the payout exceeds the external reserve balance
            RecordNotFound: If asset_id was never initialized
            CollaboratorError: If the substrate refuses an effect
        """
        record = self.store.get(asset_id)
        try:
            quote = quote_sell(record, token_units)
            self._require_reserve(asset_id, quote.currency_amount)
            new_reserve = checked_sub(record.reserve_collected, quote.currency_amount)
        except LauncherError as exc:
            self._reject(OperationType.SELL, asset_id, exc)
            raise

        payout = quote.currency_amount
        reserve = self.accounts.reserve_account(asset_id)
        self._apply_effects(OperationType.SELL, asset_id, [
            (lambda: self.accounts.burn(asset_id, seller, token_units),
             lambda: self.accounts.mint(asset_id, seller, token_units)),
            (lambda: self.accounts.transfer(reserve, seller, payout), None),
        ])

        self.store.commit(replace(
            record,
            total_issued=quote.total_issued_after,
            reserve_collected=new_reserve,
            current_price=quote.price_after,
            priced_by_curve=True,
        ))
        receipt = self._record_receipt(
            OperationType.SELL, asset_id, seller,
            currency_amount=payout, token_units=token_units,
            price_before=quote.price_before, price_after=quote.price_after,
        )
        if self.verbose:
            print(
                f"✓ SELL {asset_id}: {seller} burned {token_units} units for "
                f"{payout}, new price {quote.price_after}"
            )
        return receipt

    def withdraw(self, asset_id: str, requester: str, amount: int) -> OperationReceipt:
        """
        Move currency from the reserve to the controller.

        Leaves total_issued, current_price and reserve_collected unchanged, so a
        withdrawal can leave issued supply under-collateralized; see
        collateral_shortfall().

        Raises:
            Unauthorized: If requester is not the controller
            ZeroQuantity: If amount is zero
            InsufficientReserve: If amount exceeds the external reserve balance
            RecordNotFound: If asset_id was never initialized
            CollaboratorError: If the substrate refuses the transfer
        """
        record = self.store.get(asset_id)
        try:
            AuthorizationGuard.require_controller(record, requester)
            require_u64(amount, "amount")
            if amount == 0:
                raise ZeroQuantity("withdraw amount must be positive")
            self._require_reserve(asset_id, amount)
        except LauncherError as exc:
            self._reject(OperationType.WITHDRAW, asset_id, exc)
            raise

        reserve = self.accounts.reserve_account(asset_id)
        self._apply_effects(OperationType.WITHDRAW, asset_id, [
            (lambda: self.accounts.transfer(reserve, record.controller, amount), None),
        ])

        receipt = self._record_receipt(
            OperationType.WITHDRAW, asset_id, requester,
            currency_amount=amount, token_units=0,
            price_before=record.current_price, price_after=record.current_price,
        )
        if self.verbose:
            print(f"✓ WITHDRAW {asset_id}: {amount} to {record.controller}")
            shortfall = self.collateral_shortfall(asset_id)
            if shortfall:
                print(
                    f"⚠️  UNDER-COLLATERALIZED {asset_id}: reserve is {shortfall} "
                    f"below reserve_collected {record.reserve_collected}"
                )
        return receipt

    # ========================================================================
    # CLONING
    # ========================================================================

    def clone(self) -> Launcher:
        """
        Independent copy of records, operation log and substrate.

        Useful for what-if evaluation: operations on the clone never reach
        the original's substrate.
        """
        clone_accounts = getattr(self.accounts, "clone", None)
        accounts = clone_accounts() if clone_accounts else copy.deepcopy(self.accounts)
        return Launcher(accounts, self.store.clone(), name=self.name, verbose=self.verbose)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _require_reserve(self, asset_id: str, amount: int) -> None:
        available = self.accounts.reserve_balance(asset_id)
        if amount > available:
            raise InsufficientReserve(
                f"{asset_id}: needs {amount} from reserve, only {available} available"
            )

    def _apply_effects(self, kind: OperationType, asset_id: str, effects: Sequence[Effect]) -> None:
        """
        Run effects in order. On failure, undo the applied ones in reverse
        order and re-raise the original error.

        Raises:
            CompensationFailed: If an undo itself fails, chained from the
                original error. Later undos are not attempted.
        """
        undo_stack: List[Callable[[], None]] = []
        for do, undo in effects:
            try:
                do()
            except Exception as exc:
                for compensate in reversed(undo_stack):
                    try:
                        compensate()
                    except Exception as undo_exc:
                        if self.verbose:
                            print(
                                f"✗ COMPENSATION FAILED {kind.value} {asset_id}: "
                                f"{type(exc).__name__}: {exc}; undo raised "
                                f"{type(undo_exc).__name__}: {undo_exc}"
                            )
                        raise CompensationFailed(
                            f"{kind.value} {asset_id}: could not undo after "
                            f"{type(exc).__name__}; substrate and record may disagree"
                        ) from exc
                self._reject(kind, asset_id, exc, rolled_back=len(undo_stack))
                raise
            if undo is not None:
                undo_stack.append(undo)

    def _record_receipt(
        self,
        kind: OperationType,
        asset_id: str,
        actor: str,
        currency_amount: int,
        token_units: int,
        price_before: int,
        price_after: int,
    ) -> OperationReceipt:
        receipt = OperationReceipt(
            sequence=self.store.next_sequence,
            kind=kind,
            asset_id=asset_id,
            actor=actor,
            currency_amount=currency_amount,
            token_units=token_units,
            price_before=price_before,
            price_after=price_after,
        )
        return self.store.append_receipt(receipt)

    def _reject(self, kind: OperationType, asset_id: str, exc: BaseException, rolled_back: int = 0) -> None:
        if self.verbose:
            suffix = f" (rolled back {rolled_back} effect(s))" if rolled_back else ""
            print(f"✗ REJECTED {kind.value} {asset_id}: {type(exc).__name__}: {exc}{suffix}")
