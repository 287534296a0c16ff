"""
fake_asset_ledger.py - Test Helper for the AssetLedger protocol

Provides a minimal substrate that records every call and can be armed to
fail the next call of a given operation, for exercising compensation.
"""

from __future__ import annotations
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from launcher import TransferError, MintError, BurnError


class FakeAssetLedger:
    """
    Minimal AssetLedger for testing the Launcher without InMemoryAssetLedger.

    Example:
        accounts = FakeAssetLedger(currency={'alice': 5_000_000})
        accounts.arm("mint")          # next mint() raises MintError
        accounts.calls                # [('transfer', 'alice', 'reserve:TOK', 1000), ...]
    """

    _ERRORS = {
        'transfer': TransferError,
        'mint': MintError,
        'burn': BurnError,
    }

    def __init__(
        self,
        currency: Optional[Dict[str, int]] = None,
        tokens: Optional[Dict[Tuple[str, str], int]] = None,
    ):
        self.currency: Dict[str, int] = defaultdict(int, currency or {})
        self.tokens: Dict[Tuple[str, str], int] = defaultdict(int, tokens or {})
        self.calls: List[tuple] = []
        self._armed: Dict[str, Tuple[Exception, int]] = {}

    def arm(self, op: str, error: Optional[Exception] = None, after: int = 0) -> None:
        """
        Make a call to op raise error (default: the op's own error type).

        The first `after` calls to op still succeed; the one after them fails.
        """
        self._armed[op] = (error or self._ERRORS[op](f"injected {op} failure"), after)

    def _maybe_fail(self, op: str) -> None:
        if op not in self._armed:
            return
        error, after = self._armed[op]
        if after:
            self._armed[op] = (error, after - 1)
            return
        del self._armed[op]
        raise error

    def reserve_account(self, asset_id: str) -> str:
        return f"reserve:{asset_id}"

    def reserve_balance(self, asset_id: str) -> int:
        return self.currency[self.reserve_account(asset_id)]

    def transfer(self, source: str, dest: str, amount: int) -> None:
        self._maybe_fail('transfer')
        if self.currency[source] < amount:
            raise TransferError(f"{source} has {self.currency[source]}, needs {amount}")
        self.currency[source] -= amount
        self.currency[dest] += amount
        self.calls.append(('transfer', source, dest, amount))

    def mint(self, asset_id: str, to: str, amount: int) -> None:
        self._maybe_fail('mint')
        self.tokens[(to, asset_id)] += amount
        self.calls.append(('mint', asset_id, to, amount))

    def burn(self, asset_id: str, source: str, amount: int) -> None:
        self._maybe_fail('burn')
        if self.tokens[(source, asset_id)] < amount:
            raise BurnError(f"{source} holds {self.tokens[(source, asset_id)]} {asset_id}")
        self.tokens[(source, asset_id)] -= amount
        self.calls.append(('burn', asset_id, source, amount))
