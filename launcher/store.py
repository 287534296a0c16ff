"""
store.py - Keyed store of issuance records

Maps asset identity to its IssuanceRecord and keeps the receipts of every
committed operation. The Launcher receives a store explicitly instead of
reaching for ambient state, so tests can build one in memory and inspect it
directly, and several launchers can share one.
"""

from __future__ import annotations
from typing import Dict, Iterator, List

from .core import IssuanceRecord, OperationReceipt, AlreadyInitialized, RecordNotFound


class IssuanceStore:
    """
    In-memory mapping of asset_id -> IssuanceRecord, plus the receipt log.

    Records are frozen; commit() swaps in a replacement. A record is
    created exactly once per asset and never deleted. Receipt sequence
    numbers are positions in the store's log, so they stay unique across
    every launcher that uses the store.

    Thread Safety:
        Not thread-safe. The host serializes operations per record.
    """

    def __init__(self):
        self._records: Dict[str, IssuanceRecord] = {}
        self._receipts: List[OperationReceipt] = []

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IssuanceRecord]:
        for asset_id in sorted(self._records):
            yield self._records[asset_id]

    def create(self, record: IssuanceRecord) -> IssuanceRecord:
        """
        Store a new record.

        Raises:
            AlreadyInitialized: If the asset already has a record
        """
        if record.asset_id in self._records:
            raise AlreadyInitialized(f"Asset {record.asset_id} already initialized")
        self._records[record.asset_id] = record
        return record

    def get(self, asset_id: str) -> IssuanceRecord:
        """
        Raises:
            RecordNotFound: If the asset was never initialized
        """
        try:
            return self._records[asset_id]
        except KeyError:
            raise RecordNotFound(f"Asset {asset_id} not initialized") from None

    def commit(self, record: IssuanceRecord) -> IssuanceRecord:
        """
        Replace an existing record with its updated version.

        Raises:
            RecordNotFound: If the asset was never initialized
            ValueError: If an immutable field differs from the stored record,
                or curve pricing would be switched off again
        """
        current = self.get(record.asset_id)
        for name in ("controller", "decimals", "max_supply", "base_price",
                     "slippage_numerator", "slippage_denominator"):
            if getattr(current, name) != getattr(record, name):
                raise ValueError(f"{record.asset_id}: {name} is immutable")
        if current.priced_by_curve and not record.priced_by_curve:
            raise ValueError(f"{record.asset_id}: priced_by_curve cannot be reset")
        self._records[record.asset_id] = record
        return record

    def list_assets(self) -> List[str]:
        return sorted(self._records)

    # ========================================================================
    # RECEIPTS
    # ========================================================================

    @property
    def next_sequence(self) -> int:
        return len(self._receipts)

    @property
    def receipts(self) -> List[OperationReceipt]:
        """Copy of the receipt log, in sequence order."""
        return list(self._receipts)

    def append_receipt(self, receipt: OperationReceipt) -> OperationReceipt:
        """
        Raises:
            ValueError: If the receipt's sequence is not next_sequence
        """
        if receipt.sequence != self.next_sequence:
            raise ValueError(
                f"receipt sequence {receipt.sequence} != next sequence {self.next_sequence}"
            )
        self._receipts.append(receipt)
        return receipt

    def clone(self) -> IssuanceStore:
        """Independent copy. Records and receipts are frozen, so shallow copies suffice."""
        cloned = IssuanceStore()
        cloned._records = dict(self._records)
        cloned._receipts = list(self._receipts)
        return cloned
