"""
In-memory asset ledger.

One `InMemoryAssetLedger` represents one asset and the vault's custody of it.
Several ledgers may share a `BalanceTable` (one row per (address, asset)), which
is how the principal and reward assets of a vault are usually wired.

The ledger is `Journaled`: the engine checkpoints it at the start of each
operation and rolls it back if the operation fails.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.vault.errors import TransferError
from ..state.balances import Address, Amount, AssetId, BalanceTable
from ..state.canonical import canonical_address, canonical_asset_id

logger = logging.getLogger("stakevault.integration.ledger")


def _require_amount(amount: object) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise ValueError(f"amount must be a non-negative int, got {amount!r}")
    return amount


class InMemoryAssetLedger:
    """Transfer primitives for a single asset held in a `BalanceTable`."""

    def __init__(self, asset: AssetId, custodian: Address, table: Optional[BalanceTable] = None) -> None:
        self.asset = canonical_asset_id(asset)
        self._custodian = canonical_address(custodian, name="custodian")
        self.table = table if table is not None else BalanceTable()

    @property
    def custodian(self) -> Address:
        return self._custodian

    def balance_of(self, address: Address) -> Amount:
        return self.table.get(canonical_address(address), self.asset)

    def total_supply(self) -> Amount:
        return self.table.total_supply(self.asset)

    def mint(self, address: Address, amount: Amount) -> None:
        """Create `amount` new units at `address` (test and scenario funding)."""
        self.table.add(canonical_address(address), self.asset, _require_amount(amount))

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> Amount:
        """
        Move exactly `amount` from sender to recipient.

        Raises:
            TransferError: If the sender holds less than `amount`
        """
        amount = _require_amount(amount)
        src = canonical_address(sender, name="sender")
        dst = canonical_address(recipient, name="recipient")
        held = self.table.get(src, self.asset)
        if held < amount:
            raise TransferError(f"{src} holds {held} of {self.asset}, cannot send {amount}")
        if amount == 0 or src == dst:
            return amount
        self.table.subtract(src, self.asset, amount)
        self.table.add(dst, self.asset, amount)
        logger.debug("Transfer %s: %s -> %s amount=%d", self.asset, src, dst, amount)
        return amount

    def transfer_in(self, sender: Address, amount: Amount) -> Amount:
        return self.transfer(sender, self._custodian, amount)

    def transfer_out(self, recipient: Address, amount: Amount) -> Amount:
        """Send up to `amount` out of custody; delivers the custody balance if it is smaller."""
        amount = _require_amount(amount)
        deliverable = min(amount, self.table.get(self._custodian, self.asset))
        return self.transfer(self._custodian, recipient, deliverable)

    # -- Journaled -------------------------------------------------------------

    def checkpoint(self) -> None:
        self.table.checkpoint()

    def rollback(self) -> None:
        self.table.rollback()

    def commit(self) -> None:
        self.table.commit()

    def __repr__(self) -> str:
        return f"InMemoryAssetLedger(asset={self.asset}, custodian={self._custodian})"
