"""
Multi-asset balance tracking with checkpoint/rollback.

Implements BalanceTable[Address, AssetId] -> Amount
"""

from typing import Dict, List, Optional, Tuple


# Type aliases
Address = str  # 20-byte hex string (0x...)
AssetId = str  # 32-byte hex string (0x...)
Amount = int  # Non-negative integer (arbitrary precision)

_Key = Tuple[Address, AssetId]


class BalanceTable:
    """
    Balance table mapping (address, asset) -> amount.

    Writes made after `checkpoint()` can be undone with `rollback()` or kept
    with `commit()`. Checkpoints nest; each one records the first prior value
    of every key it overwrites.

    Note: this class stores balances in a plain dict. Do not rely on dict
    iteration order; callers should sort keys explicitly at serialization
    boundaries.
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[_Key, Amount] = {}
        self._journals: List[Dict[_Key, Optional[Amount]]] = []

    def get(self, address: Address, asset: AssetId) -> Amount:
        """Get balance for (address, asset). Returns 0 if not found."""
        return self._balances.get((address, asset), 0)

    def set(self, address: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (address, asset).

        Args:
            address: Account address
            asset: Asset identifier
            amount: Non-negative amount

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        key = (address, asset)
        if self._journals:
            journal = self._journals[-1]
            if key not in journal:
                journal[key] = self._balances.get(key)
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(key, None)
        else:
            self._balances[key] = amount

    def add(self, address: Address, asset: AssetId, delta: Amount) -> None:
        """
        Add delta to balance. Equivalent to set(address, asset, get(...) + delta).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(address, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(address, asset, new_balance)

    def subtract(self, address: Address, asset: AssetId, delta: Amount) -> None:
        """
        Subtract delta from balance. Equivalent to add(address, asset, -delta).

        Raises:
            ValueError: If delta is negative or insufficient balance
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(address, asset, -delta)

    # -- Journaling ----------------------------------------------------------

    def checkpoint(self) -> None:
        self._journals.append({})

    def rollback(self) -> None:
        """Undo every write since the innermost checkpoint."""
        if not self._journals:
            raise RuntimeError("rollback without checkpoint")
        journal = self._journals.pop()
        for key, previous in journal.items():
            if previous is None:
                self._balances.pop(key, None)
            else:
                self._balances[key] = previous

    def commit(self) -> None:
        """Keep writes since the innermost checkpoint, folding its journal into the parent."""
        if not self._journals:
            raise RuntimeError("commit without checkpoint")
        journal = self._journals.pop()
        if self._journals:
            parent = self._journals[-1]
            for key, previous in journal.items():
                parent.setdefault(key, previous)

    @property
    def in_checkpoint(self) -> bool:
        return bool(self._journals)

    # -- Queries -------------------------------------------------------------

    def get_all_balances(self) -> Dict[_Key, Amount]:
        return dict(self._balances)

    def get_balances_for_asset(self, asset: AssetId) -> Dict[Address, Amount]:
        """
        Get all balances for a specific asset.

        Returns:
            Dictionary mapping address -> amount
        """
        result = {}
        for (addr, a), amount in self._balances.items():
            if a == asset:
                result[addr] = amount
        return result

    def total_supply(self, asset: AssetId) -> Amount:
        return sum(self.get_balances_for_asset(asset).values())

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
