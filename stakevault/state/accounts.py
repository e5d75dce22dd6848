"""
Per-depositor staking records (v1).

We track, per depositor address, the principal staked and the reward debt
(the accumulator value already priced in for that principal). Absent entries
read as a zero record. Entries are never removed: once written, a fully
withdrawn account lingers as `UserAccount(0, 0)`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .balances import Address
from .canonical import canonical_address


@dataclass(frozen=True)
class UserAccount:
    """Staking record for one depositor."""

    amount: int = 0
    reward_debt: int = 0

    def __post_init__(self) -> None:
        for name in ("amount", "reward_debt"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative")


ZERO_ACCOUNT = UserAccount()


@dataclass
class AccountTable:
    """
    Mutable mapping: depositor address -> UserAccount.

    This is intentionally similar in spirit to `BalanceTable`: a small, explicit
    state table with the same checkpoint/rollback/commit journaling, so the
    engine can undo a failed operation.
    """

    _accounts: Dict[Address, UserAccount] = field(default_factory=dict)
    _journals: List[Dict[Address, Optional[UserAccount]]] = field(default_factory=list)

    def get(self, address: Address) -> UserAccount:
        addr = canonical_address(address)
        return self._accounts.get(addr, ZERO_ACCOUNT)

    def set(self, address: Address, account: UserAccount) -> None:
        if not isinstance(account, UserAccount):
            raise TypeError("account must be a UserAccount")
        addr = canonical_address(address)
        if self._journals:
            journal = self._journals[-1]
            if addr not in journal:
                journal[addr] = self._accounts.get(addr)
        self._accounts[addr] = account

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        return canonical_address(address) in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def total_staked(self) -> int:
        return sum(acct.amount for acct in self._accounts.values())

    def get_all(self) -> Mapping[Address, UserAccount]:
        # Return a shallow copy to avoid accidental mutation during iteration.
        return dict(self._accounts)

    # -- Journaling ----------------------------------------------------------

    def checkpoint(self) -> None:
        self._journals.append({})

    def rollback(self) -> None:
        if not self._journals:
            raise RuntimeError("rollback without checkpoint")
        journal = self._journals.pop()
        for addr, previous in journal.items():
            if previous is None:
                self._accounts.pop(addr, None)
            else:
                self._accounts[addr] = previous

    def commit(self) -> None:
        if not self._journals:
            raise RuntimeError("commit without checkpoint")
        journal = self._journals.pop()
        if self._journals:
            parent = self._journals[-1]
            for addr, previous in journal.items():
                parent.setdefault(addr, previous)
