"""Data types for the staking vault engine.

All records are frozen dataclasses (immutable); the engine replaces them
wholesale inside its guarded section.

Units/conventions:
- `acc_per_share` is reward units per principal unit, scaled by `ACC_SCALE` (1e18).
- `pending_rewards`, `tracked_reward_balance`, `reward_debt` are plain reward units.
- `amount` is plain principal units.
- addresses are canonical 0x-prefixed 20-byte hex strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Mapping

from ...state.accounts import UserAccount
from ...state.canonical import NULL_ADDRESS


@unique
class Action(Enum):
    """One member per public mutating entry point."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    CLAIM = "claim"
    UPDATE_PENDING_REWARDS = "update_pending_rewards"
    PAUSE = "pause"
    RESUME = "resume"
    SET_NEW_ADMIN = "set_new_admin"
    BURN_ADMIN = "burn_admin"


@unique
class Event(Enum):
    """One member per observable event kind."""
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    REWARD_PAID = "RewardPaid"
    ADMIN_TRANSFERRED = "AdminTransferred"
    VAULT_PAUSED = "VaultPaused"
    VAULT_RESUMED = "VaultResumed"


@dataclass(frozen=True)
class GlobalState:
    """Process-wide reward accounting."""

    acc_per_share: int = 0
    pending_rewards: int = 0
    tracked_reward_balance: int = 0


@dataclass(frozen=True)
class OperationalState:
    paused: bool = False
    admin: str = NULL_ADDRESS


@dataclass(frozen=True)
class VaultSnapshot:
    """Point-in-time copy of everything the engine owns."""

    global_state: GlobalState = field(default_factory=GlobalState)
    operational: OperationalState = field(default_factory=OperationalState)
    accounts: Mapping[str, UserAccount] = field(default_factory=dict)


@dataclass(frozen=True)
class VaultEvent:
    """An emitted event. Unused fields stay at their defaults.

    - Deposit / Withdraw: `user`, `amount`
    - RewardPaid: `user`, `amount` (delivered), `requested`
    - AdminTransferred: `old_admin`, `new_admin`
    - VaultPaused / VaultResumed: `admin` (the caller that flipped the gate)
    """

    event: Event
    user: str | None = None
    amount: int = 0
    requested: int = 0
    old_admin: str | None = None
    new_admin: str | None = None
    admin: str | None = None


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to 0/None."""

    action: Action
    caller: str = NULL_ADDRESS
    amount: int = 0                # deposit / withdraw
    account: str | None = None     # claim on behalf of another account
    new_admin: str | None = None   # set_new_admin


@dataclass(frozen=True)
class StepResult:
    """Result of a single dispatched action."""

    accepted: bool
    events: tuple[VaultEvent, ...] = ()
    rejection: str | None = None
    detail: str | None = None
