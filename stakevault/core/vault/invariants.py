"""Invariant checkers for the staking vault.

Each checker looks at one ``Transition`` (the pre/post global records of an
operation plus what the operation touched) and returns True when the
invariant holds. ``check_all()`` returns the list of violated invariant ids
(empty = all pass). The engine runs it before committing every operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping

from ...state.accounts import UserAccount
from .math import ACC_SCALE, MAX_UINT256
from .types import GlobalState


@dataclass(frozen=True)
class Transition:
    pre: GlobalState
    post: GlobalState
    # Accounts settled by the operation, keyed by address, as written.
    settled: Mapping[str, UserAccount] = field(default_factory=dict)
    # Reward balance observed after the last sync or payout; None if neither ran.
    reward_balance: int | None = None


def _in_word(v: int) -> bool:
    return 0 <= v <= MAX_UINT256


def inv_acc_monotone(t: Transition) -> bool:
    return t.post.acc_per_share >= t.pre.acc_per_share


def inv_global_in_range(t: Transition) -> bool:
    g = t.post
    return (
        _in_word(g.acc_per_share)
        and _in_word(g.pending_rewards)
        and _in_word(g.tracked_reward_balance)
    )


def inv_accounts_in_range(t: Transition) -> bool:
    return all(_in_word(a.amount) and _in_word(a.reward_debt) for a in t.settled.values())


def inv_settled_debt_matches(t: Transition) -> bool:
    acc = t.post.acc_per_share
    return all(a.amount * acc // ACC_SCALE == a.reward_debt for a in t.settled.values())


def inv_tracked_matches_balance(t: Transition) -> bool:
    if t.reward_balance is None:
        return True
    return t.post.tracked_reward_balance == t.reward_balance


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[Transition], bool]] = {
    "inv_acc_monotone": inv_acc_monotone,
    "inv_global_in_range": inv_global_in_range,
    "inv_accounts_in_range": inv_accounts_in_range,
    "inv_settled_debt_matches": inv_settled_debt_matches,
    "inv_tracked_matches_balance": inv_tracked_matches_balance,
}


def check_all(transition: Transition) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(transition)
    ]
