"""Reward accumulator transitions.

Two pure functions over ``GlobalState``:

- ``sync_inflow`` notices reward tokens that arrived since the last observation
  and queues them in ``pending_rewards``;
- ``fold_into_accumulator`` spreads everything queued over the principal the
  vault currently holds, raising ``acc_per_share``.

Folding is a full flush weighted only by principal at the moment of the fold;
there is no time pro-rating. Both functions take the observed balances as
arguments so they never touch a ledger themselves.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .math import acc_increment, checked_add
from .types import GlobalState

logger = logging.getLogger("stakevault.vault.accumulator")


def sync_inflow(state: GlobalState, current_reward_balance: int) -> tuple[GlobalState, int]:
    """Queue newly arrived reward tokens. Returns the new state and the queued delta."""
    delta = current_reward_balance - state.tracked_reward_balance
    if delta <= 0:
        if delta < 0:
            logger.warning(
                "Reward balance decreased since last sync: tracked=%d observed=%d",
                state.tracked_reward_balance,
                current_reward_balance,
            )
        return state, 0

    new_state = replace(
        state,
        tracked_reward_balance=current_reward_balance,
        pending_rewards=checked_add(state.pending_rewards, delta, what="pending_rewards"),
    )
    logger.debug("Synced reward inflow: delta=%d pending=%d", delta, new_state.pending_rewards)
    return new_state, delta


def fold_into_accumulator(state: GlobalState, principal_balance: int) -> GlobalState:
    """Convert pending rewards into an accumulator increment.

    No-op on an empty principal pool: pending rewards stay queued for the next
    fold that sees a non-zero balance.
    """
    if principal_balance == 0:
        return state

    increment = acc_increment(state.pending_rewards, principal_balance)
    new_state = replace(
        state,
        acc_per_share=checked_add(state.acc_per_share, increment, what="acc_per_share"),
        pending_rewards=0,
    )
    if state.pending_rewards:
        logger.debug(
            "Folded %d pending rewards over %d principal: acc_per_share=%d",
            state.pending_rewards,
            principal_balance,
            new_state.acc_per_share,
        )
    return new_state
