"""Staking vault engine.

``VaultEngine`` owns the global accumulator, the per-account table and the
operational state, and drives the two asset ledgers. Every mutating entry
point runs the same fixed sequence inside one guarded, atomic section:

1. acquire the reentrancy guard;
2. check the pause gate (deposit/withdraw/claim/sync only);
3. fold queued rewards into the accumulator (deposit/withdraw/claim);
4. settle the account's pending reward through the shortfall-safe payout;
5. move principal, if any;
6. recompute the account's reward debt;
7. check invariants, then commit.

Both ledgers must be ``Journaled``. Any exception rolls back the engine's
records, the account table and both ledgers, drops queued events, releases
the guard and re-raises. Events reach subscribers only after commit; a
subscriber that raises is logged and skipped.

``execute(params)`` / ``execute_or_raise(params)`` expose the same operations
through an ``Action`` dispatch table.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator

from ...state.accounts import ZERO_ACCOUNT, AccountTable, UserAccount
from ...state.canonical import NULL_ADDRESS
from .accumulator import fold_into_accumulator, sync_inflow
from .capabilities import AccessAuthority, AssetLedger, Journaled
from .errors import InsufficientBalanceError, VaultError, VaultInvariantError
from .guards import (
    PAUSE_ACTION,
    RESUME_ACTION,
    ReentrancyGuard,
    require_active,
    require_address,
    require_admin,
    require_allowed,
    require_amount,
    require_pausable,
    require_resumable,
)
from .invariants import Transition, check_all
from .math import accumulated_reward, checked_add, checked_sub, pending_reward
from .types import (
    Action,
    ActionParams,
    Event,
    GlobalState,
    OperationalState,
    StepResult,
    VaultEvent,
    VaultSnapshot,
)

logger = logging.getLogger("stakevault.vault.engine")

EventListener = Callable[[VaultEvent], None]


@dataclass
class _Scratch:
    """Per-operation bookkeeping, discarded on rollback."""

    events: list[VaultEvent] = field(default_factory=list)
    settled: dict[str, UserAccount] = field(default_factory=dict)
    reward_balance: int | None = None

    def emit(self, event: VaultEvent) -> None:
        self.events.append(event)


class VaultEngine:
    """Single-asset staking vault paying a second asset pro rata."""

    def __init__(
        self,
        *,
        principal: AssetLedger,
        reward: AssetLedger,
        authority: AccessAuthority,
        admin: str,
        check_invariants: bool = True,
    ) -> None:
        if principal.custodian != reward.custodian:
            raise ValueError("principal and reward ledgers must share one custodian address")
        if principal is reward:
            raise ValueError("principal and reward must be distinct ledgers")
        principal_asset = getattr(principal, "asset", None)
        if principal_asset is not None and principal_asset == getattr(reward, "asset", None):
            raise ValueError("principal and reward ledgers must hold different assets")
        for role, ledger in (("principal", principal), ("reward", reward)):
            if not isinstance(ledger, Journaled):
                raise TypeError(f"{role} ledger must support checkpoint/rollback/commit")
        self._principal = principal
        self._reward = reward
        self._authority = authority
        self._vault = principal.custodian
        self._check_invariants = check_invariants

        self._guard = ReentrancyGuard()
        self._global = GlobalState()
        self._op = OperationalState(admin=require_address(admin, name="admin"))
        self._accounts = AccountTable()
        self._events: list[VaultEvent] = []
        self._listeners: list[EventListener] = []

    @classmethod
    def from_snapshot(
        cls,
        snapshot: VaultSnapshot,
        *,
        principal: AssetLedger,
        reward: AssetLedger,
        authority: AccessAuthority,
        check_invariants: bool = True,
    ) -> "VaultEngine":
        engine = cls(
            principal=principal,
            reward=reward,
            authority=authority,
            admin=snapshot.operational.admin,
            check_invariants=check_invariants,
        )
        engine._global = snapshot.global_state
        engine._op = snapshot.operational
        for addr, acct in snapshot.accounts.items():
            engine._accounts.set(addr, acct)
        return engine

    # ------------------------------------------------------------------
    # Read-only surface
    # ------------------------------------------------------------------

    @property
    def vault_address(self) -> str:
        return self._vault

    @property
    def global_state(self) -> GlobalState:
        return self._global

    @property
    def paused(self) -> bool:
        return self._op.paused

    @property
    def reentrancy_locked(self) -> bool:
        return self._guard.locked

    @property
    def events(self) -> tuple[VaultEvent, ...]:
        """Every committed event, oldest first."""
        return tuple(self._events)

    def account(self, address: str) -> UserAccount:
        return self._accounts.get(require_address(address, name="account"))

    def get_admin(self) -> str:
        return self._op.admin

    def pending_reward_for(self, address: str) -> int:
        """Reward owed to ``address`` at the current accumulator (queued rewards excluded)."""
        acct = self.account(address)
        return pending_reward(acct.amount, self._global.acc_per_share, acct.reward_debt)

    def snapshot(self) -> VaultSnapshot:
        return VaultSnapshot(
            global_state=self._global,
            operational=self._op,
            accounts=self._accounts.get_all(),
        )

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Staking operations
    # ------------------------------------------------------------------

    def deposit(self, caller: str, amount: int) -> tuple[VaultEvent, ...]:
        """Stake ``amount`` principal. A zero amount only settles pending rewards."""
        caller = require_address(caller, name="caller", allow_null=False)
        amount = require_amount(amount)
        with self._operation(Action.DEPOSIT) as op:
            require_active(self._op)
            self._fold()
            self._settle(op, caller)
            account = self._accounts.get(caller)
            if amount > 0:
                self._principal.transfer_in(caller, amount)
                account = replace(account, amount=checked_add(account.amount, amount, what="amount"))
            self._write_debt(op, caller, account)
            op.emit(VaultEvent(Event.DEPOSIT, user=caller, amount=amount))
        logger.info("Deposit: user=%s amount=%d", caller, amount)
        return self._publish(op)

    def withdraw(self, caller: str, amount: int) -> tuple[VaultEvent, ...]:
        """Unstake ``amount`` principal, settling pending rewards first."""
        caller = require_address(caller, name="caller", allow_null=False)
        amount = require_amount(amount)
        with self._operation(Action.WITHDRAW) as op:
            self._withdraw(op, caller, amount)
        logger.info("Withdraw: user=%s amount=%d", caller, amount)
        return self._publish(op)

    def claim(self, caller: str, account: str | None = None) -> tuple[VaultEvent, ...]:
        """Pay out pending rewards to ``account`` (default: the caller).

        Anyone may trigger a claim for another account; the reward always goes
        to the account itself and its principal is left alone.
        """
        caller = require_address(caller, name="caller", allow_null=False)
        target = caller if account is None else require_address(account, name="account", allow_null=False)
        with self._operation(Action.CLAIM) as op:
            self._withdraw(op, target, 0)
        logger.info("Claim: user=%s triggered_by=%s", target, caller)
        return self._publish(op)

    def update_pending_rewards(self, caller: str | None = None) -> int:
        """Queue reward tokens that arrived since the last sync. Returns the queued amount."""
        with self._operation(Action.UPDATE_PENDING_REWARDS) as op:
            delta = self._sync(op)
        if delta:
            logger.info("Pending rewards updated: delta=%d caller=%s", delta, caller)
        self._publish(op)
        return delta

    # ------------------------------------------------------------------
    # Operational state machine
    # ------------------------------------------------------------------

    def pause(self, caller: str) -> tuple[VaultEvent, ...]:
        caller = require_address(caller, name="caller")
        with self._operation(Action.PAUSE) as op:
            require_allowed(self._authority, caller, PAUSE_ACTION)
            require_pausable(self._op)
            self._op = replace(self._op, paused=True)
            op.emit(VaultEvent(Event.VAULT_PAUSED, admin=caller))
        logger.info("Vault paused by %s", caller)
        return self._publish(op)

    def resume(self, caller: str) -> tuple[VaultEvent, ...]:
        caller = require_address(caller, name="caller")
        with self._operation(Action.RESUME) as op:
            require_allowed(self._authority, caller, RESUME_ACTION)
            require_resumable(self._op)
            self._op = replace(self._op, paused=False)
            op.emit(VaultEvent(Event.VAULT_RESUMED, admin=caller))
        logger.info("Vault resumed by %s", caller)
        return self._publish(op)

    def set_new_admin(self, caller: str, new_admin: str) -> tuple[VaultEvent, ...]:
        caller = require_address(caller, name="caller")
        with self._operation(Action.SET_NEW_ADMIN) as op:
            require_admin(self._op, caller)
            new = require_address(new_admin, name="new_admin", allow_null=False)
            self._transfer_admin(op, new)
        return self._publish(op)

    def burn_admin(self, caller: str) -> tuple[VaultEvent, ...]:
        """Drop the admin role for good. Every later admin-only call fails."""
        caller = require_address(caller, name="caller")
        with self._operation(Action.BURN_ADMIN) as op:
            require_admin(self._op, caller)
            self._transfer_admin(op, NULL_ADDRESS)
        return self._publish(op)

    # ------------------------------------------------------------------
    # Dispatch surface
    # ------------------------------------------------------------------

    def execute(self, params: ActionParams) -> StepResult:
        """Run one action. Rejections come back as ``StepResult(accepted=False)``."""
        handler = _DISPATCH.get(params.action)
        if handler is None:
            return StepResult(accepted=False, rejection=f"unknown_action:{params.action}")
        try:
            events = handler(self, params)
        except VaultError as exc:
            return StepResult(accepted=False, rejection=exc.code, detail=str(exc))
        return StepResult(accepted=True, events=events)

    def execute_or_raise(self, params: ActionParams) -> StepResult:
        """Like ``execute()`` but lets the ``VaultError`` propagate."""
        handler = _DISPATCH.get(params.action)
        if handler is None:
            raise ValueError(f"unknown action: {params.action}")
        return StepResult(accepted=True, events=handler(self, params))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, action: Action) -> Iterator[_Scratch]:
        with self._guard.hold(action.value):
            pre_global, pre_op = self._global, self._op
            participants = self._journaled_participants()
            for p in participants:
                p.checkpoint()
            scratch = _Scratch()
            try:
                yield scratch
                self._verify(pre_global, scratch)
            except Exception as exc:
                for p in reversed(participants):
                    p.rollback()
                self._global, self._op = pre_global, pre_op
                if isinstance(exc, VaultError):
                    logger.info("Rolled back %s: %s (%s)", action.value, exc.code, exc)
                else:
                    logger.warning("Rolled back %s after %s", action.value, type(exc).__name__)
                raise
            else:
                for p in reversed(participants):
                    p.commit()
                self._events.extend(scratch.events)

    def _journaled_participants(self) -> list[Journaled]:
        return [self._accounts, self._principal, self._reward]  # type: ignore[list-item]

    def _verify(self, pre: GlobalState, scratch: _Scratch) -> None:
        if not self._check_invariants:
            return
        violations = check_all(
            Transition(
                pre=pre,
                post=self._global,
                settled=scratch.settled,
                reward_balance=scratch.reward_balance,
            )
        )
        if violations:
            raise VaultInvariantError(violations)

    def _publish(self, scratch: _Scratch) -> tuple[VaultEvent, ...]:
        events = tuple(scratch.events)
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception("Event listener failed on %s", event.event.value)
        return events

    def _sync(self, scratch: _Scratch) -> int:
        require_active(self._op)
        balance = self._reward.balance_of(self._vault)
        self._global, delta = sync_inflow(self._global, balance)
        if delta > 0:
            scratch.reward_balance = balance
        return delta

    def _fold(self) -> None:
        principal_balance = self._principal.balance_of(self._vault)
        self._global = fold_into_accumulator(self._global, principal_balance)

    def _settle(self, scratch: _Scratch, address: str) -> None:
        acct = self._accounts.get(address)
        owed = pending_reward(acct.amount, self._global.acc_per_share, acct.reward_debt)
        if owed > 0:
            self._payout(scratch, address, owed)

    def _payout(self, scratch: _Scratch, to: str, requested: int) -> None:
        """Pay ``requested`` reward, or the whole on-hand balance if that is smaller."""
        available = self._reward.balance_of(self._vault)
        amount = min(requested, available)
        delivered = self._reward.transfer_out(to, amount) if amount > 0 else 0
        balance_after = self._reward.balance_of(self._vault)
        self._global = replace(self._global, tracked_reward_balance=balance_after)
        scratch.reward_balance = balance_after
        if delivered < requested:
            logger.warning(
                "Reward shortfall for %s: requested=%d delivered=%d available=%d",
                to,
                requested,
                delivered,
                available,
            )
        scratch.emit(VaultEvent(Event.REWARD_PAID, user=to, amount=delivered, requested=requested))

    def _withdraw(self, scratch: _Scratch, address: str, amount: int) -> None:
        require_active(self._op)
        account = self._accounts.get(address)
        if account.amount < amount:
            raise InsufficientBalanceError(amount, account.amount)
        self._fold()
        self._settle(scratch, address)
        if amount > 0:
            account = replace(account, amount=checked_sub(account.amount, amount, what="amount"))
            delivered = self._principal.transfer_out(address, amount)
            if delivered < amount:
                logger.warning("Principal ledger delivered %d of %d to %s", delivered, amount, address)
        self._write_debt(scratch, address, account)
        scratch.emit(VaultEvent(Event.WITHDRAW, user=address, amount=amount))

    def _write_debt(self, scratch: _Scratch, address: str, account: UserAccount) -> None:
        updated = replace(
            account,
            reward_debt=accumulated_reward(account.amount, self._global.acc_per_share),
        )
        # A claim for an address that never staked leaves no record behind.
        if updated != ZERO_ACCOUNT or address in self._accounts:
            self._accounts.set(address, updated)
        scratch.settled[address] = updated

    def _transfer_admin(self, scratch: _Scratch, new_admin: str) -> None:
        old = self._op.admin
        self._op = replace(self._op, admin=new_admin)
        scratch.emit(VaultEvent(Event.ADMIN_TRANSFERRED, old_admin=old, new_admin=new_admin))
        logger.info("Admin transferred: %s -> %s", old, new_admin)


# -- Dispatch table -----------------------------------------------------------

Handler = Callable[[VaultEngine, ActionParams], tuple[VaultEvent, ...]]


def _do_deposit(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.deposit(p.caller, p.amount)


def _do_withdraw(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.withdraw(p.caller, p.amount)


def _do_claim(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.claim(p.caller, p.account)


def _do_update_pending_rewards(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    engine.update_pending_rewards(p.caller)
    return ()


def _do_pause(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.pause(p.caller)


def _do_resume(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.resume(p.caller)


def _do_set_new_admin(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.set_new_admin(p.caller, p.new_admin)  # type: ignore[arg-type]


def _do_burn_admin(engine: VaultEngine, p: ActionParams) -> tuple[VaultEvent, ...]:
    return engine.burn_admin(p.caller)


_DISPATCH: dict[Action, Handler] = {
    Action.DEPOSIT: _do_deposit,
    Action.WITHDRAW: _do_withdraw,
    Action.CLAIM: _do_claim,
    Action.UPDATE_PENDING_REWARDS: _do_update_pending_rewards,
    Action.PAUSE: _do_pause,
    Action.RESUME: _do_resume,
    Action.SET_NEW_ADMIN: _do_set_new_admin,
    Action.BURN_ADMIN: _do_burn_admin,
}
