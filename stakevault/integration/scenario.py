"""
YAML scenario replay.

A scenario describes a vault, initial balances and a list of steps:

    vault: {...}                 # see `config.py`
    mint:
      principal: [["0x..01", 100]]
      reward: [["0x..0f", 1000]]
    steps:
      - {action: deposit, caller: "0x..01", amount: 50}
      - {action: fund_rewards, sender: "0x..0f", amount: 100}
      - {action: update_pending_rewards, caller: "0x..01"}
      - {action: withdraw, caller: "0x..01", amount: 60, expect: insufficient_balance}

Engine actions are the `Action` values. Two ledger actions exist only here:
`fund_rewards` (sender pushes reward tokens straight to the vault) and
`transfer` (asset: principal|reward, sender, recipient, amount).

`expect` is optional: `ok` or a rejection code. A step whose outcome differs
from its `expect` is recorded in `ScenarioReport.failures`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ..core.vault.errors import VaultError
from ..core.vault.state import state_to_dict
from ..core.vault.types import Action, ActionParams, Event, StepResult, VaultEvent
from .config import build_vault, config_from_mapping
from .ledger import InMemoryAssetLedger

logger = logging.getLogger("stakevault.integration.scenario")

LEDGER_ACTIONS = frozenset({"fund_rewards", "transfer"})
_ACTIONS_BY_NAME = {a.value: a for a in Action}


class ScenarioError(ValueError):
    """Malformed scenario document."""


@dataclass(frozen=True)
class StepOutcome:
    index: int
    action: str
    accepted: bool
    rejection: Optional[str] = None
    detail: Optional[str] = None
    events: Tuple[Dict[str, Any], ...] = ()


@dataclass
class ScenarioReport:
    steps: List[StepOutcome] = field(default_factory=list)
    failures: List[int] = field(default_factory=list)
    final_state: Dict[str, Any] = field(default_factory=dict)
    balances: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "failures": list(self.failures),
            "steps": [
                {
                    "index": s.index,
                    "action": s.action,
                    "accepted": s.accepted,
                    "rejection": s.rejection,
                    "detail": s.detail,
                    "events": list(s.events),
                }
                for s in self.steps
            ],
            "final_state": self.final_state,
            "balances": self.balances,
        }


def event_to_dict(event: VaultEvent) -> Dict[str, Any]:
    out: Dict[str, Any] = {"event": event.event.value}
    if event.user is not None:
        out["user"] = event.user
        out["amount"] = event.amount
    if event.event is Event.REWARD_PAID:
        out["requested"] = event.requested
    for name in ("old_admin", "new_admin", "admin"):
        v = getattr(event, name)
        if v is not None:
            out[name] = v
    return out


def _int_field(step: Mapping[str, Any], name: str, *, default: Optional[int] = None) -> int:
    v = step.get(name, default)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ScenarioError(f"step field {name!r} must be an int")
    return v


def _str_field(step: Mapping[str, Any], name: str) -> str:
    v = step.get(name)
    if not isinstance(v, str) or not v:
        raise ScenarioError(f"step field {name!r} must be a non-empty string")
    return v


def _mint(ledgers: Mapping[str, InMemoryAssetLedger], mint: Any) -> None:
    if mint is None:
        return
    if not isinstance(mint, Mapping):
        raise ScenarioError("mint must be a mapping of asset -> [[address, amount], ...]")
    for asset_key, rows in mint.items():
        ledger = ledgers.get(asset_key)
        if ledger is None:
            raise ScenarioError(f"unknown asset {asset_key!r} (expected principal or reward)")
        for row in rows or ():
            if not isinstance(row, (list, tuple)) or len(row) != 2:
                raise ScenarioError("mint rows must be [address, amount]")
            ledger.mint(row[0], row[1])


def _run_ledger_step(
    ledgers: Mapping[str, InMemoryAssetLedger], vault_address: str, name: str, step: Mapping[str, Any]
) -> StepResult:
    try:
        if name == "fund_rewards":
            ledgers["reward"].transfer(_str_field(step, "sender"), vault_address, _int_field(step, "amount"))
        else:
            asset_key = step.get("asset")
            ledger = ledgers.get(asset_key) if isinstance(asset_key, str) else None
            if ledger is None:
                raise ScenarioError("transfer step needs asset: principal|reward")
            ledger.transfer(
                _str_field(step, "sender"), _str_field(step, "recipient"), _int_field(step, "amount")
            )
    except VaultError as exc:
        return StepResult(accepted=False, rejection=exc.code, detail=str(exc))
    except ValueError as exc:
        if isinstance(exc, ScenarioError):
            raise
        return StepResult(accepted=False, rejection="invalid_argument", detail=str(exc))
    return StepResult(accepted=True)


def _params_for(action: Action, step: Mapping[str, Any]) -> ActionParams:
    kwargs: Dict[str, Any] = {"action": action}
    if "caller" in step:
        kwargs["caller"] = step["caller"]
    if "amount" in step:
        kwargs["amount"] = step["amount"]
    if "account" in step:
        kwargs["account"] = step["account"]
    if "new_admin" in step:
        kwargs["new_admin"] = step["new_admin"]
    return ActionParams(**kwargs)


def run_scenario(doc: Mapping[str, Any]) -> ScenarioReport:
    """Replay a parsed scenario document and report every step."""
    if not isinstance(doc, Mapping):
        raise ScenarioError("scenario must be a mapping")
    try:
        cfg = config_from_mapping(doc.get("vault") or {})
    except (KeyError, TypeError, ValueError) as exc:
        raise ScenarioError(f"invalid vault config: {exc}") from exc

    engine, principal, reward = build_vault(cfg)
    ledgers = {"principal": principal, "reward": reward}
    try:
        _mint(ledgers, doc.get("mint"))
    except (TypeError, ValueError) as exc:
        raise ScenarioError(str(exc)) from exc

    steps = doc.get("steps") or []
    if not isinstance(steps, list):
        raise ScenarioError("steps must be a list")

    report = ScenarioReport()
    for index, step in enumerate(steps):
        if not isinstance(step, Mapping):
            raise ScenarioError(f"step {index} must be a mapping")
        name = step.get("action")
        if name in LEDGER_ACTIONS:
            result = _run_ledger_step(ledgers, cfg.vault_address, name, step)
        elif name in _ACTIONS_BY_NAME:
            result = engine.execute(_params_for(_ACTIONS_BY_NAME[name], step))
        else:
            raise ScenarioError(f"step {index}: unknown action {name!r}")

        outcome = StepOutcome(
            index=index,
            action=str(name),
            accepted=result.accepted,
            rejection=result.rejection,
            detail=result.detail,
            events=tuple(event_to_dict(e) for e in result.events),
        )
        report.steps.append(outcome)

        expect = step.get("expect")
        if expect is not None:
            actual = "ok" if result.accepted else result.rejection
            if actual != expect:
                logger.info("Step %d (%s): expected %s, got %s", index, name, expect, actual)
                report.failures.append(index)

    report.final_state = state_to_dict(engine.snapshot())
    report.balances = {
        key: dict(sorted(ledger.table.get_balances_for_asset(ledger.asset).items()))
        for key, ledger in ledgers.items()
    }
    return report


def load_scenario(path: Path | str) -> Dict[str, Any]:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(obj, Mapping):
        raise ScenarioError("scenario YAML must be a mapping")
    return dict(obj)
