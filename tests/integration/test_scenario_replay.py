from __future__ import annotations

from pathlib import Path

import pytest

from stakevault.integration.scenario import ScenarioError, load_scenario, run_scenario

ROOT = Path(__file__).resolve().parents[2]
EXAMPLE = ROOT / "examples" / "scenarios" / "two_stakers.yaml"

VAULT = "0x" + "00" * 19 + "aa"
ADMIN = "0x" + "00" * 19 + "a1"
ALICE = "0x" + "00" * 19 + "01"
BOB = "0x" + "00" * 19 + "02"
FUNDER = "0x" + "00" * 19 + "f0"


def _doc(steps: list, mint: dict | None = None) -> dict:
    return {
        "vault": {
            "vault_address": VAULT,
            "principal_asset": "0x" + "11" * 32,
            "reward_asset": "0x" + "22" * 32,
            "admin": ADMIN,
            "pausers": [ADMIN],
        },
        "mint": mint if mint is not None else {"principal": [[ALICE, 100]], "reward": [[FUNDER, 100]]},
        "steps": steps,
    }


def test_bundled_example_passes() -> None:
    report = run_scenario(load_scenario(EXAMPLE))
    assert report.ok, report.failures
    assert report.balances["reward"] == {ALICE: 60, BOB: 40, FUNDER: 900}
    assert report.balances["principal"] == {ALICE: 40, BOB: 100, VAULT: 60}
    assert report.final_state["operational"]["admin"] == "0x" + "00" * 20
    assert report.final_state["global"]["tracked_reward_balance"] == 0


def test_events_reported() -> None:
    report = run_scenario(
        _doc(
            [
                {"action": "deposit", "caller": ALICE, "amount": 10},
                {"action": "fund_rewards", "sender": FUNDER, "amount": 5},
                {"action": "update_pending_rewards"},
                {"action": "claim", "caller": ALICE},
            ]
        )
    )
    assert report.steps[0].events == ({"event": "Deposit", "user": ALICE, "amount": 10},)
    assert report.steps[2].events == ()
    assert report.steps[3].events[0] == {"event": "RewardPaid", "user": ALICE, "amount": 5, "requested": 5}


def test_mismatched_expectation_is_a_failure() -> None:
    report = run_scenario(_doc([{"action": "withdraw", "caller": ALICE, "amount": 1, "expect": "ok"}]))
    assert not report.ok
    assert report.failures == [0]
    assert report.steps[0].rejection == "insufficient_balance"
    assert report.to_dict()["ok"] is False


def test_ledger_transfer_failure_is_a_rejection() -> None:
    report = run_scenario(
        _doc([{"action": "transfer", "asset": "principal", "sender": BOB, "recipient": ALICE, "amount": 1,
               "expect": "transfer_failed"}])
    )
    assert report.ok


@pytest.mark.parametrize(
    "doc",
    [
        [],
        {"vault": {}, "steps": []},
        _doc([{"action": "explode"}]),
        _doc(["deposit"]),
        _doc([{"action": "transfer", "asset": "gold", "sender": ALICE, "recipient": BOB, "amount": 1}]),
        _doc([], mint={"gold": [[ALICE, 1]]}),
        _doc([], mint={"principal": [[ALICE, -1]]}),
    ],
)
def test_malformed_documents(doc) -> None:
    with pytest.raises(ScenarioError):
        run_scenario(doc)


def test_load_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "s.yaml"
    path.write_text("42\n", encoding="utf-8")
    with pytest.raises(ScenarioError):
        load_scenario(path)
