"""Tests for stakevault/core/vault/state.py: snapshot serialization."""

import json

import pytest

from stakevault.core.vault import (
    ACC_SCALE,
    MAX_UINT256,
    GlobalState,
    OperationalState,
    VaultSnapshot,
    initial_state,
    state_from_dict,
    state_to_dict,
)
from stakevault.state.accounts import UserAccount
from stakevault.state.canonical import NULL_ADDRESS, canonical_json_bytes

ADMIN = "0x" + "a1" * 20
ALICE = "0x" + "01" * 20
BOB = "0x" + "02" * 20


def _sample() -> VaultSnapshot:
    return VaultSnapshot(
        global_state=GlobalState(acc_per_share=3 * ACC_SCALE, pending_rewards=7, tracked_reward_balance=57),
        operational=OperationalState(paused=True, admin=ADMIN),
        accounts={
            BOB: UserAccount(amount=10, reward_debt=30),
            ALICE: UserAccount(amount=50, reward_debt=150),
        },
    )


def test_initial_state():
    s = initial_state()
    assert s.global_state == GlobalState()
    assert s.operational.admin == NULL_ADDRESS
    assert not s.operational.paused
    assert dict(s.accounts) == {}


def test_round_trip():
    s = _sample()
    assert state_from_dict(state_to_dict(s)) == s


def test_accounts_sorted_and_json_stable():
    d = state_to_dict(_sample())
    assert [a["address"] for a in d["accounts"]] == [ALICE, BOB]
    encoded = canonical_json_bytes(d)
    assert state_from_dict(json.loads(encoded)) == _sample()


def test_addresses_canonicalized_on_load():
    d = state_to_dict(_sample())
    d["accounts"][0]["address"] = ALICE[2:]
    assert ALICE in state_from_dict(d).accounts


class TestRejects:
    def test_missing_field(self):
        d = state_to_dict(_sample())
        del d["global"]["pending_rewards"]
        with pytest.raises(KeyError):
            state_from_dict(d)

    @pytest.mark.parametrize("bad", [True, "1", 1.0])
    def test_non_int(self, bad):
        d = state_to_dict(_sample())
        d["global"]["acc_per_share"] = bad
        with pytest.raises(TypeError):
            state_from_dict(d)

    @pytest.mark.parametrize("bad", [-1, MAX_UINT256 + 1])
    def test_out_of_range(self, bad):
        d = state_to_dict(_sample())
        d["accounts"][0]["amount"] = bad
        with pytest.raises(ValueError, match="uint256"):
            state_from_dict(d)

    def test_paused_must_be_bool(self):
        d = state_to_dict(_sample())
        d["operational"]["paused"] = 1
        with pytest.raises(TypeError):
            state_from_dict(d)

    def test_duplicate_account(self):
        d = state_to_dict(_sample())
        d["accounts"].append(dict(d["accounts"][0]))
        with pytest.raises(ValueError, match="duplicate"):
            state_from_dict(d)
