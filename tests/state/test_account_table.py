from __future__ import annotations

import pytest

from stakevault.state.accounts import ZERO_ACCOUNT, AccountTable, UserAccount

A = "0x" + "0a" * 20
B = "0x" + "0b" * 20


class TestUserAccount:
    def test_defaults_to_zero(self) -> None:
        assert UserAccount() == ZERO_ACCOUNT == UserAccount(0, 0)

    @pytest.mark.parametrize("kwargs", [{"amount": -1}, {"reward_debt": -5}])
    def test_negative_rejected(self, kwargs) -> None:
        with pytest.raises(ValueError):
            UserAccount(**kwargs)

    @pytest.mark.parametrize("kwargs", [{"amount": True}, {"reward_debt": 1.5}])
    def test_non_int_rejected(self, kwargs) -> None:
        with pytest.raises(TypeError):
            UserAccount(**kwargs)


class TestAccountTable:
    def test_absent_reads_as_zero(self) -> None:
        t = AccountTable()
        assert t.get(A) is ZERO_ACCOUNT
        assert A not in t
        assert len(t) == 0

    def test_keys_canonicalized(self) -> None:
        t = AccountTable()
        t.set(A.upper().replace("0X", "0x"), UserAccount(amount=1))
        assert A in t
        assert t.get(A).amount == 1

    def test_zero_record_is_kept(self) -> None:
        t = AccountTable()
        t.set(A, UserAccount(amount=5))
        t.set(A, ZERO_ACCOUNT)
        assert A in t
        assert t.get_all() == {A: ZERO_ACCOUNT}

    def test_total_staked(self) -> None:
        t = AccountTable()
        t.set(A, UserAccount(amount=5, reward_debt=1))
        t.set(B, UserAccount(amount=7))
        assert t.total_staked() == 12

    def test_rollback_removes_new_entries(self) -> None:
        t = AccountTable()
        t.set(A, UserAccount(amount=5))
        t.checkpoint()
        t.set(A, UserAccount(amount=6))
        t.set(B, UserAccount(amount=1))
        t.rollback()
        assert t.get_all() == {A: UserAccount(amount=5)}

    def test_commit_folds_into_parent(self) -> None:
        t = AccountTable()
        t.checkpoint()
        t.checkpoint()
        t.set(B, UserAccount(amount=1))
        t.commit()
        t.rollback()
        assert B not in t

    def test_set_requires_record(self) -> None:
        with pytest.raises(TypeError):
            AccountTable().set(A, {"amount": 1})
