"""Tests for stakevault/core/vault/math.py: checked uint256 fixed-point helpers."""

import pytest

from stakevault.core.vault.errors import VaultArithmeticError
from stakevault.core.vault.math import (
    ACC_SCALE,
    MAX_UINT256,
    acc_increment,
    accumulated_reward,
    checked_add,
    checked_sub,
    mul_div,
    pending_reward,
)


class TestCheckedWordArithmetic:
    def test_add_within_range(self):
        assert checked_add(1, 2) == 3

    def test_add_overflow(self):
        with pytest.raises(VaultArithmeticError, match="overflow"):
            checked_add(MAX_UINT256, 1)

    def test_sub_underflow(self):
        with pytest.raises(VaultArithmeticError, match="underflow in pending"):
            checked_sub(1, 2, what="pending")

    def test_mul_div_overflow_checked_before_division(self):
        # The quotient would fit, but the product does not.
        with pytest.raises(VaultArithmeticError):
            mul_div(MAX_UINT256, 2, 4)

    def test_mul_div_zero_divisor(self):
        with pytest.raises(VaultArithmeticError, match="division by zero"):
            mul_div(1, 1, 0)


class TestRounding:
    def test_multiply_before_divide(self):
        # 1 * 1e18 // 3 keeps 18 digits; dividing first would give 0.
        assert acc_increment(1, 3) == 333_333_333_333_333_333

    def test_accumulated_reward_floors(self):
        assert accumulated_reward(3, acc_increment(1, 3)) == 0
        assert accumulated_reward(3, acc_increment(2, 3)) == 1

    def test_pending_reward_consistent_units(self):
        # 50 principal at 3e18 with 100 already priced in: 150 - 100.
        assert pending_reward(50, 3 * ACC_SCALE, 100) == 50

    def test_pending_reward_underflow_is_fault(self):
        with pytest.raises(VaultArithmeticError):
            pending_reward(1, ACC_SCALE, 2)
