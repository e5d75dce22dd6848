"""Pure fixed-point arithmetic for the staking vault.

Every function is stateless and operates on plain Python ints. Quantities are
modelled as unsigned 256-bit words: results outside ``[0, MAX_UINT256]`` raise
``VaultArithmeticError`` instead of wrapping or silently growing.

Rounding: products are formed in full before the single floor division
(multiply, then divide), so every result is ``floor(a * b / d)`` exactly.
"""

from __future__ import annotations

from .errors import VaultArithmeticError

ACC_SCALE: int = 10**18
MAX_UINT256: int = 2**256 - 1


# -- Checked word arithmetic ------------------------------------------------

def _check_word(value: int, what: str) -> int:
    if value < 0:
        raise VaultArithmeticError(f"underflow in {what}")
    if value > MAX_UINT256:
        raise VaultArithmeticError(f"overflow in {what}")
    return value


def checked_add(a: int, b: int, *, what: str = "add") -> int:
    return _check_word(a + b, what)


def checked_sub(a: int, b: int, *, what: str = "sub") -> int:
    return _check_word(a - b, what)


def checked_mul(a: int, b: int, *, what: str = "mul") -> int:
    return _check_word(a * b, what)


def mul_div(a: int, b: int, d: int, *, what: str = "mul_div") -> int:
    """``floor(a * b / d)`` with the intermediate product range-checked."""
    if d <= 0:
        raise VaultArithmeticError(f"division by zero in {what}")
    return checked_mul(a, b, what=what) // d


# -- Accumulator helpers ------------------------------------------------------

def accumulated_reward(amount: int, acc_per_share: int) -> int:
    """Reward units owed to ``amount`` principal at accumulator ``acc_per_share``."""
    return mul_div(amount, acc_per_share, ACC_SCALE, what="accumulated_reward")


def acc_increment(pending_rewards: int, principal_balance: int) -> int:
    """Accumulator increase from spreading ``pending_rewards`` over ``principal_balance``."""
    return mul_div(pending_rewards, ACC_SCALE, principal_balance, what="acc_increment")


def pending_reward(amount: int, acc_per_share: int, reward_debt: int) -> int:
    return checked_sub(
        accumulated_reward(amount, acc_per_share), reward_debt, what="pending_reward"
    )
