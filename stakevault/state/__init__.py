"""
State tables for the staking vault
"""

from .accounts import AccountTable, UserAccount, ZERO_ACCOUNT
from .balances import BalanceTable
from .canonical import NULL_ADDRESS, canonical_address, canonical_asset_id, canonical_json_bytes

__all__ = [
    "AccountTable",
    "UserAccount",
    "ZERO_ACCOUNT",
    "BalanceTable",
    "NULL_ADDRESS",
    "canonical_address",
    "canonical_asset_id",
    "canonical_json_bytes",
]
