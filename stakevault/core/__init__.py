"""
Core staking vault algorithms
"""

from .vault import (
    ACC_SCALE,
    Action,
    ActionParams,
    Event,
    GlobalState,
    StepResult,
    VaultEngine,
    VaultError,
    VaultEvent,
    VaultSnapshot,
)
from .vault.accumulator import fold_into_accumulator, sync_inflow

__all__ = [
    "ACC_SCALE",
    "Action",
    "ActionParams",
    "Event",
    "GlobalState",
    "StepResult",
    "VaultEngine",
    "VaultError",
    "VaultEvent",
    "VaultSnapshot",
    "fold_into_accumulator",
    "sync_inflow",
]
