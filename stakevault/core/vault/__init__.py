"""`vault`: reward-accounting kernel of the staking vault.

- integer-only fixed-point arithmetic (scale 1e18), range-checked as uint256,
- immutable global/operational records replaced inside a guarded section,
- fail-closed guards and post-state invariant checks,
- all-or-nothing operations with rollback of journaled collaborators.

Public API:
- `VaultEngine(principal=..., reward=..., authority=..., admin=...)`
- `engine.execute(params) -> StepResult`
- `engine.execute_or_raise(params) -> StepResult` (raises on rejection)
- `initial_state()`, `state_to_dict()`, `state_from_dict()` for snapshots
"""

from .capabilities import AccessAuthority, AssetLedger, Journaled
from .engine import VaultEngine
from .errors import (
    AlreadyInStateError,
    InactiveVaultError,
    InsufficientBalanceError,
    InvalidArgumentError,
    ReentrancyError,
    TransferError,
    UnauthorizedError,
    VaultArithmeticError,
    VaultError,
    VaultInvariantError,
)
from .math import ACC_SCALE, MAX_UINT256
from .state import initial_state, state_from_dict, state_to_dict
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

__all__ = [
    "VaultEngine",
    "AccessAuthority",
    "AssetLedger",
    "Journaled",
    "ACC_SCALE",
    "MAX_UINT256",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
    "Action",
    "ActionParams",
    "Event",
    "GlobalState",
    "OperationalState",
    "StepResult",
    "VaultEvent",
    "VaultSnapshot",
    "VaultError",
    "AlreadyInStateError",
    "InactiveVaultError",
    "InsufficientBalanceError",
    "InvalidArgumentError",
    "ReentrancyError",
    "TransferError",
    "UnauthorizedError",
    "VaultArithmeticError",
    "VaultInvariantError",
]
