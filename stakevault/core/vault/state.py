"""Snapshot construction and serialization for the staking vault.

`initial_state()` returns the empty snapshot (no accounts, zero accumulator,
active, null admin).

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all
valid snapshots. The dict form is JSON-compatible; feed it to
`canonical_json_bytes` for a deterministic encoding.
"""

from __future__ import annotations

from typing import Any, Mapping

from ...state.accounts import UserAccount
from ...state.canonical import canonical_address
from .math import MAX_UINT256
from .types import GlobalState, OperationalState, VaultSnapshot

# Auto-derived from the dataclass field definitions (single source of truth).
GLOBAL_VAR_NAMES: tuple[str, ...] = tuple(GlobalState.__dataclass_fields__)
ACCOUNT_VAR_NAMES: tuple[str, ...] = tuple(UserAccount.__dataclass_fields__)


def initial_state() -> VaultSnapshot:
    return VaultSnapshot()


def state_to_dict(snapshot: VaultSnapshot) -> dict[str, Any]:
    """Serialize a VaultSnapshot to a plain dict. Accounts are emitted sorted by address."""
    return {
        "global": {name: getattr(snapshot.global_state, name) for name in GLOBAL_VAR_NAMES},
        "operational": {
            "paused": snapshot.operational.paused,
            "admin": snapshot.operational.admin,
        },
        "accounts": [
            {"address": addr, **{name: getattr(acct, name) for name in ACCOUNT_VAR_NAMES}}
            for addr, acct in sorted(snapshot.accounts.items())
        ],
    }


def _uint(d: Mapping[str, Any], name: str) -> int:
    val = d[name]
    if not isinstance(val, int) or isinstance(val, bool):
        raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
    if val < 0 or val > MAX_UINT256:
        raise ValueError(f"state var {name!r} out of uint256 range")
    return int(val)  # normalize int subclasses


def state_from_dict(d: Mapping[str, Any]) -> VaultSnapshot:
    """Deserialize a dict to a VaultSnapshot. Raises KeyError on missing fields."""
    g = d["global"]
    global_state = GlobalState(**{name: _uint(g, name) for name in GLOBAL_VAR_NAMES})

    op = d["operational"]
    paused = op["paused"]
    if not isinstance(paused, bool):
        raise TypeError("operational.paused must be bool")
    operational = OperationalState(paused=paused, admin=canonical_address(op["admin"], name="admin"))

    accounts: dict[str, UserAccount] = {}
    for entry in d["accounts"]:
        addr = canonical_address(entry["address"])
        if addr in accounts:
            raise ValueError(f"duplicate account {addr}")
        accounts[addr] = UserAccount(**{name: _uint(entry, name) for name in ACCOUNT_VAR_NAMES})

    return VaultSnapshot(global_state=global_state, operational=operational, accounts=accounts)
