"""Guards for the staking vault engine.

- ``ReentrancyGuard``: single-flag mutual exclusion, acquired with a context
  manager so every exit path (return or raise) releases it.
- pause gate, admin and authority checks: one ``require_*`` function each,
  raising the matching ``VaultError`` and mutating nothing.

The admin role and the access authority are separate checks on purpose; they
gate disjoint sets of operations.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ...state.canonical import canonical_address, is_null_address
from .capabilities import AccessAuthority
from .errors import (
    AlreadyInStateError,
    InactiveVaultError,
    InvalidArgumentError,
    ReentrancyError,
    UnauthorizedError,
)
from .types import OperationalState

PAUSE_ACTION = "pause"
RESUME_ACTION = "resume"


class ReentrancyGuard:
    def __init__(self) -> None:
        self._entered = False

    @property
    def locked(self) -> bool:
        return self._entered

    @contextmanager
    def hold(self, name: str = "call") -> Iterator[None]:
        if self._entered:
            raise ReentrancyError(f"reentrant call to {name}")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False


# -- Pause gate -------------------------------------------------------------

def require_active(op: OperationalState) -> None:
    if op.paused:
        raise InactiveVaultError("vault is paused")


def require_pausable(op: OperationalState) -> None:
    if op.paused:
        raise AlreadyInStateError("vault is already paused")


def require_resumable(op: OperationalState) -> None:
    if not op.paused:
        raise AlreadyInStateError("vault is not paused")


# -- Identity checks ----------------------------------------------------------

def require_admin(op: OperationalState, caller: str) -> None:
    # A burned admin is the null address and matches no caller, not even a null one.
    if is_null_address(op.admin) or caller != op.admin:
        raise UnauthorizedError("caller is not the admin")


def require_allowed(authority: AccessAuthority, caller: str, action: str) -> None:
    if not authority.is_allowed(caller, action):
        raise UnauthorizedError(f"caller is not allowed to {action}")


def require_address(address: object, *, name: str, allow_null: bool = True) -> str:
    """Canonicalize ``address`` or raise ``InvalidArgumentError``."""
    if not isinstance(address, str):
        raise InvalidArgumentError(f"{name} must be an address string")
    try:
        addr = canonical_address(address, name=name)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(str(exc)) from exc
    if not allow_null and is_null_address(addr):
        raise InvalidArgumentError(f"{name} must not be the null address")
    return addr


def require_amount(amount: object) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidArgumentError("amount must be an int")
    if amount < 0:
        raise InvalidArgumentError("amount must be non-negative")
    return amount
