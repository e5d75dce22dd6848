"""Exception types for the staking vault engine.

Every class carries a stable ``code`` string. ``VaultEngine.execute()`` turns
raised errors into rejected ``StepResult``s using that code, and
``execute_or_raise()`` re-raises them for callers that prefer exceptions.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for every rejected vault operation."""

    code = "vault_error"


class ReentrancyError(VaultError):
    """Raised when a guarded entry point is entered while another call holds the guard."""

    code = "reentrancy"


class InactiveVaultError(VaultError):
    """Raised when a gated operation is invoked while the vault is paused."""

    code = "inactive_vault"


class InsufficientBalanceError(VaultError):
    """Raised when a withdrawal asks for more principal than the account holds."""

    code = "insufficient_balance"

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"requested {requested} but account holds {available}")


class UnauthorizedError(VaultError):
    code = "unauthorized"


class InvalidArgumentError(VaultError):
    code = "invalid_argument"


class AlreadyInStateError(VaultError):
    """Raised by pause() when paused and by resume() when active."""

    code = "already_in_state"


class TransferError(VaultError):
    """Raised when an asset ledger refuses to move funds into the vault."""

    code = "transfer_failed"


class VaultArithmeticError(VaultError):
    """Raised on uint256 overflow or on an underflow that the invariants rule out."""

    code = "arithmetic"


class VaultInvariantError(VaultError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
