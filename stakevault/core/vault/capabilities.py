"""Collaborator protocols consumed by the vault engine.

The engine never moves tokens or decides pause permissions itself; it is
handed one ``AssetLedger`` per asset and an ``AccessAuthority``. In-memory
implementations live in ``stakevault.integration``.

Each ledger must also implement ``Journaled``: the engine checkpoints it at
the start of every operation and rolls it back together with its own state
when the operation fails. A ledger whose transfers cannot be undone is
refused at construction.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class AssetLedger(Protocol):
    """Transfer primitives for one asset, bound to the vault's custody address."""

    def transfer_in(self, sender: str, amount: int) -> int:
        """Move ``amount`` from ``sender`` into the vault. Returns the amount received.

        Raises ``TransferError`` if the transfer cannot happen.
        """
        ...

    def transfer_out(self, recipient: str, amount: int) -> int:
        """Move up to ``amount`` from the vault to ``recipient``. Returns the amount delivered."""
        ...

    def balance_of(self, address: str) -> int:
        ...

    @property
    def custodian(self) -> str:
        """Address the vault's holdings are kept under."""
        ...


class AccessAuthority(Protocol):
    def is_allowed(self, caller: str, action: str) -> bool:
        ...


@runtime_checkable
class Journaled(Protocol):
    def checkpoint(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def commit(self) -> None:
        ...
