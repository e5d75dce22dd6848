"""
Access authorities for the pause/resume gate.

The vault asks `authority.is_allowed(caller, action)` with action names
`"pause"` and `"resume"`. This is independent of the vault's admin role.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Mapping

from ..state.canonical import canonical_address


class AllowListAuthority:
    """Grants each listed address a fixed set of action names."""

    def __init__(self, grants: Mapping[str, Iterable[str]] | None = None) -> None:
        self._grants: Dict[str, FrozenSet[str]] = {}
        for address, actions in (grants or {}).items():
            self._grants[canonical_address(address)] = frozenset(actions)

    @classmethod
    def for_pausers(cls, pausers: Iterable[str]) -> "AllowListAuthority":
        return cls({addr: ("pause", "resume") for addr in pausers})

    def grant(self, address: str, action: str) -> None:
        addr = canonical_address(address)
        self._grants[addr] = self._grants.get(addr, frozenset()) | {action}

    def revoke(self, address: str, action: str) -> None:
        addr = canonical_address(address)
        remaining = self._grants.get(addr, frozenset()) - {action}
        if remaining:
            self._grants[addr] = remaining
        else:
            self._grants.pop(addr, None)

    def is_allowed(self, caller: str, action: str) -> bool:
        try:
            addr = canonical_address(caller)
        except (TypeError, ValueError):
            return False
        return action in self._grants.get(addr, frozenset())


class DenyAllAuthority:
    def is_allowed(self, caller: str, action: str) -> bool:
        return False
