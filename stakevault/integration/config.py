"""
Vault configuration: YAML file + environment overrides.

Example `vault.yaml`:

    vault_address: "0x00000000000000000000000000000000000000aa"
    principal_asset: "0x1111111111111111111111111111111111111111111111111111111111111111"
    reward_asset: "0x2222222222222222222222222222222222222222222222222222222222222222"
    admin: "0x00000000000000000000000000000000000000a1"
    pausers:
      - "0x00000000000000000000000000000000000000a1"
    check_invariants: true

Environment overrides (applied by `apply_env_overrides`):
- STAKEVAULT_ADMIN
- STAKEVAULT_PAUSERS (comma separated)
- STAKEVAULT_CHECK_INVARIANTS (1/0, true/false, yes/no, on/off)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from ..core.vault.engine import VaultEngine
from ..state.balances import BalanceTable
from ..state.canonical import canonical_address, canonical_asset_id
from .access import AllowListAuthority
from .ledger import InMemoryAssetLedger


_KNOWN_KEYS = frozenset(
    {"vault_address", "principal_asset", "reward_asset", "admin", "pausers", "check_invariants"}
)


@dataclass(frozen=True)
class VaultConfig:
    """
    Wiring parameters for one vault.

    `pausers` are granted both "pause" and "resume" by the access authority;
    the admin is not a pauser unless listed.
    """

    vault_address: str
    principal_asset: str
    reward_asset: str
    admin: str
    pausers: Tuple[str, ...] = field(default_factory=tuple)
    check_invariants: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "vault_address", canonical_address(self.vault_address, name="vault_address"))
        object.__setattr__(self, "principal_asset", canonical_asset_id(self.principal_asset, name="principal_asset"))
        object.__setattr__(self, "reward_asset", canonical_asset_id(self.reward_asset, name="reward_asset"))
        object.__setattr__(self, "admin", canonical_address(self.admin, name="admin"))
        object.__setattr__(
            self,
            "pausers",
            tuple(canonical_address(p, name="pauser") for p in self.pausers),
        )
        if self.principal_asset == self.reward_asset:
            raise ValueError("principal_asset and reward_asset must differ")
        if not isinstance(self.check_invariants, bool):
            raise TypeError("check_invariants must be a bool")


def _parse_bool(raw: str) -> Optional[bool]:
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return None


def config_from_mapping(obj: Mapping[str, Any]) -> VaultConfig:
    """Build a `VaultConfig` from a parsed mapping. Unknown keys are rejected."""
    if not isinstance(obj, Mapping):
        raise TypeError("vault config must be a mapping")
    unknown = set(obj) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"unknown vault config keys: {sorted(unknown)}")
    pausers = obj.get("pausers") or ()
    if isinstance(pausers, str) or not isinstance(pausers, (list, tuple)):
        raise TypeError("pausers must be a list of addresses")
    return VaultConfig(
        vault_address=obj["vault_address"],
        principal_asset=obj["principal_asset"],
        reward_asset=obj["reward_asset"],
        admin=obj["admin"],
        pausers=tuple(pausers),
        check_invariants=obj.get("check_invariants", True),
    )


def load_config(path: Path | str) -> VaultConfig:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(obj, Mapping):
        raise TypeError("config YAML must be a mapping")
    return config_from_mapping(obj)


def apply_env_overrides(cfg: VaultConfig, environ: Optional[Mapping[str, str]] = None) -> VaultConfig:
    env = os.environ if environ is None else environ
    changes: dict[str, Any] = {}

    admin = (env.get("STAKEVAULT_ADMIN") or "").strip()
    if admin:
        changes["admin"] = admin

    pausers = env.get("STAKEVAULT_PAUSERS")
    if pausers is not None and pausers.strip():
        changes["pausers"] = tuple(p.strip() for p in pausers.split(",") if p.strip())

    raw_check = env.get("STAKEVAULT_CHECK_INVARIANTS")
    if raw_check is not None:
        parsed = _parse_bool(raw_check)
        if parsed is not None:
            changes["check_invariants"] = parsed

    return replace(cfg, **changes) if changes else cfg


def build_vault(
    cfg: VaultConfig, table: Optional[BalanceTable] = None
) -> Tuple[VaultEngine, InMemoryAssetLedger, InMemoryAssetLedger]:
    """Wire an engine over two in-memory ledgers sharing one balance table."""
    shared = table if table is not None else BalanceTable()
    principal = InMemoryAssetLedger(cfg.principal_asset, cfg.vault_address, shared)
    reward = InMemoryAssetLedger(cfg.reward_asset, cfg.vault_address, shared)
    engine = VaultEngine(
        principal=principal,
        reward=reward,
        authority=AllowListAuthority.for_pausers(cfg.pausers),
        admin=cfg.admin,
        check_invariants=cfg.check_invariants,
    )
    return engine, principal, reward
