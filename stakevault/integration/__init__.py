"""
Collaborators and wiring for the staking vault
"""

from .access import AllowListAuthority, DenyAllAuthority
from .config import VaultConfig, apply_env_overrides, build_vault, config_from_mapping, load_config
from .ledger import InMemoryAssetLedger
from .scenario import ScenarioError, ScenarioReport, load_scenario, run_scenario

__all__ = [
    "AllowListAuthority",
    "DenyAllAuthority",
    "VaultConfig",
    "apply_env_overrides",
    "build_vault",
    "config_from_mapping",
    "load_config",
    "InMemoryAssetLedger",
    "ScenarioError",
    "ScenarioReport",
    "load_scenario",
    "run_scenario",
]
