from __future__ import annotations

from pathlib import Path

import pytest

from stakevault.integration.config import (
    VaultConfig,
    apply_env_overrides,
    build_vault,
    config_from_mapping,
    load_config,
)

VAULT = "0x" + "aa" * 20
ADMIN = "0x" + "a1" * 20
PAUSER = "0x" + "a2" * 20
PRINCIPAL_ASSET = "0x" + "11" * 32
REWARD_ASSET = "0x" + "22" * 32

_YAML = f"""\
vault_address: "{VAULT}"
principal_asset: "{PRINCIPAL_ASSET}"
reward_asset: "{REWARD_ASSET}"
admin: "{ADMIN.upper().replace('0X', '0x')}"
pausers:
  - "{PAUSER}"
check_invariants: false
"""


def _cfg(**overrides) -> VaultConfig:
    base = dict(vault_address=VAULT, principal_asset=PRINCIPAL_ASSET, reward_asset=REWARD_ASSET, admin=ADMIN)
    base.update(overrides)
    return VaultConfig(**base)


def test_load_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "vault.yaml"
    path.write_text(_YAML, encoding="utf-8")
    cfg = load_config(path)
    assert cfg.admin == ADMIN
    assert cfg.pausers == (PAUSER,)
    assert cfg.check_invariants is False


def test_yaml_must_be_mapping(tmp_path: Path) -> None:
    path = tmp_path / "vault.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_config(path)


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValueError, match="unknown"):
        config_from_mapping(
            {
                "vault_address": VAULT,
                "principal_asset": PRINCIPAL_ASSET,
                "reward_asset": REWARD_ASSET,
                "admin": ADMIN,
                "fee_bps": 30,
            }
        )


def test_pausers_must_be_a_list() -> None:
    with pytest.raises(TypeError):
        config_from_mapping(
            {
                "vault_address": VAULT,
                "principal_asset": PRINCIPAL_ASSET,
                "reward_asset": REWARD_ASSET,
                "admin": ADMIN,
                "pausers": PAUSER,
            }
        )


def test_assets_must_differ() -> None:
    with pytest.raises(ValueError, match="differ"):
        _cfg(reward_asset=PRINCIPAL_ASSET)


def test_check_invariants_must_be_bool() -> None:
    with pytest.raises(TypeError):
        _cfg(check_invariants="yes")


class TestEnvOverrides:
    def test_no_env_returns_same_config(self) -> None:
        cfg = _cfg()
        assert apply_env_overrides(cfg, {}) is cfg

    def test_overrides_applied(self) -> None:
        env = {
            "STAKEVAULT_ADMIN": PAUSER,
            "STAKEVAULT_PAUSERS": f" {ADMIN} , {PAUSER},",
            "STAKEVAULT_CHECK_INVARIANTS": "off",
        }
        cfg = apply_env_overrides(_cfg(), env)
        assert cfg.admin == PAUSER
        assert cfg.pausers == (ADMIN, PAUSER)
        assert cfg.check_invariants is False

    def test_unparseable_bool_ignored(self) -> None:
        cfg = apply_env_overrides(_cfg(), {"STAKEVAULT_CHECK_INVARIANTS": "maybe"})
        assert cfg.check_invariants is True

    def test_bad_admin_rejected(self) -> None:
        with pytest.raises(ValueError):
            apply_env_overrides(_cfg(), {"STAKEVAULT_ADMIN": "0x1234"})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STAKEVAULT_PAUSERS", PAUSER)
        assert apply_env_overrides(_cfg()).pausers == (PAUSER,)


def test_build_vault_wires_shared_custody() -> None:
    engine, principal, reward = build_vault(_cfg(pausers=(PAUSER,)))
    assert principal.table is reward.table
    assert engine.vault_address == VAULT
    assert engine.get_admin() == ADMIN
    principal.mint(ADMIN, 10)
    engine.deposit(ADMIN, 10)
    assert principal.balance_of(VAULT) == 10
    engine.pause(PAUSER)
    assert engine.paused
