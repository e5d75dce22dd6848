from __future__ import annotations

import json
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
EXAMPLE = ROOT / "examples" / "scenarios" / "two_stakers.yaml"


def test_bundled_scenario_exits_zero(capsys) -> None:
    from tools.vault_scenario import main

    assert main([str(EXAMPLE), "--compact"]) == 0
    out = capsys.readouterr().out
    report = json.loads(out)
    assert report["ok"] is True
    assert len(out.strip().splitlines()) == 1


def test_mismatch_exits_one(tmp_path: Path, capsys) -> None:
    from tools.vault_scenario import main

    text = EXAMPLE.read_text(encoding="utf-8").replace("expect: unauthorized", "expect: ok")
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    assert main([str(path)]) == 1
    assert json.loads(capsys.readouterr().out)["failures"] == [12]


def test_unreadable_input_exits_two(tmp_path: Path, capsys) -> None:
    from tools.vault_scenario import main

    assert main([str(tmp_path / "missing.yaml")]) == 2
    bad = tmp_path / "bad.yaml"
    bad.write_text("steps: [unclosed\n", encoding="utf-8")
    assert main([str(bad)]) == 2
    assert "vault_scenario error" in capsys.readouterr().err
