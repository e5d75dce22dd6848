#!/usr/bin/env python3
"""
Replay a staking vault scenario and print the report as JSON.

Input format: a YAML document with `vault`, `mint` and `steps` sections
(see `stakevault/integration/scenario.py`).

Exit codes:
  0  every step matched its `expect` (or had none)
  1  at least one step did not match its `expect`
  2  the scenario file could not be read or is malformed

Example:
  python3 tools/vault_scenario.py examples/scenarios/two_stakers.yaml --log-level INFO
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from stakevault.integration.scenario import ScenarioError, load_scenario, run_scenario


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Replay a staking vault scenario (YAML) and print a JSON report.")
    p.add_argument("scenario", type=Path, help="Path to the scenario YAML file")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    p.add_argument("--compact", action="store_true", help="Print single-line JSON")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        report = run_scenario(load_scenario(args.scenario))
    except (OSError, yaml.YAMLError, ScenarioError) as exc:
        print(f"vault_scenario error: {exc}", file=sys.stderr)
        return 2

    if args.compact:
        print(json.dumps(report.to_dict(), sort_keys=True, separators=(",", ":")))
    else:
        print(json.dumps(report.to_dict(), sort_keys=True, indent=2))
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
