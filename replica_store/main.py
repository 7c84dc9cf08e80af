from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Iterable, List, Optional

from .config import StoreConfig
from .demo_scenarios import SCENARIOS, run_scenario
from .errors import StoreError
from .runtime import ReplicaStoreRuntime
from .shell import launch_shell


def _print_summary(summary: dict) -> None:
    print(f"\n=== Scenario: {summary.get('scenario')} ===")
    nodes = summary.get("nodes", {})
    print("  Nodes: " + ", ".join(f"{node_id}={state}" for node_id, state in nodes.items()))
    files = summary.get("files", [])
    if files:
        print("  Files:")
        for entry in files:
            replicas = " ".join(
                f"[node {loc['node_id']} {'UP' if loc['up'] else 'DOWN'}]" for loc in entry["replicas"]
            )
            print(f"    {entry['name']}: {replicas or 'no replicas'}")
    if summary.get("events"):
        print("  Events:")
        for line in summary["events"]:
            print(f"    {line}")
    extras = {k: v for k, v in summary.items() if k not in {"scenario", "nodes", "files", "events", "metrics"}}
    for key, value in extras.items():
        print(f"  {key}: {value}")
    if "metrics" in summary:
        print(f"  Metrics: {summary['metrics']}")


def _parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replicated file store simulator")
    parser.add_argument("--nodes", type=int, default=None, help="Number of storage nodes (default 4)")
    parser.add_argument(
        "--replication-factor",
        type=int,
        default=None,
        help="Target number of replicas per file (default 3)",
    )
    parser.add_argument(
        "--scenario",
        choices=["all", *SCENARIOS.keys()],
        default=None,
        help="Run a scripted scenario instead of the interactive shell",
    )
    parser.add_argument(
        "--max-events",
        type=int,
        default=25,
        help="Maximum number of events to capture per scenario",
    )
    parser.add_argument("--list", action="store_true", help="List available scenarios and exit")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit raw JSON summaries instead of formatted text",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def _build_config(args: argparse.Namespace) -> StoreConfig:
    cfg = StoreConfig.from_env()
    if args.nodes is not None:
        cfg.nodes.node_count = args.nodes
    if args.replication_factor is not None:
        cfg.replication.replication_factor = args.replication_factor
    return cfg


def main(argv: Optional[Iterable[str]] = None) -> None:
    args = _parse_args(argv)
    try:
        cfg = _build_config(args)
        cfg.validate()
    except StoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
    logging.basicConfig(
        level=getattr(logging, cfg.observability.log_level, logging.INFO),
        format="[%(asctime)s] %(levelname)s %(message)s",
    )

    if args.list:
        print("Available scenarios:")
        for name in SCENARIOS:
            print(f"  - {name}")
        return

    if args.scenario is None:
        launch_shell(ReplicaStoreRuntime.bootstrap(cfg))
        return

    scenario_names: List[str] = list(SCENARIOS.keys()) if args.scenario == "all" else [args.scenario]
    try:
        summaries = [run_scenario(name, event_limit=args.max_events, config=cfg) for name in scenario_names]
    except StoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.json:
        print(json.dumps(summaries, indent=2))
        return

    for summary in summaries:
        _print_summary(summary)


if __name__ == "__main__":
    main()
