"""Run configuration for faultline."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path

from faultline.commands import DEFAULT_NUM_NODES
from faultline.fault_logging import FAULT_DEBUG
from faultline.retry import RetryPolicy

DEFAULT_STEPS = 20


@dataclass
class FaultConfig:
    """Settings for one fault injection run."""

    num_nodes: int = DEFAULT_NUM_NODES
    steps: int = DEFAULT_STEPS
    seed: int | None = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    debug: bool = FAULT_DEBUG
    verbose: bool = False
    run_name: str = "default"
    project_root: Path = field(default_factory=Path.cwd)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faultline",
        description="Inject crash and send-omission faults into a cluster under a fault budget",
    )
    parser.add_argument("--nodes", "-n", type=int, default=DEFAULT_NUM_NODES, help="Cluster size")
    parser.add_argument("--project-root", type=Path, default=None, help="Where to keep .faultline/")
    parser.add_argument("--no-debug", action="store_true", help="Drop debug diagnostics")
    parser.add_argument("--verbose", "-v", action="store_true", help="Echo diagnostics to the console")

    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Run a random fault sequence against a simulated cluster")
    run.add_argument("--steps", "-s", type=int, default=DEFAULT_STEPS, help="Commands to generate")
    run.add_argument("--seed", type=int, default=None, help="Random seed")
    run.add_argument("--name", default="default", help="Run name for the log directory")
    run.add_argument("--max-attempts", type=int, default=RetryPolicy.max_attempts, help="Stop attempts per crash")
    run.add_argument("--base-delay", type=float, default=RetryPolicy.base_delay, help="First retry delay (s)")
    run.add_argument("--max-delay", type=float, default=RetryPolicy.max_delay, help="Retry delay cap (s)")

    subparsers.add_parser("shell", help="Interactive fault shell (default)")

    return parser


def config_from_args(args: argparse.Namespace) -> FaultConfig:
    """Build a FaultConfig from parsed command-line arguments."""
    config = FaultConfig(
        num_nodes=args.nodes,
        debug=not args.no_debug,
        verbose=args.verbose,
        project_root=args.project_root or Path.cwd(),
    )
    if getattr(args, "command", None) == "run":
        config.steps = args.steps
        config.seed = args.seed
        config.run_name = args.name
        config.retry = RetryPolicy(
            max_attempts=args.max_attempts,
            base_delay=args.base_delay,
            max_delay=args.max_delay,
        )
    return config
